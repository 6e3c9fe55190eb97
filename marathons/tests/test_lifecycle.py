from django.test import TestCase

from marathons import services
from marathons.models import Application, Invitation, OpenPosition, Participant, Team, TeamRequest
from marathons.payloads import InvitePayload, OpenPositionPayload
from .base import MarathonFixturesMixin


class DepartureCascadeTests(MarathonFixturesMixin, TestCase):
    def setUp(self):
        self.marathon = self.make_marathon()
        self.p1 = self.join(self.marathon, "p1")
        self.p2 = self.join(self.marathon, "p2")
        self.p3 = self.join(self.marathon, "p3")

    def test_leader_departure_leaves_democracy(self):
        team = self.make_team(self.marathon, [self.p1, self.p2, self.p3], decision_system=Team.DECISION_DICTATORSHIP)

        outcome = services.leave_team(self.actor(self.p1))
        services.leave_marathon(self.marathon, self.actor(self.p1))

        self.assertTrue(outcome.team_became_democracy)
        team.refresh_from_db()
        self.assertEqual(team.member_count, 2)
        self.assertEqual(team.decision_system, Team.DECISION_DEMOCRACY)
        self.assertIsNone(team.leader_id)
        self.assertFalse(Participant.objects.filter(pk=self.p1.pk).exists())

    def test_last_member_departure_dissolves_team(self):
        team = self.make_team(self.marathon, [self.p1], decision_system=Team.DECISION_DICTATORSHIP)
        services.create_team_request(team, self.actor(self.p1), OpenPositionPayload(role="artist"))
        services.create_team_request(team, self.actor(self.p1), InvitePayload(participant_id=self.p3.pk))
        approved = TeamRequest.objects.filter(team=team).values_list("pk", flat=True)
        approved = list(approved)
        application = services.create_application(team, self.actor(self.p2))
        invitation = Invitation.objects.get(participant=self.p3)

        outcome = services.leave_team(self.actor(self.p1))

        self.assertTrue(outcome.team_deleted)
        self.assertFalse(Team.objects.filter(pk=team.pk).exists())
        self.assertFalse(OpenPosition.objects.filter(marathon=self.marathon).exists())
        application.refresh_from_db()
        invitation.refresh_from_db()
        self.assertEqual(application.status, Application.STATUS_REJECTED)
        self.assertEqual(invitation.status, Invitation.STATUS_INVALIDATED)
        # Resolved history survives with the team reference cleared
        self.assertEqual(
            TeamRequest.objects.filter(pk__in=approved, status=TeamRequest.STATUS_APPROVED, team__isnull=True).count(),
            2,
        )

    def test_departure_withdraws_own_pending_artifacts(self):
        team = self.make_team(self.marathon, [self.p1], name="Mine")
        other = self.make_team(self.marathon, [self.p2], name="Other", decision_system=Team.DECISION_DICTATORSHIP)
        resolved = Application.objects.create(
            marathon=self.marathon, team=other, participant=self.p3, status=Application.STATUS_REJECTED
        )
        pending = services.create_application(other, self.actor(self.p3))
        services.create_team_request(other, self.actor(self.p2), InvitePayload(participant_id=self.p3.pk))

        services.depart(self.p3)

        pending.refresh_from_db()
        resolved.refresh_from_db()
        self.assertEqual(pending.status, Application.STATUS_CANCELLED)
        self.assertEqual(resolved.status, Application.STATUS_REJECTED)
        self.assertEqual(Invitation.objects.get(participant=self.p3).status, Invitation.STATUS_INVALIDATED)
        self.assertMemberCountConsistent(team)

    def test_depart_twice_is_harmless(self):
        team = self.make_team(self.marathon, [self.p1, self.p2])

        first = services.depart(self.p2)
        second = services.depart(self.p2)

        self.assertTrue(first.removed_from_team)
        self.assertFalse(second.removed_from_team)
        self.assertMemberCountConsistent(team)
        self.assertEqual(team.member_count, 1)
