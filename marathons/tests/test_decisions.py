from django.test import TestCase
from rest_framework.exceptions import ValidationError

from core.exceptions import Conflict, Forbidden, NotFound
from marathons import services
from marathons.models import OpenPosition, Participant, Team, TeamRequest, TeamRequestVote
from marathons.payloads import (
    ChangeDecisionSystemPayload,
    InvitePayload,
    KickPayload,
    OpenPositionPayload,
    TransferLeadPayload,
    UpdateSettingsPayload,
)
from .base import MarathonFixturesMixin


class MajorityArithmeticTests(TestCase):
    def test_majority_is_floor_half_plus_one(self):
        self.assertEqual(services.majority_for(1), 1)
        self.assertEqual(services.majority_for(2), 2)
        self.assertEqual(services.majority_for(4), 3)
        self.assertEqual(services.majority_for(5), 3)


class DemocracyVotingTests(MarathonFixturesMixin, TestCase):
    def setUp(self):
        self.marathon = self.make_marathon()
        self.members = [self.join(self.marathon, f"m{i}") for i in range(1, 6)]
        self.team = self.make_team(self.marathon, self.members)

    def test_kick_needs_majority_of_five(self):
        """Two approvals keep the request pending; the third removes the member."""
        target = self.members[4]
        request = services.create_team_request(self.team, self.actor(self.members[0]), KickPayload(member_id=target.pk))
        self.assertEqual(request.status, TeamRequest.STATUS_PENDING)

        services.vote(request, self.actor(self.members[0]), "approve")
        services.vote(request, self.actor(self.members[1]), "approve")
        request.refresh_from_db()
        self.assertEqual(request.status, TeamRequest.STATUS_PENDING)

        services.vote(request, self.actor(self.members[2]), "approve")
        request.refresh_from_db()
        self.assertEqual(request.status, TeamRequest.STATUS_APPROVED)

        target.refresh_from_db()
        self.assertIsNone(target.team_id)
        self.team.refresh_from_db()
        self.assertEqual(self.team.member_count, 4)
        self.assertMemberCountConsistent(self.team)

    def test_reject_majority_rejects_without_effect(self):
        request = services.create_team_request(
            self.team, self.actor(self.members[0]), OpenPositionPayload(role="artist")
        )
        for member in self.members[1:4]:
            services.vote(request, self.actor(member), "reject")

        request.refresh_from_db()
        self.assertEqual(request.status, TeamRequest.STATUS_REJECTED)
        self.assertFalse(OpenPosition.objects.filter(team=self.team).exists())

    def test_revote_is_rejected_and_first_vote_stands(self):
        request = services.create_team_request(
            self.team, self.actor(self.members[0]), OpenPositionPayload(role="artist")
        )
        services.vote(request, self.actor(self.members[1]), "reject")

        with self.assertRaises(Conflict):
            services.vote(request, self.actor(self.members[1]), "approve")

        vote = TeamRequestVote.objects.get(request=request, participant=self.members[1])
        self.assertEqual(vote.vote, TeamRequestVote.VOTE_REJECT)

    def test_vote_errors(self):
        outsider = self.join(self.marathon, "outsider")
        request = services.create_team_request(
            self.team, self.actor(self.members[0]), OpenPositionPayload(role="artist")
        )

        with self.assertRaises(Forbidden):
            services.vote(request, self.actor(outsider), "approve")
        with self.assertRaises(ValidationError):
            services.vote(request, self.actor(self.members[0]), "maybe")

        for member in self.members[:3]:
            services.vote(request, self.actor(member), "approve")
        with self.assertRaises(Conflict):
            services.vote(request, self.actor(self.members[3]), "approve")

    def test_decide_is_forbidden_in_democracy(self):
        request = services.create_team_request(
            self.team, self.actor(self.members[0]), OpenPositionPayload(role="artist")
        )
        with self.assertRaises(Forbidden):
            services.decide(request, self.actor(self.members[0]), "approve")

    def test_duplicate_pending_type_conflicts(self):
        services.create_team_request(self.team, self.actor(self.members[0]), OpenPositionPayload(role="artist"))

        with self.assertRaises(Conflict):
            services.create_team_request(self.team, self.actor(self.members[1]), OpenPositionPayload(role="coder"))

        # A different type is fine
        services.create_team_request(self.team, self.actor(self.members[1]), KickPayload(member_id=self.members[4].pk))

    def test_list_team_requests_reports_tallies_and_own_vote(self):
        request = services.create_team_request(
            self.team, self.actor(self.members[0]), OpenPositionPayload(role="artist")
        )
        services.vote(request, self.actor(self.members[0]), "approve")
        services.vote(request, self.actor(self.members[1]), "reject")

        listed = services.list_team_requests(self.team, self.actor(self.members[0])).get(pk=request.pk)
        self.assertEqual(listed.approve_count, 1)
        self.assertEqual(listed.reject_count, 1)
        self.assertEqual(listed.my_vote, "approve")

        outsider = self.join(self.marathon, "outsider")
        with self.assertRaises(NotFound):
            services.list_team_requests(self.team, self.actor(outsider))


class DictatorshipDecisionTests(MarathonFixturesMixin, TestCase):
    def setUp(self):
        self.marathon = self.make_marathon()
        self.leader = self.join(self.marathon, "leader")
        self.member = self.join(self.marathon, "member")
        self.other = self.join(self.marathon, "other")
        self.team = self.make_team(
            self.marathon, [self.leader, self.member, self.other], decision_system=Team.DECISION_DICTATORSHIP
        )

    def test_leader_proposal_executes_immediately(self):
        request = services.create_team_request(self.team, self.actor(self.leader), OpenPositionPayload(role="artist"))

        request.refresh_from_db()
        self.assertEqual(request.status, TeamRequest.STATUS_APPROVED)
        self.assertEqual(request.decided_by_id, self.leader.pk)
        self.assertFalse(request.votes.exists())
        self.assertTrue(OpenPosition.objects.filter(team=self.team, role="artist").exists())

    def test_member_proposal_waits_for_leader(self):
        request = services.create_team_request(self.team, self.actor(self.member), OpenPositionPayload(role="artist"))
        self.assertEqual(request.status, TeamRequest.STATUS_PENDING)

        with self.assertRaises(Forbidden):
            services.decide(request, self.actor(self.member), "approve")
        with self.assertRaises(Forbidden):
            services.vote(request, self.actor(self.member), "approve")

        services.decide(request, self.actor(self.leader), "approve")
        request.refresh_from_db()
        self.assertEqual(request.status, TeamRequest.STATUS_APPROVED)
        self.assertIsNotNone(request.decided_at)
        self.assertTrue(OpenPosition.objects.filter(team=self.team).exists())

        with self.assertRaises(Conflict):
            services.decide(request, self.actor(self.leader), "reject")

    def test_leader_rejection_has_no_effect(self):
        request = services.create_team_request(
            self.team, self.actor(self.member), KickPayload(member_id=self.other.pk)
        )
        services.decide(request, self.actor(self.leader), "reject")

        request.refresh_from_db()
        self.assertEqual(request.status, TeamRequest.STATUS_REJECTED)
        self.other.refresh_from_db()
        self.assertEqual(self.other.team_id, self.team.pk)

    def test_transfer_lead_and_change_decision_system_keep_leader_invariant(self):
        services.create_team_request(self.team, self.actor(self.leader), TransferLeadPayload(member_id=self.member.pk))
        self.team.refresh_from_db()
        self.assertEqual(self.team.leader_id, self.member.pk)

        services.create_team_request(
            self.team, self.actor(self.member), ChangeDecisionSystemPayload(decision_system=Team.DECISION_DEMOCRACY)
        )
        self.assertLeaderInvariant(self.team)
        self.assertEqual(self.team.decision_system, Team.DECISION_DEMOCRACY)

    def test_kicking_the_leader_falls_back_to_democracy(self):
        request = services.create_team_request(
            self.team, self.actor(self.member), KickPayload(member_id=self.leader.pk)
        )
        services.decide(request, self.actor(self.leader), "approve")

        self.team.refresh_from_db()
        self.assertEqual(self.team.member_count, 2)
        self.assertLeaderInvariant(self.team)
        self.assertEqual(self.team.decision_system, Team.DECISION_DEMOCRACY)


class RequestCreationValidationTests(MarathonFixturesMixin, TestCase):
    def setUp(self):
        self.marathon = self.make_marathon()
        self.a = self.join(self.marathon, "a")
        self.b = self.join(self.marathon, "b")
        self.team = self.make_team(self.marathon, [self.a, self.b])
        self.free = self.join(self.marathon, "free")

    def test_author_must_be_member(self):
        with self.assertRaises(NotFound):
            services.create_team_request(self.team, self.actor(self.free), OpenPositionPayload(role="x"))

    def test_invite_target_checks(self):
        with self.assertRaises(NotFound):
            services.create_team_request(self.team, self.actor(self.a), InvitePayload(participant_id=999999))
        with self.assertRaises(Conflict):
            services.create_team_request(self.team, self.actor(self.a), InvitePayload(participant_id=self.b.pk))

        Participant.objects.filter(pk=self.free.pk).update(is_suspended=True)
        with self.assertRaises(Conflict):
            services.create_team_request(self.team, self.actor(self.a), InvitePayload(participant_id=self.free.pk))

    def test_change_decision_system_must_change_and_name_member(self):
        with self.assertRaises(Conflict):
            services.create_team_request(
                self.team, self.actor(self.a), ChangeDecisionSystemPayload(decision_system=Team.DECISION_DEMOCRACY)
            )
        with self.assertRaises(NotFound):
            services.create_team_request(
                self.team,
                self.actor(self.a),
                ChangeDecisionSystemPayload(decision_system=Team.DECISION_DICTATORSHIP, leader_id=self.free.pk),
            )

    def test_transfer_lead_requires_dictatorship(self):
        with self.assertRaises(Conflict):
            services.create_team_request(self.team, self.actor(self.a), TransferLeadPayload(member_id=self.b.pk))

    def test_update_settings_rejects_taken_name(self):
        self.make_team(self.marathon, [self.free], name="Taken")
        with self.assertRaises(Conflict):
            services.create_team_request(self.team, self.actor(self.a), UpdateSettingsPayload(changes={"name": "taken"}))

    def test_suspended_team_cannot_create_requests(self):
        Team.objects.filter(pk=self.team.pk).update(is_suspended=True)
        with self.assertRaises(Conflict):
            services.create_team_request(self.team, self.actor(self.a), OpenPositionPayload(role="x"))
