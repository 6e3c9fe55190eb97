import threading
from unittest import mock

from django.db import connection
from django.db.models.query import QuerySet
from django.test import TestCase, TransactionTestCase, skipUnlessDBFeature

from core.exceptions import Conflict
from marathons import services
from marathons.models import Application, Invitation, OpenPosition, Participant, Team, TeamRequest
from marathons.payloads import AcceptApplicationPayload, InvitePayload, KickPayload, OpenPositionPayload
from .base import MarathonFixturesMixin


class record_locks:
    """Collect the model of every queryset locked with select_for_update, in order."""

    def __enter__(self):
        self.models = []
        original = QuerySet.select_for_update
        models = self.models

        def select_for_update(qs, *args, **kwargs):
            models.append(qs.model)
            return original(qs, *args, **kwargs)

        self._patch = mock.patch.object(QuerySet, "select_for_update", select_for_update)
        self._patch.start()
        return self.models

    def __exit__(self, *exc):
        self._patch.stop()
        return False


class LockOrderTests(MarathonFixturesMixin, TestCase):
    """Every service takes the team row before the participant row."""

    def setUp(self):
        self.marathon = self.make_marathon()
        self.members = [self.join(self.marathon, f"m{i}") for i in range(1, 4)]
        self.team = self.make_team(self.marathon, self.members)

    def assertTeamBefore(self, locked, model):
        self.assertIn(model, locked)
        self.assertEqual(locked[0], Team)
        self.assertLess(locked.index(Team), locked.index(model))

    def test_vote_locks_team_then_request_then_kicked_member(self):
        request = services.create_team_request(
            self.team, self.actor(self.members[0]), KickPayload(member_id=self.members[2].pk)
        )
        services.vote(request, self.actor(self.members[0]), "approve")

        with record_locks() as locked:
            services.vote(request, self.actor(self.members[1]), "approve")

        self.assertEqual(locked[:2], [Team, TeamRequest])
        self.assertTeamBefore(locked, Participant)
        self.members[2].refresh_from_db()
        self.assertIsNone(self.members[2].team_id)

    def test_decide_locks_team_before_request(self):
        leader = self.join(self.marathon, "leader")
        helper = self.join(self.marathon, "helper")
        team = self.make_team(self.marathon, [leader, helper], decision_system=Team.DECISION_DICTATORSHIP, name="D")
        request = services.create_team_request(team, self.actor(helper), OpenPositionPayload(role="qa"))

        with record_locks() as locked:
            services.decide(request, self.actor(leader), "approve")

        self.assertEqual(locked[:2], [Team, TeamRequest])

    def test_leave_team_locks_team_before_participant(self):
        with record_locks() as locked:
            services.leave_team(self.actor(self.members[1]))

        self.assertTeamBefore(locked, Participant)
        self.assertMemberCountConsistent(self.team)

    def test_suspension_locks_team_before_participant(self):
        with record_locks() as locked:
            services.suspend_participant(
                self.marathon, self.members[1], "spam", self.organizer_actor(self.marathon)
            )

        self.assertTeamBefore(locked, Participant)
        self.assertMemberCountConsistent(self.team)

    def test_accept_invitation_locks_team_participant_invitation(self):
        guest = self.join(self.marathon, "guest")
        request = services.create_team_request(
            self.team, self.actor(self.members[0]), InvitePayload(participant_id=guest.pk)
        )
        services.vote(request, self.actor(self.members[0]), "approve")
        services.vote(request, self.actor(self.members[1]), "approve")
        invitation = Invitation.objects.get(participant=guest)

        with record_locks() as locked:
            services.accept_invitation(invitation, self.actor(guest))

        self.assertEqual(locked[:3], [Team, Participant, Invitation])

    def test_accepting_application_locks_applicant_before_application(self):
        applicant = self.join(self.marathon, "applicant")
        application = services.create_application(self.team, self.actor(applicant))
        request = services.create_team_request(
            self.team,
            self.actor(self.members[0]),
            AcceptApplicationPayload(application_id=application.pk),
        )
        services.vote(request, self.actor(self.members[0]), "approve")

        with record_locks() as locked:
            services.vote(request, self.actor(self.members[1]), "approve")

        self.assertTeamBefore(locked, Participant)
        self.assertLess(locked.index(Participant), locked.index(Application))
        application.refresh_from_db()
        self.assertEqual(application.status, Application.STATUS_ACCEPTED)


@skipUnlessDBFeature("has_select_for_update")
class ConcurrentVoteTests(MarathonFixturesMixin, TransactionTestCase):
    """Runs only on backends with row locks (PostgreSQL)."""

    def test_racing_votes_resolve_the_request_once(self):
        marathon = self.make_marathon()
        members = [self.join(marathon, f"v{i}") for i in range(1, 5)]
        team = self.make_team(marathon, members)
        request = services.create_team_request(team, self.actor(members[0]), OpenPositionPayload(role="artist"))
        services.vote(request, self.actor(members[0]), "approve")
        services.vote(request, self.actor(members[1]), "approve")

        actors = [self.actor(member) for member in members[2:]]
        barrier = threading.Barrier(len(actors))
        outcomes = []

        def cast(actor):
            try:
                barrier.wait()
                services.vote(request, actor, "approve")
                outcomes.append("approved")
            except Conflict:
                outcomes.append("conflict")
            finally:
                connection.close()

        threads = [threading.Thread(target=cast, args=(actor,)) for actor in actors]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(sorted(outcomes), ["approved", "conflict"])
        request.refresh_from_db()
        self.assertEqual(request.status, TeamRequest.STATUS_APPROVED)
        self.assertEqual(OpenPosition.objects.filter(team=team, role="artist").count(), 1)
