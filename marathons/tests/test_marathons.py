from django.test import TestCase
from rest_framework.exceptions import ValidationError

from core.exceptions import Conflict, Forbidden, NotFound
from core.models import DomainActivity
from marathons import activity_verbs, services
from marathons.models import Marathon, Participant, Team
from .base import MarathonFixturesMixin


class MarathonServiceTests(MarathonFixturesMixin, TestCase):
    def setUp(self):
        self.creator = self.make_user("creator", role="organizer")
        self.marathon = services.create_marathon(self.creator, name="Spring", slug="Spring-24")

    def test_create_marathon_normalizes_slug_and_adds_creator_as_organizer(self):
        self.assertEqual(self.marathon.slug, "spring-24")
        self.assertTrue(self.marathon.organizers.filter(pk=self.creator.pk).exists())
        self.assertTrue(
            DomainActivity.objects.filter(verb=activity_verbs.MARATHON_CREATED, marathon=self.marathon).exists()
        )

    def test_create_marathon_validation(self):
        with self.assertRaises(Conflict):
            services.create_marathon(self.creator, name="Again", slug="spring-24")
        with self.assertRaises(ValidationError):
            services.create_marathon(self.creator, name="Bad", slug="has spaces")
        with self.assertRaises(ValidationError):
            services.create_marathon(self.creator, name="Bad", slug="sizes", min_team_size=4, max_team_size=2)

    def test_only_creator_deletes(self):
        organizer = self.make_user("organizer")
        services.add_organizer(self.marathon, self.organizer_actor(self.marathon), organizer.pk)

        with self.assertRaises(Forbidden):
            services.delete_marathon(self.marathon, self.organizer_actor(self.marathon, organizer))

        participant = self.join(self.marathon, "p1")
        self.make_team(self.marathon, [participant])
        services.delete_marathon(self.marathon, self.organizer_actor(self.marathon))

        self.assertFalse(Marathon.objects.filter(pk=self.marathon.pk).exists())
        self.assertFalse(Participant.objects.filter(pk=participant.pk).exists())
        self.assertFalse(Team.objects.exists())

    def test_organizer_management(self):
        organizer = self.make_user("organizer")
        actor = self.organizer_actor(self.marathon)

        services.add_organizer(self.marathon, actor, organizer.pk)
        with self.assertRaises(Conflict):
            services.add_organizer(self.marathon, actor, organizer.pk)
        with self.assertRaises(NotFound):
            services.add_organizer(self.marathon, actor, 999999)
        with self.assertRaises(Forbidden):
            services.remove_organizer(self.marathon, actor, self.creator.pk)

        outsider = self.make_user("outsider")
        with self.assertRaises(Forbidden):
            services.add_organizer(self.marathon, self.organizer_actor(self.marathon, outsider), outsider.pk)

        services.remove_organizer(self.marathon, actor, organizer.pk)
        with self.assertRaises(NotFound):
            services.remove_organizer(self.marathon, actor, organizer.pk)

    def test_join_and_leave(self):
        user = self.make_user("runner")
        participant = services.join_marathon(self.marathon, user)
        with self.assertRaises(Conflict):
            services.join_marathon(self.marathon, user)

        team = self.make_team(self.marathon, [participant])
        with self.assertRaises(Conflict):
            services.leave_marathon(self.marathon, self.actor(participant))

        services.leave_team(self.actor(participant))
        self.assertFalse(Team.objects.filter(pk=team.pk).exists())
        actor = self.actor(participant)
        services.leave_marathon(self.marathon, actor)
        self.assertFalse(Participant.objects.filter(pk=participant.pk).exists())

        with self.assertRaises(NotFound):
            services.leave_marathon(self.marathon, self.organizer_actor(self.marathon, user))

    def test_banned_user_cannot_leave_or_rejoin(self):
        participant = self.join(self.marathon, "troll")
        services.ban_participant(self.marathon, participant, "spam", self.organizer_actor(self.marathon))

        with self.assertRaises(Forbidden):
            services.leave_marathon(self.marathon, self.actor(participant))
        with self.assertRaises(Forbidden):
            services.join_marathon(self.marathon, participant.user)

    def test_update_profile(self):
        a = self.join(self.marathon, "a")
        b = self.join(self.marathon, "b")

        services.update_profile(self.marathon, self.actor(a), nickname="Ace", roles=["backend"])
        a.refresh_from_db()
        self.assertEqual(a.nickname, "ace")
        self.assertEqual(a.roles, ["backend"])

        with self.assertRaises(Conflict):
            services.update_profile(self.marathon, self.actor(b), nickname="ACE")

    def test_organizer_gets_participant_row_on_profile_edit(self):
        participant = services.update_profile(
            self.marathon, self.organizer_actor(self.marathon), description="running the show"
        )
        self.assertEqual(participant.user_id, self.creator.pk)

        outsider = self.make_user("outsider")
        with self.assertRaises(NotFound):
            services.update_profile(self.marathon, self.organizer_actor(self.marathon, outsider), name="x")

    def test_create_team_rules(self):
        a = self.join(self.marathon, "a")
        b = self.join(self.marathon, "b")
        self.make_team(self.marathon, [a], name="Alpha")

        with self.assertRaises(Conflict):
            services.create_team(self.marathon, self.actor(a), name="Second")
        with self.assertRaises(Conflict):
            services.create_team(self.marathon, self.actor(b), name="alpha")

        Participant.objects.filter(pk=b.pk).update(is_suspended=True)
        with self.assertRaises(Forbidden):
            services.create_team(self.marathon, self.actor(b), name="Beta")
