from django.contrib.auth import get_user_model

from marathons import services
from marathons.actors import resolve_actor
from marathons.models import Participant, Team


User = get_user_model()


class MarathonFixturesMixin:
    """Shared builders for marathon, participant and team fixtures."""

    def make_user(self, username, **extra):
        return User.objects.create_user(
            username=username,
            email=f"{username}@example.com",
            password="pass1234",
            **extra,
        )

    def make_marathon(self, creator=None, slug="spring", max_team_size=5):
        creator = creator or self.make_user(f"creator-{slug}", role="organizer")
        return services.create_marathon(creator, name=f"Marathon {slug}", slug=slug, max_team_size=max_team_size)

    def join(self, marathon, username):
        return services.join_marathon(marathon, self.make_user(username))

    def actor(self, participant):
        participant = Participant.objects.select_related("marathon", "user").get(pk=participant.pk)
        return resolve_actor(participant.marathon, participant.user)

    def organizer_actor(self, marathon, user=None):
        return resolve_actor(marathon, user or marathon.creator)

    def make_team(self, marathon, members, decision_system=Team.DECISION_DEMOCRACY, name="Team"):
        """First member creates the team (and leads it in a dictatorship); the rest are added."""
        team = services.create_team(marathon, self.actor(members[0]), name=name, decision_system=decision_system)
        for participant in members[1:]:
            services.add_member(team, participant)
        team.refresh_from_db()
        return team

    def assertMemberCountConsistent(self, team):
        team.refresh_from_db()
        self.assertEqual(team.member_count, Participant.objects.filter(team=team).count())

    def assertLeaderInvariant(self, team):
        team.refresh_from_db()
        self.assertEqual(team.leader_id is not None, team.decision_system == Team.DECISION_DICTATORSHIP)
