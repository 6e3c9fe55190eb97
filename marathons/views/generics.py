from rest_framework.authentication import SessionAuthentication, BasicAuthentication
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView
from rest_framework_simplejwt.authentication import JWTAuthentication

from core.exceptions import NotFound
from marathons.actors import resolve_actor
from marathons.models import Marathon, Participant, Team


def get_marathon(slug):
    marathon = Marathon.objects.filter(slug=slug.lower()).first()
    if marathon is None:
        raise NotFound("Marathon not found.")
    return marathon


class MarathonAPIView(APIView):
    """
    Base view for everything under /api/marathons/<slug>/.
    Resolves the marathon and the acting user's Actor once per request.
    """
    authentication_classes = [JWTAuthentication, SessionAuthentication, BasicAuthentication]
    permission_classes = [IsAuthenticated]

    def get_marathon(self):
        if not hasattr(self, "_marathon"):
            self._marathon = get_marathon(self.kwargs["slug"])
        return self._marathon

    def get_actor(self):
        return resolve_actor(self.get_marathon(), self.request.user)

    def get_team(self, team_id):
        team = Team.objects.filter(pk=team_id, marathon=self.get_marathon()).first()
        if team is None:
            raise NotFound("Team not found.")
        return team

    def get_participant(self, participant_id):
        participant = Participant.objects.filter(pk=participant_id, marathon=self.get_marathon()).first()
        if participant is None:
            raise NotFound("Participant not found.")
        return participant

    def get_my_team(self, actor):
        participant = Participant.objects.filter(pk=actor.participant_id).select_related("team").first()
        if participant is None or participant.team is None:
            raise NotFound("You are not in a team.")
        return participant.team
