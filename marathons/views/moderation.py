from rest_framework import status
from rest_framework.response import Response

from marathons import services
from marathons.serializers import ParticipantSerializer, ReasonSerializer, TeamSerializer
from .generics import MarathonAPIView


def _reason(request):
    serializer = ReasonSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data["reason"]


class SuspendParticipantView(MarathonAPIView):
    def post(self, request, slug, participant_id):
        participant = self.get_participant(participant_id)
        services.suspend_participant(self.get_marathon(), participant, _reason(request), self.get_actor())
        participant.refresh_from_db()
        return Response(ParticipantSerializer(participant).data)


class BanParticipantView(MarathonAPIView):
    def post(self, request, slug, participant_id):
        participant = self.get_participant(participant_id)
        services.ban_participant(self.get_marathon(), participant, _reason(request), self.get_actor())
        participant.refresh_from_db()
        return Response(ParticipantSerializer(participant).data)


class UnsuspendParticipantView(MarathonAPIView):
    def post(self, request, slug, participant_id):
        participant = services.unsuspend_participant(
            self.get_marathon(), self.get_participant(participant_id), self.get_actor()
        )
        return Response(ParticipantSerializer(participant).data)


class SuspendTeamView(MarathonAPIView):
    def post(self, request, slug, team_id):
        team = services.suspend_team(self.get_marathon(), self.get_team(team_id), _reason(request), self.get_actor())
        return Response(TeamSerializer(team).data)


class UnsuspendTeamView(MarathonAPIView):
    def post(self, request, slug, team_id):
        team = services.unsuspend_team(self.get_marathon(), self.get_team(team_id), self.get_actor())
        return Response(TeamSerializer(team).data)


class DeleteTeamView(MarathonAPIView):
    def post(self, request, slug, team_id):
        services.delete_team(self.get_marathon(), self.get_team(team_id), self.get_actor())
        return Response(status=status.HTTP_204_NO_CONTENT)
