from rest_framework.response import Response

from core.exceptions import Forbidden, NotFound
from marathons.models import Participant
from marathons.serializers import ParticipantDirectorySerializer
from .generics import MarathonAPIView


def _csv(value):
    return {item.strip() for item in (value or "").split(",") if item.strip()}


class _DirectoryView(MarathonAPIView):
    """Participant directory, open to participants and organizers of the marathon."""

    def get_directory(self):
        actor = self.get_actor()
        if actor.participant_id is None and not actor.can_moderate:
            raise Forbidden("You are not a participant of this marathon.")
        return Participant.objects.filter(
            marathon=self.get_marathon(),
            is_banned=False,
            is_suspended=False,
        )


class ParticipantListView(_DirectoryView):
    """
    GET /api/marathons/<slug>/participants/?available=true&roles=a,b&technologies=x,y

    `roles` and `technologies` match participants sharing at least one value.
    """

    def get(self, request, slug):
        participants = self.get_directory().order_by("-joined_at", "-id")
        if request.query_params.get("available") == "true":
            participants = participants.filter(team__isnull=True)

        roles = _csv(request.query_params.get("roles"))
        technologies = _csv(request.query_params.get("technologies"))
        if roles or technologies:
            # JSON containment lookups are unavailable on SQLite
            participants = [
                p for p in participants
                if (not roles or roles & set(p.roles))
                and (not technologies or technologies & set(p.technologies))
            ]

        return Response(ParticipantDirectorySerializer(participants, many=True).data)


class ParticipantDetailView(_DirectoryView):
    def get(self, request, slug, participant_id):
        participant = self.get_directory().filter(pk=participant_id).first()
        if participant is None:
            raise NotFound("Participant not found.")
        return Response(ParticipantDirectorySerializer(participant).data)
