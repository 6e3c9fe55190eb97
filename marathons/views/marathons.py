from rest_framework import status
from rest_framework.response import Response
from rest_framework.authentication import SessionAuthentication, BasicAuthentication
from rest_framework.permissions import IsAuthenticated
from rest_framework.views import APIView
from rest_framework_simplejwt.authentication import JWTAuthentication

from marathons import services
from marathons.models import Marathon, Participant
from marathons.serializers import (
    MarathonSerializer,
    MarathonCreateSerializer,
    MyStatusSerializer,
    OrganizerAddSerializer,
    ParticipantSerializer,
    ProfileUpdateSerializer,
    UserSummarySerializer,
)
from core.exceptions import NotFound
from .generics import MarathonAPIView, get_marathon


class MarathonListCreateView(APIView):
    authentication_classes = [JWTAuthentication, SessionAuthentication, BasicAuthentication]
    permission_classes = [IsAuthenticated]

    def get(self, request):
        marathons = Marathon.objects.select_related("creator").order_by("-created_at")
        return Response(MarathonSerializer(marathons, many=True).data)

    def post(self, request):
        serializer = MarathonCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        marathon = services.create_marathon(request.user, **serializer.validated_data)
        return Response(MarathonSerializer(marathon).data, status=status.HTTP_201_CREATED)


class MarathonDetailView(MarathonAPIView):
    def get(self, request, slug):
        return Response(MarathonSerializer(self.get_marathon()).data)

    def delete(self, request, slug):
        marathon = self.get_marathon()
        services.delete_marathon(marathon, self.get_actor())
        return Response(status=status.HTTP_204_NO_CONTENT)


class JoinMarathonView(MarathonAPIView):
    def post(self, request, slug):
        participant = services.join_marathon(self.get_marathon(), request.user)
        return Response(ParticipantSerializer(participant).data, status=status.HTTP_201_CREATED)


class LeaveMarathonView(MarathonAPIView):
    def post(self, request, slug):
        services.leave_marathon(self.get_marathon(), self.get_actor())
        return Response({"message": "You left the marathon."})


class MyProfileView(MarathonAPIView):
    def get(self, request, slug):
        participant = Participant.objects.filter(marathon=self.get_marathon(), user=request.user).first()
        if participant is None:
            raise NotFound("You are not a participant of this marathon.")
        return Response(ParticipantSerializer(participant).data)

    def patch(self, request, slug):
        serializer = ProfileUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        participant = services.update_profile(self.get_marathon(), self.get_actor(), **serializer.validated_data)
        return Response(ParticipantSerializer(participant).data)


class OrganizerListCreateView(MarathonAPIView):
    def get(self, request, slug):
        organizers = self.get_marathon().organizers.order_by("id")
        return Response(UserSummarySerializer(organizers, many=True).data)

    def post(self, request, slug):
        serializer = OrganizerAddSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = services.add_organizer(self.get_marathon(), self.get_actor(), serializer.validated_data["user_id"])
        return Response(UserSummarySerializer(user).data, status=status.HTTP_201_CREATED)


class OrganizerDetailView(MarathonAPIView):
    def delete(self, request, slug, user_id):
        services.remove_organizer(self.get_marathon(), self.get_actor(), user_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class MyStatusView(MarathonAPIView):
    """The caller's standing in the marathon; answers for non-participants too."""

    def get(self, request, slug):
        marathon = self.get_marathon()
        participant = Participant.objects.filter(marathon=marathon, user=request.user).first()
        data = {
            "is_participant": participant is not None,
            "is_organizer": marathon.organizers.filter(pk=request.user.pk).exists(),
            "is_banned": bool(participant and participant.is_banned),
            "is_suspended": bool(participant and participant.is_suspended),
            "suspend_reason": (participant.suspend_reason or None) if participant else None,
            "has_team": bool(participant and participant.team_id),
            "team_id": participant.team_id if participant else None,
            "participant_id": participant.pk if participant else None,
        }
        return Response(MyStatusSerializer(data).data)
