from rest_framework import status
from rest_framework.response import Response

from core.exceptions import NotFound
from marathons import services
from marathons.models import TeamRequest
from marathons.serializers import (
    DecisionSerializer,
    TeamRequestCreateSerializer,
    TeamRequestSerializer,
    VoteSerializer,
)
from .generics import MarathonAPIView


class TeamRequestListCreateView(MarathonAPIView):
    """
    GET  /api/marathons/<slug>/my-team/requests/?status=pending (default; "all" for history)
    POST /api/marathons/<slug>/my-team/requests/  {"type": "...", "payload": {...}}
    """

    def get(self, request, slug):
        actor = self.get_actor()
        team = self.get_my_team(actor)
        requests = services.list_team_requests(
            team, actor, status=request.query_params.get("status", TeamRequest.STATUS_PENDING)
        )
        return Response(TeamRequestSerializer(requests.prefetch_related("votes"), many=True).data)

    def post(self, request, slug):
        serializer = TeamRequestCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        actor = self.get_actor()
        team_request = services.create_team_request(
            self.get_my_team(actor), actor, serializer.validated_data["typed_payload"]
        )
        team_request.refresh_from_db()
        return Response(TeamRequestSerializer(team_request).data, status=status.HTTP_201_CREATED)


class _TeamRequestActionView(MarathonAPIView):
    def get_request(self, request_id):
        team_request = TeamRequest.objects.filter(pk=request_id, marathon=self.get_marathon()).first()
        if team_request is None:
            raise NotFound("Request not found.")
        return team_request


class VoteView(_TeamRequestActionView):
    def post(self, request, slug, request_id):
        serializer = VoteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        team_request = services.vote(
            self.get_request(request_id), self.get_actor(), serializer.validated_data["vote"]
        )
        return Response(TeamRequestSerializer(team_request).data)


class DecideView(_TeamRequestActionView):
    def post(self, request, slug, request_id):
        serializer = DecisionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        team_request = services.decide(
            self.get_request(request_id), self.get_actor(), serializer.validated_data["decision"]
        )
        return Response(TeamRequestSerializer(team_request).data)
