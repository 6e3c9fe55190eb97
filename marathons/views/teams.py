from rest_framework import status
from rest_framework.response import Response

from core.exceptions import NotFound
from marathons import services
from marathons.models import Participant, Team
from marathons.serializers import (
    ApplicationCreateSerializer,
    ApplicationSerializer,
    MyTeamSerializer,
    TeamCreateSerializer,
    TeamSerializer,
)
from .generics import MarathonAPIView


class TeamListCreateView(MarathonAPIView):
    """
    GET  /api/marathons/<slug>/teams/
         ?management_type=&decision_system=&genre=&has_open_positions=true&open_position_role=
    POST /api/marathons/<slug>/teams/
    """

    def get(self, request, slug):
        actor = self.get_actor()
        teams = Team.objects.filter(marathon=self.get_marathon())
        if not actor.can_moderate:
            teams = teams.filter(is_suspended=False)

        params = request.query_params
        for field in ("management_type", "decision_system", "genre"):
            if params.get(field):
                teams = teams.filter(**{field: params[field]})
        if params.get("open_position_role"):
            teams = teams.filter(open_positions__role=params["open_position_role"])
        elif params.get("has_open_positions") == "true":
            teams = teams.filter(open_positions__isnull=False)

        teams = teams.distinct().prefetch_related("open_positions", "members").order_by("created_at")
        return Response(TeamSerializer(teams, many=True).data)

    def post(self, request, slug):
        serializer = TeamCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        team = services.create_team(self.get_marathon(), self.get_actor(), **serializer.validated_data)
        return Response(TeamSerializer(team).data, status=status.HTTP_201_CREATED)


class TeamDetailView(MarathonAPIView):
    def get(self, request, slug, team_id):
        return Response(TeamSerializer(self.get_team(team_id)).data)


class TeamApplicationCreateView(MarathonAPIView):
    def post(self, request, slug, team_id):
        serializer = ApplicationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        application = services.create_application(
            self.get_team(team_id), self.get_actor(), serializer.validated_data["message"]
        )
        return Response(ApplicationSerializer(application).data, status=status.HTTP_201_CREATED)


class LeaveTeamView(MarathonAPIView):
    def post(self, request, slug):
        outcome = services.leave_team(self.get_actor())
        return Response({
            "removed_from_team": outcome.removed_from_team,
            "team_deleted": outcome.team_deleted,
            "team_became_democracy": outcome.team_became_democracy,
        })


class MyTeamView(MarathonAPIView):
    """GET /api/marathons/<slug>/my-team/ (204 when the participant has no team)"""

    def get(self, request, slug):
        actor = self.get_actor()
        if actor.participant_id is None:
            raise NotFound("You are not a participant of this marathon.")

        participant = Participant.objects.filter(pk=actor.participant_id).first()
        if participant is None or participant.team_id is None:
            return Response(status=status.HTTP_204_NO_CONTENT)

        team = (
            Team.objects
            .select_related("marathon")
            .prefetch_related("open_positions", "members")
            .get(pk=participant.team_id)
        )
        serializer = MyTeamSerializer(team, context={"participant_id": participant.pk})
        return Response(serializer.data)
