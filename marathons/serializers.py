from rest_framework import serializers

from users.models import User
from .models import (
    Marathon,
    Participant,
    Team,
    OpenPosition,
    Application,
    Invitation,
    TeamRequest,
    TeamRequestVote,
)
from .payloads import InvalidPayload, TeamSettingsSerializer, payload_from_dict


# -----------------------------------------
# USERS / MARATHONS
# -----------------------------------------
class UserSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ["id", "username", "email"]


class MarathonSerializer(serializers.ModelSerializer):
    creator = UserSummarySerializer(read_only=True)
    participant_count = serializers.IntegerField(source="participants.count", read_only=True)
    team_count = serializers.IntegerField(source="teams.count", read_only=True)

    class Meta:
        model = Marathon
        fields = [
            "id",
            "name",
            "slug",
            "description",
            "min_team_size",
            "max_team_size",
            "creator",
            "participant_count",
            "team_count",
            "created_at",
        ]
        read_only_fields = ["id", "creator", "created_at"]


class MarathonCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    slug = serializers.CharField(max_length=16)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    min_team_size = serializers.IntegerField(min_value=1, max_value=50, default=1)
    max_team_size = serializers.IntegerField(min_value=1, max_value=50, default=5)

    def validate_slug(self, value):
        return value.strip().lower()

    def validate(self, attrs):
        if attrs["min_team_size"] > attrs["max_team_size"]:
            raise serializers.ValidationError({"max_team_size": "Must be at least min_team_size."})
        return attrs


class OrganizerAddSerializer(serializers.Serializer):
    user_id = serializers.IntegerField()


# -----------------------------------------
# PARTICIPANTS
# -----------------------------------------
class ParticipantSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(source="user.id", read_only=True)
    team_id = serializers.IntegerField(read_only=True, allow_null=True)

    class Meta:
        model = Participant
        fields = [
            "id",
            "user_id",
            "name",
            "nickname",
            "roles",
            "technologies",
            "description",
            "team_id",
            "is_suspended",
            "suspend_reason",
            "is_banned",
            "ban_reason",
            "joined_at",
        ]
        read_only_fields = fields


class ParticipantDirectorySerializer(serializers.ModelSerializer):
    """What other participants see when looking for teammates."""
    team_id = serializers.IntegerField(read_only=True, allow_null=True)
    has_team = serializers.SerializerMethodField()

    class Meta:
        model = Participant
        fields = ["id", "name", "nickname", "roles", "technologies", "description", "has_team", "team_id"]
        read_only_fields = fields

    def get_has_team(self, obj):
        return obj.team_id is not None


class MyStatusSerializer(serializers.Serializer):
    is_participant = serializers.BooleanField()
    is_organizer = serializers.BooleanField()
    is_banned = serializers.BooleanField()
    is_suspended = serializers.BooleanField()
    suspend_reason = serializers.CharField(allow_null=True)
    has_team = serializers.BooleanField()
    team_id = serializers.IntegerField(allow_null=True)
    participant_id = serializers.IntegerField(allow_null=True)


class ProfileUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100, required=False, allow_blank=True)
    nickname = serializers.RegexField(r"^[A-Za-z0-9_.-]{1,32}$", required=False, allow_blank=True)
    roles = serializers.ListField(child=serializers.CharField(max_length=64), required=False, max_length=20)
    technologies = serializers.ListField(child=serializers.CharField(max_length=64), required=False, max_length=50)
    description = serializers.CharField(required=False, allow_blank=True, max_length=4000)


class ReasonSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=2000)


# -----------------------------------------
# TEAMS
# -----------------------------------------
class OpenPositionSerializer(serializers.ModelSerializer):
    class Meta:
        model = OpenPosition
        fields = ["id", "role", "description", "created_at"]
        read_only_fields = fields


class TeamMemberSerializer(serializers.ModelSerializer):
    class Meta:
        model = Participant
        fields = ["id", "name", "nickname", "roles", "technologies"]
        read_only_fields = fields


class TeamSerializer(serializers.ModelSerializer):
    open_positions = OpenPositionSerializer(many=True, read_only=True)
    members = TeamMemberSerializer(many=True, read_only=True)
    leader_id = serializers.IntegerField(read_only=True, allow_null=True)

    class Meta:
        model = Team
        fields = [
            "id",
            "name",
            "management_type",
            "decision_system",
            "leader_id",
            "member_count",
            "genre",
            "description",
            "pitch_document",
            "design_document",
            "chat_link",
            "git_link",
            "is_suspended",
            "suspend_reason",
            "open_positions",
            "members",
            "created_at",
        ]
        read_only_fields = fields


class MyTeamSerializer(TeamSerializer):
    is_leader = serializers.SerializerMethodField()
    my_participant_id = serializers.SerializerMethodField()
    pending_requests_count = serializers.SerializerMethodField()
    pending_applications_count = serializers.SerializerMethodField()

    class Meta(TeamSerializer.Meta):
        fields = TeamSerializer.Meta.fields + [
            "is_leader",
            "my_participant_id",
            "pending_requests_count",
            "pending_applications_count",
        ]
        read_only_fields = fields

    def get_is_leader(self, obj):
        return obj.leader_id is not None and obj.leader_id == self.context.get("participant_id")

    def get_my_participant_id(self, obj):
        return self.context.get("participant_id")

    def get_pending_requests_count(self, obj):
        return obj.requests.filter(status=TeamRequest.STATUS_PENDING).count()

    def get_pending_applications_count(self, obj):
        return obj.applications.filter(status=Application.STATUS_PENDING).count()


class TeamCreateSerializer(TeamSettingsSerializer):
    decision_system = serializers.ChoiceField(choices=Team.DECISION_CHOICES, default=Team.DECISION_DEMOCRACY)


# -----------------------------------------
# APPLICATIONS / INVITATIONS
# -----------------------------------------
class ApplicationSerializer(serializers.ModelSerializer):
    team_id = serializers.IntegerField(read_only=True, allow_null=True)
    team_name = serializers.CharField(source="team.name", read_only=True, default=None)
    participant = TeamMemberSerializer(read_only=True)

    class Meta:
        model = Application
        fields = ["id", "team_id", "team_name", "participant", "message", "status", "created_at", "resolved_at"]
        read_only_fields = fields


class ApplicationCreateSerializer(serializers.Serializer):
    message = serializers.CharField(required=False, allow_blank=True, default="", max_length=2000)


class InvitationSerializer(serializers.ModelSerializer):
    team_id = serializers.IntegerField(read_only=True, allow_null=True)
    team_name = serializers.CharField(source="team.name", read_only=True, default=None)

    class Meta:
        model = Invitation
        fields = ["id", "team_id", "team_name", "message", "status", "created_at", "resolved_at"]
        read_only_fields = fields


# -----------------------------------------
# TEAM REQUESTS
# -----------------------------------------
class TeamRequestVoteSerializer(serializers.ModelSerializer):
    participant_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = TeamRequestVote
        fields = ["participant_id", "vote", "voted_at"]
        read_only_fields = fields


class TeamRequestSerializer(serializers.ModelSerializer):
    author_id = serializers.IntegerField(read_only=True, allow_null=True)
    decided_by_id = serializers.IntegerField(read_only=True, allow_null=True)
    votes = TeamRequestVoteSerializer(many=True, read_only=True)
    approve_count = serializers.SerializerMethodField()
    reject_count = serializers.SerializerMethodField()
    my_vote = serializers.SerializerMethodField()

    class Meta:
        model = TeamRequest
        fields = [
            "id",
            "type",
            "payload",
            "status",
            "author_id",
            "votes",
            "approve_count",
            "reject_count",
            "my_vote",
            "decided_by_id",
            "decided_at",
            "created_at",
            "resolved_at",
        ]
        read_only_fields = fields

    def _count(self, obj, vote):
        return sum(1 for v in obj.votes.all() if v.vote == vote)

    def get_approve_count(self, obj):
        if hasattr(obj, "approve_count"):
            return obj.approve_count
        return self._count(obj, TeamRequestVote.VOTE_APPROVE)

    def get_reject_count(self, obj):
        if hasattr(obj, "reject_count"):
            return obj.reject_count
        return self._count(obj, TeamRequestVote.VOTE_REJECT)

    def get_my_vote(self, obj):
        return getattr(obj, "my_vote", None)


class TeamRequestCreateSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=TeamRequest.TYPE_CHOICES)
    payload = serializers.DictField(required=False, default=dict)

    def validate(self, attrs):
        try:
            attrs["typed_payload"] = payload_from_dict(attrs["type"], attrs.get("payload"))
        except InvalidPayload as e:
            raise serializers.ValidationError({"payload": e.errors})
        return attrs


class VoteSerializer(serializers.Serializer):
    vote = serializers.ChoiceField(choices=TeamRequestVote.VOTE_CHOICES)


class DecisionSerializer(serializers.Serializer):
    decision = serializers.ChoiceField(choices=TeamRequestVote.VOTE_CHOICES)
