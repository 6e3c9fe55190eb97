"""Typed request payloads, one frozen dataclass per TeamRequest type.

Invariants:
    - Each payload carries only the fields its request type needs
    - `payload_from_dict` is the only way raw JSON becomes a payload
    - `payload_to_dict` output round-trips through `payload_from_dict`
"""

from dataclasses import asdict, dataclass, field
from typing import Optional, Union

from rest_framework import serializers

from .models import Team, TeamRequest


class TeamSettingsSerializer(serializers.Serializer):
    """Field rules for team settings, shared by team creation and update_settings."""
    name = serializers.CharField(max_length=100)
    management_type = serializers.ChoiceField(choices=Team.MANAGEMENT_CHOICES, default=Team.MANAGEMENT_FREE)
    genre = serializers.CharField(max_length=64, required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
    pitch_document = serializers.URLField(max_length=1024, required=False, allow_blank=True)
    design_document = serializers.URLField(max_length=1024, required=False, allow_blank=True)
    chat_link = serializers.URLField(max_length=1024, required=False, allow_blank=True)
    git_link = serializers.URLField(max_length=1024, required=False, allow_blank=True)


class InvalidPayload(ValueError):
    """Raised when raw request data does not fit the payload of its type."""

    def __init__(self, errors: dict):
        self.errors = errors
        super().__init__(errors)


# ─── Payload variants ────────────────────────────────────────────

@dataclass(frozen=True)
class InvitePayload:
    participant_id: int
    message: str = ""


@dataclass(frozen=True)
class OpenPositionPayload:
    role: str
    description: str = ""


@dataclass(frozen=True)
class ClosePositionPayload:
    position_id: int


@dataclass(frozen=True)
class KickPayload:
    member_id: int


@dataclass(frozen=True)
class UpdateSettingsPayload:
    changes: dict = field(default_factory=dict)


@dataclass(frozen=True)
class AcceptApplicationPayload:
    application_id: int


@dataclass(frozen=True)
class RejectApplicationPayload:
    application_id: int


@dataclass(frozen=True)
class TransferLeadPayload:
    member_id: int


@dataclass(frozen=True)
class ChangeDecisionSystemPayload:
    decision_system: str
    leader_id: Optional[int] = None


RequestPayload = Union[
    InvitePayload,
    OpenPositionPayload,
    ClosePositionPayload,
    KickPayload,
    UpdateSettingsPayload,
    AcceptApplicationPayload,
    RejectApplicationPayload,
    TransferLeadPayload,
    ChangeDecisionSystemPayload,
]

PAYLOAD_TYPES = {
    TeamRequest.TYPE_INVITE: InvitePayload,
    TeamRequest.TYPE_OPEN_POSITION: OpenPositionPayload,
    TeamRequest.TYPE_CLOSE_POSITION: ClosePositionPayload,
    TeamRequest.TYPE_KICK: KickPayload,
    TeamRequest.TYPE_UPDATE_SETTINGS: UpdateSettingsPayload,
    TeamRequest.TYPE_ACCEPT_APPLICATION: AcceptApplicationPayload,
    TeamRequest.TYPE_REJECT_APPLICATION: RejectApplicationPayload,
    TeamRequest.TYPE_TRANSFER_LEAD: TransferLeadPayload,
    TeamRequest.TYPE_CHANGE_DECISION_SYSTEM: ChangeDecisionSystemPayload,
}

REQUEST_TYPE_FOR = {cls: request_type for request_type, cls in PAYLOAD_TYPES.items()}


# ─── Parsing ─────────────────────────────────────────────────────

def _id(data: dict, key: str, errors: dict, required: bool = True) -> Optional[int]:
    value = data.get(key)
    if value is None or value == "":
        if required:
            errors[key] = "This field is required."
        return None
    if isinstance(value, bool):
        errors[key] = "A valid integer is required."
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        errors[key] = "A valid integer is required."
        return None


def _text(data: dict, key: str, errors: dict, required: bool = False, max_length: int = 2000) -> str:
    value = data.get(key)
    if value is None:
        value = ""
    if not isinstance(value, str):
        errors[key] = "A valid string is required."
        return ""
    value = value.strip()
    if required and not value:
        errors[key] = "This field is required."
    elif len(value) > max_length:
        errors[key] = f"Ensure this field has no more than {max_length} characters."
    return value


def payload_from_dict(request_type: str, data: Optional[dict]) -> RequestPayload:
    """Build the typed payload for `request_type` from raw JSON data."""
    if request_type not in PAYLOAD_TYPES:
        raise InvalidPayload({"type": f"Unknown request type: {request_type}"})
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise InvalidPayload({"payload": "Expected an object."})

    errors = {}

    if request_type == TeamRequest.TYPE_INVITE:
        payload = InvitePayload(
            participant_id=_id(data, "participant_id", errors),
            message=_text(data, "message", errors),
        )
    elif request_type == TeamRequest.TYPE_OPEN_POSITION:
        payload = OpenPositionPayload(
            role=_text(data, "role", errors, required=True, max_length=64),
            description=_text(data, "description", errors),
        )
    elif request_type == TeamRequest.TYPE_CLOSE_POSITION:
        payload = ClosePositionPayload(position_id=_id(data, "position_id", errors))
    elif request_type == TeamRequest.TYPE_KICK:
        payload = KickPayload(member_id=_id(data, "member_id", errors))
    elif request_type == TeamRequest.TYPE_TRANSFER_LEAD:
        payload = TransferLeadPayload(member_id=_id(data, "member_id", errors))
    elif request_type == TeamRequest.TYPE_ACCEPT_APPLICATION:
        payload = AcceptApplicationPayload(application_id=_id(data, "application_id", errors))
    elif request_type == TeamRequest.TYPE_REJECT_APPLICATION:
        payload = RejectApplicationPayload(application_id=_id(data, "application_id", errors))
    elif request_type == TeamRequest.TYPE_CHANGE_DECISION_SYSTEM:
        decision_system = data.get("decision_system")
        if decision_system not in dict(Team.DECISION_CHOICES):
            errors["decision_system"] = f"Must be one of: {', '.join(dict(Team.DECISION_CHOICES))}."
        leader_id = _id(data, "leader_id", errors, required=decision_system == Team.DECISION_DICTATORSHIP)
        if decision_system == Team.DECISION_DEMOCRACY:
            leader_id = None
        payload = ChangeDecisionSystemPayload(decision_system=decision_system, leader_id=leader_id)
    else:
        changes = data.get("changes", data)
        if not isinstance(changes, dict) or not changes:
            errors["changes"] = "At least one setting is required."
            changes = {}
        unknown = sorted(set(changes) - set(Team.SETTINGS_FIELDS))
        if unknown:
            errors["changes"] = f"Unsupported settings: {', '.join(unknown)}."
        settings = TeamSettingsSerializer(data=changes, partial=True)
        cleaned = {}
        if settings.is_valid():
            cleaned = dict(settings.validated_data)
        else:
            errors.update(settings.errors)
        payload = UpdateSettingsPayload(changes=cleaned)

    if errors:
        raise InvalidPayload(errors)
    return payload


def payload_to_dict(payload: RequestPayload) -> dict:
    return asdict(payload)


def request_type_of(payload: RequestPayload) -> str:
    return REQUEST_TYPE_FOR[type(payload)]
