"""Actor value object threaded into every governance call.

Invariants:
    - Built once per HTTP request by `resolve_actor`; services never read request state
    - Role flags are derived from entity fields (marathon creator/organizers, user role)
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from .models import Marathon, Participant


@dataclass(frozen=True)
class Actor:
    user_id: int
    marathon_id: int
    participant_id: Optional[int] = None
    is_creator: bool = False
    is_organizer: bool = False
    is_system_admin: bool = False
    # The user instance, kept for activity attribution only
    user: Any = field(default=None, compare=False, repr=False)

    @property
    def can_moderate(self) -> bool:
        return self.is_creator or self.is_organizer or self.is_system_admin


def resolve_actor(marathon: Marathon, user) -> Actor:
    participant_id = (
        Participant.objects
        .filter(marathon=marathon, user=user)
        .values_list("pk", flat=True)
        .first()
    )
    return Actor(
        user_id=user.pk,
        marathon_id=marathon.pk,
        participant_id=participant_id,
        is_creator=marathon.creator_id == user.pk,
        is_organizer=marathon.organizers.filter(pk=user.pk).exists(),
        is_system_admin=bool(getattr(user, "is_system_admin", False)),
        user=user,
    )
