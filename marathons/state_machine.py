# marathons/state_machine.py
"""
Status state machines for applications, invitations and team requests.

Every status starts at `pending`; all other statuses are terminal:

    Application: pending → accepted | rejected | cancelled
    Invitation:  pending → accepted | declined | invalidated
    TeamRequest: pending → approved | rejected

Any transition not in VALID_TRANSITIONS is rejected.
"""
from typing import Tuple
import logging

from django.utils import timezone

from .models import Application, Invitation, TeamRequest

logger = logging.getLogger('tf.marathons')


VALID_TRANSITIONS = {
    Application: {
        Application.STATUS_PENDING: [
            Application.STATUS_ACCEPTED,
            Application.STATUS_REJECTED,
            Application.STATUS_CANCELLED,
        ],
    },
    Invitation: {
        Invitation.STATUS_PENDING: [
            Invitation.STATUS_ACCEPTED,
            Invitation.STATUS_DECLINED,
            Invitation.STATUS_INVALIDATED,
        ],
    },
    TeamRequest: {
        TeamRequest.STATUS_PENDING: [
            TeamRequest.STATUS_APPROVED,
            TeamRequest.STATUS_REJECTED,
        ],
    },
}


def can_transition(obj, new_status: str) -> Tuple[bool, str]:
    """
    Check if `obj` can move to `new_status`.

    Returns (can_transition: bool, reason: str)
    """
    transitions = VALID_TRANSITIONS[type(obj)]
    allowed = transitions.get(obj.status, [])

    if new_status not in allowed:
        return False, f"Cannot transition from '{obj.status}' to '{new_status}'"

    return True, ""


def transition(obj, new_status: str, actor=None, save: bool = True) -> Tuple[bool, str]:
    """
    Attempt to move an application, invitation or request to `new_status`.
    Stamps `resolved_at`.

    Returns (success: bool, message: str)
    """
    can, reason = can_transition(obj, new_status)
    name = type(obj).__name__

    if not can:
        logger.warning(
            f"Invalid state transition attempted: {name}={obj.pk}, "
            f"from={obj.status}, to={new_status}, actor={getattr(actor, 'user_id', 'system')}. "
            f"Reason: {reason}"
        )
        return False, reason

    old_status = obj.status
    obj.status = new_status
    obj.resolved_at = timezone.now()

    if save:
        obj.save(update_fields=['status', 'resolved_at'])

    logger.info(
        f"State transition: {name}={obj.pk}, "
        f"from={old_status}, to={new_status}, actor={getattr(actor, 'user_id', 'system')}"
    )

    return True, f"Transitioned from '{old_status}' to '{new_status}'"


def bulk_transition(queryset, new_status: str) -> int:
    """
    Move every pending row of `queryset` to `new_status`.
    Rows already resolved are left untouched, so repeated calls are no-ops.
    """
    model = queryset.model
    pending = model.STATUS_PENDING
    if new_status not in VALID_TRANSITIONS[model][pending]:
        raise ValueError(f"Cannot bulk transition {model.__name__} to '{new_status}'")

    count = queryset.filter(status=pending).update(status=new_status, resolved_at=timezone.now())
    if count:
        logger.info(f"Bulk transition: {count} {model.__name__} rows pending -> {new_status}")
    return count
