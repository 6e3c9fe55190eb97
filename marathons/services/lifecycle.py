"""
Lifecycle cascade for a participant leaving their team (leave, suspend, ban).

Every step filters on `pending`, so running `depart` again after a partial
failure never applies an effect twice.
"""
import logging

from django.db import transaction

from ..models import Application, Invitation
from ..state_machine import bulk_transition
from .membership import DepartureOutcome, lock_member, remove_member

logger = logging.getLogger('tf.marathons')


def withdraw_pending(participant):
    """Cancel the participant's pending applications and invalidate invitations to them."""
    cancelled = bulk_transition(Application.objects.filter(participant=participant), Application.STATUS_CANCELLED)
    invalidated = bulk_transition(Invitation.objects.filter(participant=participant), Invitation.STATUS_INVALIDATED)
    return cancelled, invalidated


@transaction.atomic
def depart(participant, actor=None) -> DepartureOutcome:
    """
    Remove `participant` from their team (if any) and unwind their pending
    artifacts. Team dissolution and leader fallback happen in `remove_member`.
    """
    team, participant = lock_member(participant.pk)

    outcome = DepartureOutcome()
    if team is not None:
        outcome = remove_member(team, participant, actor=actor)

    cancelled, invalidated = withdraw_pending(participant)
    logger.info(
        f"Participant departed: participant={participant.pk}, outcome={outcome}, "
        f"applications_cancelled={cancelled}, invitations_invalidated={invalidated}"
    )
    return outcome
