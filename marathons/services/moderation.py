"""
Organizer moderation of participants and teams.
"""
import logging

from django.db import transaction

from core.exceptions import Conflict, Forbidden, NotFound
from core.services import ActivityService

from .. import activity_verbs as verbs
from ..models import Application, Invitation, Participant, Team, TeamRequest
from ..policies import MarathonPolicy
from ..state_machine import bulk_transition
from .lifecycle import depart
from .membership import dissolve_team, lock_member, lock_team

logger = logging.getLogger('tf.marathons')


def _lock_target(marathon, participant, actor) -> Participant:
    target = Participant.objects.filter(pk=participant.pk, marathon=marathon).first()
    if target is None:
        raise NotFound("Participant not found.")

    allowed, reason = MarathonPolicy.can_moderate_participant(actor, marathon, target)
    if not allowed:
        raise Forbidden(reason)
    _, target = lock_member(target.pk)
    return target


@transaction.atomic
def suspend_participant(marathon, participant, reason, actor):
    target = _lock_target(marathon, participant, actor)
    if target.is_suspended:
        raise Conflict("Participant is already suspended.")

    target.is_suspended = True
    target.suspend_reason = reason or ""
    target.save(update_fields=["is_suspended", "suspend_reason", "updated_at"])

    outcome = depart(target, actor=actor)
    ActivityService.log_activity(
        actor=actor.user,
        verb=verbs.PARTICIPANT_SUSPENDED,
        target=target,
        marathon=marathon,
        metadata={"reason": target.suspend_reason, "team_deleted": outcome.team_deleted},
    )
    logger.info(f"Participant suspended: participant={target.pk}, by={actor.user_id}")
    return outcome


@transaction.atomic
def ban_participant(marathon, participant, reason, actor):
    target = _lock_target(marathon, participant, actor)
    if target.is_banned:
        raise Conflict("Participant is already banned.")

    target.is_banned = True
    target.ban_reason = reason or ""
    target.save(update_fields=["is_banned", "ban_reason", "updated_at"])

    outcome = depart(target, actor=actor)
    ActivityService.log_activity(
        actor=actor.user,
        verb=verbs.PARTICIPANT_BANNED,
        target=target,
        marathon=marathon,
        metadata={"reason": target.ban_reason, "team_deleted": outcome.team_deleted},
    )
    logger.info(f"Participant banned: participant={target.pk}, by={actor.user_id}")
    return outcome


@transaction.atomic
def unsuspend_participant(marathon, participant, actor) -> Participant:
    """Clear the suspension. Team membership is not restored."""
    target = _lock_target(marathon, participant, actor)
    if not target.is_suspended:
        raise Conflict("Participant is not suspended.")

    target.is_suspended = False
    target.suspend_reason = ""
    target.save(update_fields=["is_suspended", "suspend_reason", "updated_at"])

    ActivityService.log_activity(
        actor=actor.user,
        verb=verbs.PARTICIPANT_UNSUSPENDED,
        target=target,
        marathon=marathon,
    )
    logger.info(f"Participant unsuspended: participant={target.pk}, by={actor.user_id}")
    return target


def _lock_team_for_moderation(marathon, team, actor) -> Team:
    allowed, reason = MarathonPolicy.can_moderate_team(actor)
    if not allowed:
        raise Forbidden(reason)
    if not Team.objects.filter(pk=team.pk, marathon=marathon).exists():
        raise NotFound("Team not found.")
    return lock_team(team.pk)


@transaction.atomic
def suspend_team(marathon, team, reason, actor) -> Team:
    """
    Flag the team as suspended and settle everything pending on it:
    applications rejected, invitations invalidated, requests rejected.
    """
    team = _lock_team_for_moderation(marathon, team, actor)
    if team.is_suspended:
        raise Conflict("Team is already suspended.")

    team.is_suspended = True
    team.suspend_reason = reason or ""
    team.save(update_fields=["is_suspended", "suspend_reason", "updated_at"])

    rejected = bulk_transition(Application.objects.filter(team=team), Application.STATUS_REJECTED)
    invalidated = bulk_transition(Invitation.objects.filter(team=team), Invitation.STATUS_INVALIDATED)
    requests_rejected = bulk_transition(TeamRequest.objects.filter(team=team), TeamRequest.STATUS_REJECTED)

    ActivityService.log_activity(
        actor=actor.user,
        verb=verbs.TEAM_SUSPENDED,
        target=team,
        marathon=marathon,
        metadata={
            "reason": team.suspend_reason,
            "applications_rejected": rejected,
            "invitations_invalidated": invalidated,
            "requests_rejected": requests_rejected,
        },
    )
    logger.info(f"Team suspended: team={team.pk}, by={actor.user_id}")
    return team


@transaction.atomic
def unsuspend_team(marathon, team, actor) -> Team:
    team = _lock_team_for_moderation(marathon, team, actor)
    if not team.is_suspended:
        raise Conflict("Team is not suspended.")

    team.is_suspended = False
    team.suspend_reason = ""
    team.save(update_fields=["is_suspended", "suspend_reason", "updated_at"])

    ActivityService.log_activity(actor=actor.user, verb=verbs.TEAM_UNSUSPENDED, target=team, marathon=marathon)
    logger.info(f"Team unsuspended: team={team.pk}, by={actor.user_id}")
    return team


@transaction.atomic
def delete_team(marathon, team, actor):
    """Remove every member, then delete the team with all its requests."""
    team = _lock_team_for_moderation(marathon, team, actor)
    dissolve_team(team, actor=actor, verb=verbs.TEAM_DELETED, delete_history=True)
