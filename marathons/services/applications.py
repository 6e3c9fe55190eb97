"""
Application and invitation lifecycle.

Applications are created by team-less participants and resolved by the team
(through accept/reject requests) or withdrawn by the applicant. Invitations
are created by approved invite requests and resolved by the invitee.
"""
import logging

from django.db import IntegrityError, transaction

from core.exceptions import Conflict, Forbidden, NotFound
from core.services import ActivityService

from .. import activity_verbs as verbs
from ..models import Application, Invitation, Participant, Team
from ..state_machine import transition
from .membership import add_member, lock_participant

logger = logging.getLogger('tf.marathons')


def _own_participant(actor) -> Participant:
    if actor.participant_id is None:
        raise NotFound("You are not a participant of this marathon.")
    return lock_participant(actor.participant_id)


@transaction.atomic
def create_application(team, actor, message: str = "") -> Application:
    team = Team.objects.select_for_update().filter(pk=team.pk).first()
    if team is None or team.marathon_id != actor.marathon_id or team.is_suspended:
        raise NotFound("Team not found.")

    applicant = _own_participant(actor)
    if applicant.is_banned or applicant.is_suspended:
        raise Forbidden("Suspended or banned participants cannot apply.")
    if applicant.team_id is not None:
        raise Conflict("You already have a team.")
    if Application.objects.filter(participant=applicant, team=team, status=Application.STATUS_PENDING).exists():
        raise Conflict("You already have a pending application to this team.")

    try:
        with transaction.atomic():
            application = Application.objects.create(
                marathon_id=team.marathon_id,
                team=team,
                participant=applicant,
                message=message or "",
            )
    except IntegrityError:
        raise Conflict("You already have a pending application to this team.")

    ActivityService.log_activity(
        actor=actor.user,
        verb=verbs.APPLICATION_CREATED,
        target=application,
        marathon=team.marathon,
        metadata={"team_id": team.pk},
    )
    logger.info(f"Application created: application={application.pk}, team={team.pk}, participant={applicant.pk}")
    return application


@transaction.atomic
def cancel_application(application, actor) -> Application:
    application = Application.objects.select_for_update().filter(pk=application.pk).first()
    if application is None or actor.participant_id is None or application.participant_id != actor.participant_id:
        raise NotFound("Application not found.")

    ok, reason = transition(application, Application.STATUS_CANCELLED, actor=actor)
    if not ok:
        raise Conflict(reason)

    ActivityService.log_activity(
        actor=actor.user,
        verb=verbs.APPLICATION_CANCELLED,
        target=application,
        marathon=application.marathon,
        metadata={"team_id": application.team_id},
    )
    return application


def _own_invitation(invitation, actor, lock=False) -> Invitation:
    invitations = Invitation.objects.select_for_update() if lock else Invitation.objects
    invitation = invitations.filter(pk=invitation.pk).first()
    if invitation is None or actor.participant_id is None or invitation.participant_id != actor.participant_id:
        raise NotFound("Invitation not found.")
    if invitation.status != Invitation.STATUS_PENDING:
        raise Conflict("Invitation is already resolved.")
    return invitation


def accept_invitation(invitation, actor) -> Invitation:
    """
    Join the inviting team. An invitation whose team has been dissolved is
    invalidated and reported as a conflict.
    """
    with transaction.atomic():
        invitation = _own_invitation(invitation, actor)
        team = None
        if invitation.team_id is not None:
            team = Team.objects.select_for_update().select_related("marathon").filter(pk=invitation.team_id).first()
        participant = lock_participant(invitation.participant_id)
        invitation = _own_invitation(invitation, actor, lock=True)

        if participant.is_banned or participant.is_suspended:
            raise Forbidden("Suspended or banned participants cannot join teams.")
        if participant.team_id is not None:
            raise Conflict("You already have a team.")

        team_gone = team is None
        if team_gone:
            transition(invitation, Invitation.STATUS_INVALIDATED, actor=actor)
        else:
            if team.is_suspended:
                raise Conflict("Team is suspended.")
            if team.is_full:
                raise Conflict("Team is at maximum size.")

            transition(invitation, Invitation.STATUS_ACCEPTED, actor=actor)
            add_member(team, participant, actor=actor, exclude_invitation=invitation.pk)
            ActivityService.log_activity(
                actor=actor.user,
                verb=verbs.INVITATION_ACCEPTED,
                target=invitation,
                marathon=team.marathon,
                metadata={"team_id": team.pk},
            )

    if team_gone:
        raise Conflict("The inviting team no longer exists.")
    return invitation


@transaction.atomic
def decline_invitation(invitation, actor) -> Invitation:
    invitation = _own_invitation(invitation, actor, lock=True)
    transition(invitation, Invitation.STATUS_DECLINED, actor=actor)
    ActivityService.log_activity(
        actor=actor.user,
        verb=verbs.INVITATION_DECLINED,
        target=invitation,
        marathon=invitation.marathon,
        metadata={"team_id": invitation.team_id},
    )
    return invitation


def list_my_applications(actor):
    if actor.participant_id is None:
        return Application.objects.none()
    return Application.objects.filter(participant_id=actor.participant_id).select_related("team")


def list_my_invitations(actor):
    if actor.participant_id is None:
        return Invitation.objects.none()
    return Invitation.objects.filter(participant_id=actor.participant_id).select_related("team")


def list_team_applications(actor):
    """Pending applications to the actor's own team."""
    participant = Participant.objects.filter(pk=actor.participant_id).first()
    if participant is None or participant.team_id is None:
        raise NotFound("You are not in a team.")
    return Application.objects.filter(
        team_id=participant.team_id,
        status=Application.STATUS_PENDING,
    ).select_related("participant")
