"""
Request resolution engine.

`execute` runs the side effect of a request that has already been stored as
approved. Each handler re-reads the rows it depends on and does nothing when
they are gone or already resolved, so running a request twice has the same
result as running it once.
"""
import logging

from core.services import ActivityService

from .. import activity_verbs as verbs
from ..models import Application, Invitation, OpenPosition, Participant, Team, TeamRequest
from ..state_machine import transition
from .membership import add_member, lock_participant, remove_member

logger = logging.getLogger('tf.marathons')


def _skip(request, reason):
    logger.info(f"Request {request.pk} ({request.type}) resolved as no-op: {reason}")


def _accept_application(request, team, payload, actor):
    participant_id = (
        Application.objects.filter(pk=payload.application_id, team=team)
        .values_list("participant_id", flat=True)
        .first()
    )
    if participant_id is None:
        return _skip(request, "application is no longer pending")

    applicant = lock_participant(participant_id)
    application = (
        Application.objects.select_for_update()
        .filter(pk=payload.application_id, team=team)
        .first()
    )
    if application is None or application.status != Application.STATUS_PENDING:
        return _skip(request, "application is no longer pending")
    if applicant.team_id is not None:
        return _skip(request, "applicant already has a team")
    if team.member_count >= team.marathon.max_team_size:
        return _skip(request, "team is at capacity")

    transition(application, Application.STATUS_ACCEPTED, actor=actor)
    add_member(team, applicant, actor=actor, exclude_application=application.pk)
    ActivityService.log_activity(
        actor=getattr(actor, "user", None),
        verb=verbs.APPLICATION_ACCEPTED,
        target=application,
        marathon=team.marathon,
        metadata={"team_id": team.pk, "request_id": request.pk},
    )


def _reject_application(request, team, payload, actor):
    application = Application.objects.filter(pk=payload.application_id, team=team).first()
    if application is None or application.status != Application.STATUS_PENDING:
        return _skip(request, "application is no longer pending")

    transition(application, Application.STATUS_REJECTED, actor=actor)
    ActivityService.log_activity(
        actor=getattr(actor, "user", None),
        verb=verbs.APPLICATION_REJECTED,
        target=application,
        marathon=team.marathon,
        metadata={"team_id": team.pk, "request_id": request.pk},
    )


def _open_position(request, team, payload, actor):
    position = OpenPosition.objects.create(
        team=team,
        marathon=team.marathon,
        role=payload.role,
        description=payload.description,
    )
    logger.info(f"Open position created: team={team.pk}, position={position.pk}, role={position.role}")


def _close_position(request, team, payload, actor):
    deleted, _ = OpenPosition.objects.filter(pk=payload.position_id, team=team).delete()
    if not deleted:
        return _skip(request, "position already closed")
    logger.info(f"Open position closed: team={team.pk}, position={payload.position_id}")


def _invite(request, team, payload, actor):
    participant = Participant.objects.filter(pk=payload.participant_id, marathon=team.marathon).first()
    if participant is None:
        return _skip(request, "invited participant left the marathon")

    invitation = Invitation.objects.create(
        marathon=team.marathon,
        team=team,
        participant=participant,
        request=request,
        message=payload.message,
    )
    ActivityService.log_activity(
        actor=getattr(actor, "user", None),
        verb=verbs.INVITATION_CREATED,
        target=invitation,
        marathon=team.marathon,
        metadata={"team_id": team.pk, "participant_id": participant.pk},
    )


def _kick(request, team, payload, actor):
    member = Participant.objects.filter(pk=payload.member_id, team=team).first()
    if member is None:
        return _skip(request, "member already left the team")
    remove_member(team, member, actor=actor)


def _transfer_lead(request, team, payload, actor):
    if not team.is_dictatorship:
        return _skip(request, "team is no longer a dictatorship")
    if not Participant.objects.filter(pk=payload.member_id, team=team).exists():
        return _skip(request, "new leader is no longer a member")

    team.leader_id = payload.member_id
    team.save(update_fields=["leader", "updated_at"])
    logger.info(f"Leadership transferred: team={team.pk}, leader={payload.member_id}")


def _change_decision_system(request, team, payload, actor):
    if payload.decision_system == Team.DECISION_DEMOCRACY:
        team.decision_system = Team.DECISION_DEMOCRACY
        team.leader = None
    else:
        if not Participant.objects.filter(pk=payload.leader_id, team=team).exists():
            return _skip(request, "proposed leader is no longer a member")
        team.decision_system = Team.DECISION_DICTATORSHIP
        team.leader_id = payload.leader_id

    team.save(update_fields=["decision_system", "leader", "updated_at"])
    logger.info(
        f"Decision system changed: team={team.pk}, system={team.decision_system}, "
        f"leader={team.leader_id}"
    )


def _update_settings(request, team, payload, actor):
    changes = dict(payload.changes)
    name = changes.get("name")
    if name and Team.objects.filter(marathon=team.marathon, name__iexact=name).exclude(pk=team.pk).exists():
        _skip(request, f"team name '{name}' was taken meanwhile")
        changes.pop("name")
    if not changes:
        return

    for key, value in changes.items():
        setattr(team, key, value)
    team.save(update_fields=list(changes) + ["updated_at"])
    logger.info(f"Team settings updated: team={team.pk}, fields={sorted(changes)}")


HANDLERS = {
    TeamRequest.TYPE_ACCEPT_APPLICATION: _accept_application,
    TeamRequest.TYPE_REJECT_APPLICATION: _reject_application,
    TeamRequest.TYPE_OPEN_POSITION: _open_position,
    TeamRequest.TYPE_CLOSE_POSITION: _close_position,
    TeamRequest.TYPE_INVITE: _invite,
    TeamRequest.TYPE_KICK: _kick,
    TeamRequest.TYPE_TRANSFER_LEAD: _transfer_lead,
    TeamRequest.TYPE_CHANGE_DECISION_SYSTEM: _change_decision_system,
    TeamRequest.TYPE_UPDATE_SETTINGS: _update_settings,
}


def execute(request: TeamRequest, actor=None):
    """
    Apply the effect of an approved request. Missing dependent rows
    degrade to no-ops; the request stays approved either way.
    """
    if request.status != TeamRequest.STATUS_APPROVED:
        raise ValueError(f"Request {request.pk} is {request.status}, not approved")

    team = Team.objects.select_for_update().select_related("marathon").filter(pk=request.team_id).first()
    if team is None:
        return _skip(request, "team no longer exists")

    HANDLERS[request.type](request, team, request.typed_payload, actor)
