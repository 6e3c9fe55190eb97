"""
Decision system for team requests.

A request authored by the leader of a dictatorship is approved and executed
in the same call. Every other request waits for the leader's `decide`
(dictatorship) or for a majority of votes (democracy).

Invariants:
    - pending -> approved | rejected, terminal states never change
    - at most one pending request per (team, type)
    - majority = member_count // 2 + 1, recomputed on every vote
    - one vote per participant; the first vote is final
"""
import logging

from django.db import IntegrityError, transaction
from django.db.models import Count, OuterRef, Q, Subquery
from rest_framework.exceptions import ValidationError

from core.exceptions import Conflict, Forbidden, NotFound
from core.services import ActivityService

from .. import activity_verbs as verbs
from ..models import Application, Invitation, OpenPosition, Participant, Team, TeamRequest, TeamRequestVote
from ..payloads import (
    AcceptApplicationPayload,
    ChangeDecisionSystemPayload,
    ClosePositionPayload,
    InvitePayload,
    KickPayload,
    RejectApplicationPayload,
    TransferLeadPayload,
    UpdateSettingsPayload,
    payload_to_dict,
    request_type_of,
)
from ..state_machine import transition
from . import resolution
from .membership import lock_team

logger = logging.getLogger('tf.marathons')


def majority_for(member_count: int) -> int:
    return member_count // 2 + 1


def _team_member(team, actor, error=NotFound):
    member = Participant.objects.filter(pk=actor.participant_id, team=team).first()
    if member is None:
        if error is NotFound:
            raise NotFound("You are not a member of this team.")
        raise Forbidden("Only team members can do this.")
    return member


def _validate_payload(team, author, payload):
    """Reject payloads that could never be executed against `team`."""
    if isinstance(payload, InvitePayload):
        target = Participant.objects.filter(pk=payload.participant_id, marathon=team.marathon).first()
        if target is None:
            raise NotFound("Participant not found.")
        if target.team_id is not None:
            raise Conflict("Participant already has a team.")
        if target.is_banned or target.is_suspended:
            raise Conflict("Participant is suspended or banned.")
        if Invitation.objects.filter(team=team, participant=target, status=Invitation.STATUS_PENDING).exists():
            raise Conflict("Participant already has a pending invitation from this team.")

    elif isinstance(payload, ClosePositionPayload):
        if not OpenPosition.objects.filter(pk=payload.position_id, team=team).exists():
            raise NotFound("Open position not found.")

    elif isinstance(payload, KickPayload):
        if not Participant.objects.filter(pk=payload.member_id, team=team).exists():
            raise NotFound("Member not found in this team.")
        if payload.member_id == author.pk:
            raise Conflict("You cannot kick yourself; leave the team instead.")

    elif isinstance(payload, TransferLeadPayload):
        if not team.is_dictatorship:
            raise Conflict("Leadership can only be transferred in a dictatorship.")
        if not Participant.objects.filter(pk=payload.member_id, team=team).exists():
            raise NotFound("Member not found in this team.")
        if team.leader_id == payload.member_id:
            raise Conflict("This member already leads the team.")

    elif isinstance(payload, (AcceptApplicationPayload, RejectApplicationPayload)):
        if not Application.objects.filter(
            pk=payload.application_id, team=team, status=Application.STATUS_PENDING
        ).exists():
            raise NotFound("Pending application not found.")
        if isinstance(payload, AcceptApplicationPayload) and team.is_full:
            raise Conflict("Team is at maximum size.")

    elif isinstance(payload, ChangeDecisionSystemPayload):
        if payload.decision_system == team.decision_system:
            raise Conflict(f"Team already uses {team.decision_system}.")
        if payload.decision_system == Team.DECISION_DICTATORSHIP:
            if not Participant.objects.filter(pk=payload.leader_id, team=team).exists():
                raise NotFound("Proposed leader is not a member of this team.")

    elif isinstance(payload, UpdateSettingsPayload):
        name = payload.changes.get("name")
        if name and Team.objects.filter(marathon=team.marathon, name__iexact=name).exclude(pk=team.pk).exists():
            raise Conflict("A team with this name already exists.")


def _resolve(request, new_status, actor, decided_by=None):
    ok, reason = transition(request, new_status, actor=actor, save=False)
    if not ok:
        raise Conflict(reason)

    update_fields = ["status", "resolved_at"]
    if decided_by is not None:
        request.decided_by = decided_by
        request.decided_at = request.resolved_at
        update_fields += ["decided_by", "decided_at"]
    request.save(update_fields=update_fields)

    verb = verbs.REQUEST_APPROVED if new_status == TeamRequest.STATUS_APPROVED else verbs.REQUEST_REJECTED
    ActivityService.log_activity(
        actor=getattr(actor, "user", None),
        verb=verb,
        target=request,
        marathon=request.marathon,
        metadata={"team_id": request.team_id, "type": request.type, "decided_by": request.decided_by_id},
    )

    if new_status == TeamRequest.STATUS_APPROVED:
        resolution.execute(request, actor=actor)


@transaction.atomic
def create_team_request(team, actor, payload) -> TeamRequest:
    """
    Propose a change for `team`. Leader proposals in a dictatorship come back
    already approved and executed.
    """
    team = lock_team(team.pk)
    author = _team_member(team, actor)

    if team.is_suspended:
        raise Conflict("Team is suspended.")

    request_type = request_type_of(payload)
    if TeamRequest.objects.filter(team=team, type=request_type, status=TeamRequest.STATUS_PENDING).exists():
        raise Conflict(f"A pending {request_type} request already exists for this team.")

    _validate_payload(team, author, payload)

    try:
        with transaction.atomic():
            request = TeamRequest.objects.create(
                marathon=team.marathon,
                team=team,
                author=author,
                type=request_type,
                payload=payload_to_dict(payload),
            )
    except IntegrityError:
        raise Conflict(f"A pending {request_type} request already exists for this team.")

    ActivityService.log_activity(
        actor=getattr(actor, "user", None),
        verb=verbs.REQUEST_CREATED,
        target=request,
        marathon=team.marathon,
        metadata={"team_id": team.pk, "type": request_type, "payload": request.payload},
    )
    logger.info(f"Team request created: request={request.pk}, team={team.pk}, type={request_type}")

    if team.is_dictatorship and team.leader_id == author.pk:
        _resolve(request, TeamRequest.STATUS_APPROVED, actor, decided_by=author)

    return request


def _lock_request(request):
    """Lock the request's team, then the request row itself."""
    team_id = TeamRequest.objects.filter(pk=request.pk).values_list("team_id", flat=True).first()
    team = Team.objects.select_for_update().select_related("marathon").filter(pk=team_id).first()
    if team is None:
        raise NotFound("Request not found.")

    request = TeamRequest.objects.select_for_update().filter(pk=request.pk, team=team).first()
    if request is None:
        raise NotFound("Request not found.")
    return request, team


@transaction.atomic
def decide(request, actor, decision: str) -> TeamRequest:
    """The dictatorship leader approves or rejects a pending request."""
    if decision not in dict(TeamRequestVote.VOTE_CHOICES):
        raise ValidationError({"decision": "Must be 'approve' or 'reject'."})

    request, team = _lock_request(request)
    if not team.is_dictatorship:
        raise Forbidden("Only dictatorship teams decide requests through their leader.")
    if actor.participant_id is None or team.leader_id != actor.participant_id:
        raise Forbidden("Only the team leader can decide requests.")
    if request.status != TeamRequest.STATUS_PENDING:
        raise Conflict("Request is already resolved.")

    new_status = TeamRequest.STATUS_APPROVED if decision == TeamRequestVote.VOTE_APPROVE else TeamRequest.STATUS_REJECTED
    _resolve(request, new_status, actor, decided_by=team.leader)
    return request


@transaction.atomic
def vote(request, actor, choice: str) -> TeamRequest:
    """
    Record a democracy member's vote, then approve or reject the request
    once either side reaches a majority of the current member count.
    """
    if choice not in dict(TeamRequestVote.VOTE_CHOICES):
        raise ValidationError({"vote": "Must be 'approve' or 'reject'."})

    request, team = _lock_request(request)
    if team.is_dictatorship:
        raise Forbidden("Dictatorship teams do not vote.")
    voter = _team_member(team, actor, error=Forbidden)
    if request.status != TeamRequest.STATUS_PENDING:
        raise Conflict("Request is already resolved.")

    if TeamRequestVote.objects.filter(request=request, participant=voter).exists():
        raise Conflict("You have already voted on this request.")
    TeamRequestVote.objects.create(request=request, participant=voter, vote=choice)

    tally = request.votes.aggregate(
        approve=Count("pk", filter=Q(vote=TeamRequestVote.VOTE_APPROVE)),
        reject=Count("pk", filter=Q(vote=TeamRequestVote.VOTE_REJECT)),
    )
    majority = majority_for(team.member_count)

    ActivityService.log_activity(
        actor=getattr(actor, "user", None),
        verb=verbs.REQUEST_VOTED,
        target=request,
        marathon=team.marathon,
        metadata={"vote": choice, "participant_id": voter.pk, **tally, "majority": majority},
    )
    logger.info(
        f"Vote recorded: request={request.pk}, participant={voter.pk}, vote={choice}, "
        f"approve={tally['approve']}, reject={tally['reject']}, majority={majority}"
    )

    if tally["approve"] >= majority:
        _resolve(request, TeamRequest.STATUS_APPROVED, actor)
    elif tally["reject"] >= majority:
        _resolve(request, TeamRequest.STATUS_REJECTED, actor)

    return request


def list_team_requests(team, actor, status=TeamRequest.STATUS_PENDING):
    """
    The team's requests with `status` (pending unless given, "all" for every
    status), annotated with `approve_count`, `reject_count` and the actor's
    own vote as `my_vote`.
    """
    _team_member(team, actor)

    requests = TeamRequest.objects.filter(team=team)
    if status != "all":
        requests = requests.filter(status=status or TeamRequest.STATUS_PENDING)

    my_vote = TeamRequestVote.objects.filter(
        request=OuterRef("pk"), participant_id=actor.participant_id
    ).values("vote")[:1]

    return (
        requests
        .select_related("author", "decided_by")
        .annotate(
            approve_count=Count("votes", filter=Q(votes__vote=TeamRequestVote.VOTE_APPROVE)),
            reject_count=Count("votes", filter=Q(votes__vote=TeamRequestVote.VOTE_REJECT)),
            my_vote=Subquery(my_vote),
        )
    )
