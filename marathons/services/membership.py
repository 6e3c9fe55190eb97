"""
Membership invariant enforcer.

`Participant.team` and `Team.member_count` are written together here and
nowhere else. Every function runs inside `transaction.atomic()` with the
team row locked.

Lock order across all services: the team row, then the request (decide and
vote), then the participant, then applications and invitations.
"""
from dataclasses import dataclass
import logging

from django.db import transaction

from core.exceptions import Conflict
from core.services import ActivityService

from .. import activity_verbs as verbs
from ..models import Application, Invitation, OpenPosition, Participant, Team, TeamRequest
from ..state_machine import bulk_transition

logger = logging.getLogger('tf.marathons')


@dataclass(frozen=True)
class DepartureOutcome:
    removed_from_team: bool = False
    team_deleted: bool = False
    team_became_democracy: bool = False


def _actor_user(actor):
    return getattr(actor, "user", None)


def lock_team(team_id) -> Team:
    return Team.objects.select_for_update().select_related("marathon").get(pk=team_id)


def lock_participant(participant_id) -> Participant:
    return Participant.objects.select_for_update().get(pk=participant_id)


def lock_member(participant_id):
    """
    Lock a participant together with their current team, team row first.

    Returns `(team, participant)`, with `team` None for a team-less
    participant. Retries when the membership changes between the unlocked
    read and the locks.
    """
    while True:
        team_id = Participant.objects.filter(pk=participant_id).values_list("team_id", flat=True).get()
        team = None
        if team_id is not None:
            team = Team.objects.select_for_update().select_related("marathon").filter(pk=team_id).first()
            if team is None:
                continue
        participant = lock_participant(participant_id)
        if participant.team_id == team_id:
            return team, participant


@transaction.atomic
def add_member(team, participant, actor=None, exclude_application=None, exclude_invitation=None) -> Team:
    """
    Put `participant` into `team` and collapse every competing offer:
    their other pending applications are cancelled and their other
    pending invitations invalidated.
    """
    team = lock_team(team.pk)
    participant = lock_participant(participant.pk)

    if participant.team_id is not None:
        raise Conflict("Participant already has a team.")

    participant.team = team
    participant.save(update_fields=["team", "updated_at"])

    team.member_count += 1
    team.save(update_fields=["member_count", "updated_at"])

    applications = Application.objects.filter(participant=participant)
    if exclude_application is not None:
        applications = applications.exclude(pk=exclude_application)
    invitations = Invitation.objects.filter(participant=participant)
    if exclude_invitation is not None:
        invitations = invitations.exclude(pk=exclude_invitation)

    cancelled = bulk_transition(applications, Application.STATUS_CANCELLED)
    invalidated = bulk_transition(invitations, Invitation.STATUS_INVALIDATED)

    ActivityService.log_activity(
        actor=_actor_user(actor),
        verb=verbs.TEAM_MEMBER_ADDED,
        target=team,
        marathon=team.marathon,
        metadata={
            "participant_id": participant.pk,
            "member_count": team.member_count,
            "applications_cancelled": cancelled,
            "invitations_invalidated": invalidated,
        },
    )
    logger.info(
        f"Member added: team={team.pk}, participant={participant.pk}, "
        f"member_count={team.member_count}"
    )
    return team


@transaction.atomic
def remove_member(team, participant, actor=None) -> DepartureOutcome:
    """
    Take `participant` out of `team`.

    A departing dictatorship leader leaves the team as a democracy with no
    leader. A team whose count reaches zero is dissolved.
    """
    team = lock_team(team.pk)
    participant = lock_participant(participant.pk)

    if participant.team_id != team.pk:
        raise Conflict("Participant is not a member of this team.")

    was_leader = team.is_dictatorship and team.leader_id == participant.pk

    participant.team = None
    participant.save(update_fields=["team", "updated_at"])

    team.member_count = max(team.member_count - 1, 0)

    ActivityService.log_activity(
        actor=_actor_user(actor),
        verb=verbs.TEAM_MEMBER_REMOVED,
        target=team,
        marathon=team.marathon,
        metadata={"participant_id": participant.pk, "member_count": team.member_count},
    )
    logger.info(
        f"Member removed: team={team.pk}, participant={participant.pk}, "
        f"member_count={team.member_count}"
    )

    if team.member_count == 0:
        dissolve_team(team, actor=actor)
        return DepartureOutcome(removed_from_team=True, team_deleted=True)

    update_fields = ["member_count", "updated_at"]
    if was_leader:
        team.decision_system = Team.DECISION_DEMOCRACY
        team.leader = None
        update_fields += ["decision_system", "leader"]
    team.save(update_fields=update_fields)

    if was_leader:
        ActivityService.log_activity(
            actor=_actor_user(actor),
            verb=verbs.TEAM_BECAME_DEMOCRACY,
            target=team,
            marathon=team.marathon,
            metadata={"former_leader_id": participant.pk},
        )
        logger.info(f"Team {team.pk} lost its leader and is now a democracy")

    return DepartureOutcome(removed_from_team=True, team_became_democracy=was_leader)


def dissolve_team(team, actor=None, verb=verbs.TEAM_DISSOLVED, delete_history=False):
    """
    Delete `team` together with its open positions and pending requests.

    Pending applications to the team are rejected and pending invitations
    from it invalidated; resolved rows keep their status with `team` cleared.
    `delete_history` also removes resolved requests (organizer deletion).
    Must run inside the caller's transaction with the team row locked.
    """
    rejected = bulk_transition(Application.objects.filter(team=team), Application.STATUS_REJECTED)
    invalidated = bulk_transition(Invitation.objects.filter(team=team), Invitation.STATUS_INVALIDATED)

    requests = TeamRequest.objects.filter(team=team)
    if not delete_history:
        requests = requests.filter(status=TeamRequest.STATUS_PENDING)
    requests_deleted, _ = requests.delete()
    positions_deleted, _ = OpenPosition.objects.filter(team=team).delete()

    released = Participant.objects.filter(team=team).update(team=None)

    ActivityService.log_activity(
        actor=_actor_user(actor),
        verb=verb,
        target=team,
        marathon=team.marathon,
        metadata={
            "name": team.name,
            "members_released": released,
            "applications_rejected": rejected,
            "invitations_invalidated": invalidated,
        },
    )
    logger.info(
        f"Team dissolved: team={team.pk}, applications_rejected={rejected}, "
        f"invitations_invalidated={invalidated}, positions_deleted={positions_deleted}, "
        f"requests_deleted={requests_deleted}"
    )
    team.delete()


def reconcile_member_counts(marathon=None) -> int:
    """
    Recompute `member_count` from the participant roster.

    Teams found empty are dissolved; a dictatorship whose leader is no longer
    a member becomes a democracy. Returns the number of corrected teams.
    """
    teams = Team.objects.all()
    if marathon is not None:
        teams = teams.filter(marathon=marathon)

    corrected = 0
    for team_id in teams.values_list("pk", flat=True):
        with transaction.atomic():
            try:
                team = lock_team(team_id)
            except Team.DoesNotExist:
                continue

            actual = Participant.objects.filter(team=team).count()
            leader_missing = team.is_dictatorship and not Participant.objects.filter(
                pk=team.leader_id, team=team
            ).exists()

            if actual == team.member_count and not leader_missing and actual > 0:
                continue

            corrected += 1
            logger.warning(
                f"Repairing team {team.pk}: member_count={team.member_count}, "
                f"actual={actual}, leader_missing={leader_missing}"
            )
            ActivityService.log_activity(
                actor=None,
                verb=verbs.TEAM_MEMBER_COUNT_REPAIRED,
                target=team,
                marathon=team.marathon,
                metadata={"stored": team.member_count, "actual": actual},
            )

            if actual == 0:
                dissolve_team(team)
                continue

            team.member_count = actual
            if leader_missing:
                team.decision_system = Team.DECISION_DEMOCRACY
                team.leader = None
            team.save(update_fields=["member_count", "decision_system", "leader", "updated_at"])

    logger.info(f"Member count repair finished: {corrected} team(s) corrected")
    return corrected
