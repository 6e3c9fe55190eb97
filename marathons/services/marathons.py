"""
Marathon-level operations: creation, organizers, joining and leaving,
profiles and team creation.
"""
import logging

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from rest_framework.exceptions import ValidationError

from core.exceptions import Conflict, Forbidden, NotFound
from core.services import ActivityService

from .. import activity_verbs as verbs
from ..models import SLUG_VALIDATOR, Marathon, Participant, Team
from ..policies import MarathonPolicy
from .lifecycle import depart, withdraw_pending
from .membership import add_member, lock_participant

logger = logging.getLogger('tf.marathons')

User = get_user_model()

PROFILE_FIELDS = ("name", "nickname", "roles", "technologies", "description")


@transaction.atomic
def create_marathon(user, name, slug, min_team_size=1, max_team_size=5, description="") -> Marathon:
    slug = (slug or "").strip().lower()
    try:
        SLUG_VALIDATOR(slug)
    except DjangoValidationError as e:
        raise ValidationError({"slug": e.messages})

    if not 1 <= min_team_size <= max_team_size <= 50:
        raise ValidationError({"max_team_size": "Team size bounds must satisfy 1 <= min <= max <= 50."})

    if Marathon.objects.filter(slug=slug).exists():
        raise Conflict("A marathon with this slug already exists.")

    try:
        with transaction.atomic():
            marathon = Marathon.objects.create(
                name=name,
                slug=slug,
                description=description or "",
                min_team_size=min_team_size,
                max_team_size=max_team_size,
                creator=user,
            )
    except IntegrityError:
        raise Conflict("A marathon with this slug already exists.")

    marathon.organizers.add(user)

    ActivityService.log_activity(actor=user, verb=verbs.MARATHON_CREATED, target=marathon, marathon=marathon)
    logger.info(f"Marathon created: marathon={marathon.pk}, slug={slug}, creator={user.pk}")
    return marathon


@transaction.atomic
def delete_marathon(marathon, actor):
    allowed, reason = MarathonPolicy.can_delete_marathon(actor)
    if not allowed:
        raise Forbidden(reason)

    ActivityService.log_activity(
        actor=actor.user,
        verb=verbs.MARATHON_DELETED,
        target=marathon,
        metadata={"slug": marathon.slug, "name": marathon.name},
    )
    logger.info(f"Marathon deleted: marathon={marathon.pk}, slug={marathon.slug}, actor={actor.user_id}")
    marathon.delete()


@transaction.atomic
def add_organizer(marathon, actor, user_id):
    allowed, reason = MarathonPolicy.can_manage_organizers(actor)
    if not allowed:
        raise Forbidden(reason)

    user = User.objects.filter(pk=user_id).first()
    if user is None:
        raise NotFound("User not found.")
    if marathon.organizers.filter(pk=user.pk).exists():
        raise Conflict("User is already an organizer.")

    marathon.organizers.add(user)
    ActivityService.log_activity(
        actor=actor.user,
        verb=verbs.MARATHON_ORGANIZER_ADDED,
        target=marathon,
        marathon=marathon,
        metadata={"user_id": user.pk},
    )
    logger.info(f"Organizer added: marathon={marathon.pk}, user={user.pk}")
    return user


@transaction.atomic
def remove_organizer(marathon, actor, user_id):
    allowed, reason = MarathonPolicy.can_remove_organizer(actor, marathon, user_id)
    if not allowed:
        raise Forbidden(reason)

    user = marathon.organizers.filter(pk=user_id).first()
    if user is None:
        raise NotFound("Organizer not found.")

    marathon.organizers.remove(user)
    ActivityService.log_activity(
        actor=actor.user,
        verb=verbs.MARATHON_ORGANIZER_REMOVED,
        target=marathon,
        marathon=marathon,
        metadata={"user_id": user.pk},
    )
    logger.info(f"Organizer removed: marathon={marathon.pk}, user={user.pk}")


@transaction.atomic
def join_marathon(marathon, user) -> Participant:
    existing = Participant.objects.filter(marathon=marathon, user=user).first()
    if existing is not None:
        if existing.is_banned:
            raise Forbidden("You are banned from this marathon.")
        raise Conflict("You already joined this marathon.")

    try:
        with transaction.atomic():
            participant = Participant.objects.create(
                marathon=marathon,
                user=user,
                name=user.get_full_name() or user.username,
            )
    except IntegrityError:
        raise Conflict("You already joined this marathon.")

    ActivityService.log_activity(actor=user, verb=verbs.PARTICIPANT_JOINED, target=participant, marathon=marathon)
    logger.info(f"Participant joined: marathon={marathon.pk}, user={user.pk}, participant={participant.pk}")
    return participant


@transaction.atomic
def leave_marathon(marathon, actor):
    """
    Drop the actor's participant row. Team members must leave their team
    first; banned participants keep their row so they cannot rejoin.
    """
    if actor.participant_id is None:
        raise NotFound("You are not a participant of this marathon.")
    participant = lock_participant(actor.participant_id)

    if participant.is_banned:
        raise Forbidden("Banned participants cannot leave the marathon.")
    if participant.team_id is not None:
        raise Conflict("Leave your team before leaving the marathon.")

    cancelled, invalidated = withdraw_pending(participant)
    ActivityService.log_activity(
        actor=actor.user,
        verb=verbs.PARTICIPANT_LEFT,
        target=marathon,
        marathon=marathon,
        metadata={
            "participant_id": participant.pk,
            "applications_cancelled": cancelled,
            "invitations_invalidated": invalidated,
        },
    )
    logger.info(f"Participant left marathon: marathon={marathon.pk}, participant={participant.pk}")
    participant.delete()


@transaction.atomic
def update_profile(marathon, actor, **changes) -> Participant:
    """
    Patch the actor's profile. Organizers without a participant row get one.
    Nicknames are lower-cased and unique per marathon.
    """
    if actor.participant_id is not None:
        participant = lock_participant(actor.participant_id)
    elif actor.can_moderate:
        participant = Participant.objects.create(
            marathon=marathon,
            user=actor.user,
            name=actor.user.get_full_name() or actor.user.username,
        )
        logger.info(f"Participant row created for organizer: marathon={marathon.pk}, user={actor.user_id}")
    else:
        raise NotFound("You are not a participant of this marathon.")

    unknown = sorted(set(changes) - set(PROFILE_FIELDS))
    if unknown:
        raise ValidationError({field: "Unknown profile field." for field in unknown})

    if "nickname" in changes:
        nickname = (changes["nickname"] or "").strip().lower() or None
        if nickname and Participant.objects.filter(marathon=marathon, nickname=nickname).exclude(pk=participant.pk).exists():
            raise Conflict("This nickname is already taken.")
        changes["nickname"] = nickname

    for key, value in changes.items():
        setattr(participant, key, value)

    try:
        with transaction.atomic():
            participant.save(update_fields=list(changes) + ["updated_at"])
    except IntegrityError:
        raise Conflict("This nickname is already taken.")

    ActivityService.log_activity(
        actor=actor.user,
        verb=verbs.PARTICIPANT_PROFILE_UPDATED,
        target=participant,
        marathon=marathon,
        metadata={"fields": sorted(changes)},
    )
    return participant


def leave_team(actor):
    if actor.participant_id is None:
        raise NotFound("You are not a participant of this marathon.")
    participant = Participant.objects.filter(pk=actor.participant_id).first()
    if participant is None or participant.team_id is None:
        raise NotFound("You are not in a team.")
    return depart(participant, actor=actor)


@transaction.atomic
def create_team(marathon, actor, name, decision_system=Team.DECISION_DEMOCRACY,
                management_type=Team.MANAGEMENT_FREE, **fields) -> Team:
    """
    Create a team with the actor as its first member (and leader, for a
    dictatorship).
    """
    if actor.participant_id is None:
        raise NotFound("You are not a participant of this marathon.")
    creator = lock_participant(actor.participant_id)

    if creator.is_banned or creator.is_suspended:
        raise Forbidden("Suspended or banned participants cannot create teams.")
    if creator.team_id is not None:
        raise Conflict("You already have a team.")

    unknown = sorted(set(fields) - set(Team.SETTINGS_FIELDS))
    if unknown:
        raise ValidationError({field: "Unknown team field." for field in unknown})

    name = (name or "").strip()
    if Team.objects.filter(marathon=marathon, name__iexact=name).exists():
        raise Conflict("A team with this name already exists.")

    dictatorship = decision_system == Team.DECISION_DICTATORSHIP
    try:
        with transaction.atomic():
            team = Team.objects.create(
                marathon=marathon,
                name=name,
                decision_system=decision_system,
                management_type=management_type,
                leader=creator if dictatorship else None,
                **fields,
            )
    except IntegrityError:
        raise Conflict("A team with this name already exists.")

    ActivityService.log_activity(
        actor=actor.user,
        verb=verbs.TEAM_CREATED,
        target=team,
        marathon=marathon,
        metadata={"name": team.name, "decision_system": decision_system},
    )
    logger.info(f"Team created: team={team.pk}, marathon={marathon.pk}, creator={creator.pk}")

    return add_member(team, creator, actor=actor)
