# marathons/policies.py
"""
Centralized permission checks for marathon moderation.

All methods return (bool, reason). Services raise `Forbidden(reason)`
when a check fails.
"""
from typing import Tuple

from .actors import Actor
from .models import Marathon, Participant


class MarathonPolicy:

    @staticmethod
    def can_delete_marathon(actor: Actor) -> Tuple[bool, str]:
        if actor.is_creator:
            return True, ""
        return False, "Only the marathon creator can delete it."

    @staticmethod
    def can_manage_organizers(actor: Actor) -> Tuple[bool, str]:
        if actor.can_moderate:
            return True, ""
        return False, "Only organizers can manage organizers."

    @staticmethod
    def can_remove_organizer(actor: Actor, marathon: Marathon, user_id: int) -> Tuple[bool, str]:
        allowed, reason = MarathonPolicy.can_manage_organizers(actor)
        if not allowed:
            return allowed, reason
        if marathon.creator_id == user_id:
            return False, "The marathon creator cannot be removed from organizers."
        return True, ""

    @staticmethod
    def can_moderate_participant(actor: Actor, marathon: Marathon, target: Participant) -> Tuple[bool, str]:
        """Suspend/ban/unsuspend checks for `target`."""
        if not actor.can_moderate:
            return False, "Only organizers can moderate participants."

        if target.user_id == marathon.creator_id:
            return False, "The marathon creator cannot be moderated."

        if target.user_id == actor.user_id:
            return False, "You cannot moderate yourself."

        target_is_organizer = marathon.organizers.filter(pk=target.user_id).exists()
        if target_is_organizer and not (actor.is_creator or actor.is_system_admin):
            return False, "Only the marathon creator can moderate an organizer."

        return True, ""

    @staticmethod
    def can_moderate_team(actor: Actor) -> Tuple[bool, str]:
        if actor.can_moderate:
            return True, ""
        return False, "Only organizers can moderate teams."
