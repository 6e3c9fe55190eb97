from .membership import DepartureOutcome, add_member, remove_member, reconcile_member_counts
from .decisions import create_team_request, decide, vote, list_team_requests, majority_for
from .resolution import execute
from .lifecycle import depart
from .applications import (
    create_application,
    cancel_application,
    accept_invitation,
    decline_invitation,
    list_my_applications,
    list_my_invitations,
    list_team_applications,
)
from .marathons import (
    create_marathon,
    delete_marathon,
    add_organizer,
    remove_organizer,
    join_marathon,
    leave_marathon,
    update_profile,
    leave_team,
    create_team,
)
from .moderation import (
    suspend_participant,
    ban_participant,
    unsuspend_participant,
    suspend_team,
    unsuspend_team,
    delete_team,
)
