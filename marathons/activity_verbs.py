# marathons/activity_verbs.py
"""
Activity verbs for DomainActivity rows written by the marathons app.

All activity logging for governance transitions should use these constants
so histories can be filtered consistently.
"""

# Marathon
MARATHON_CREATED = "marathon.created"
MARATHON_DELETED = "marathon.deleted"
MARATHON_ORGANIZER_ADDED = "marathon.organizer_added"
MARATHON_ORGANIZER_REMOVED = "marathon.organizer_removed"

# Participants
PARTICIPANT_JOINED = "participant.joined"
PARTICIPANT_LEFT = "participant.left"
PARTICIPANT_PROFILE_UPDATED = "participant.profile_updated"
PARTICIPANT_SUSPENDED = "participant.suspended"
PARTICIPANT_UNSUSPENDED = "participant.unsuspended"
PARTICIPANT_BANNED = "participant.banned"

# Teams
TEAM_CREATED = "team.created"
TEAM_MEMBER_ADDED = "team.member_added"
TEAM_MEMBER_REMOVED = "team.member_removed"
TEAM_DISSOLVED = "team.dissolved"
TEAM_BECAME_DEMOCRACY = "team.became_democracy"
TEAM_SUSPENDED = "team.suspended"
TEAM_UNSUSPENDED = "team.unsuspended"
TEAM_DELETED = "team.deleted"
TEAM_MEMBER_COUNT_REPAIRED = "team.member_count_repaired"

# Requests
REQUEST_CREATED = "team_request.created"
REQUEST_VOTED = "team_request.voted"
REQUEST_APPROVED = "team_request.approved"
REQUEST_REJECTED = "team_request.rejected"

# Applications
APPLICATION_CREATED = "application.created"
APPLICATION_ACCEPTED = "application.accepted"
APPLICATION_REJECTED = "application.rejected"
APPLICATION_CANCELLED = "application.cancelled"

# Invitations
INVITATION_CREATED = "invitation.created"
INVITATION_ACCEPTED = "invitation.accepted"
INVITATION_DECLINED = "invitation.declined"
