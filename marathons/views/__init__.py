from .marathons import (
    MarathonListCreateView,
    MarathonDetailView,
    JoinMarathonView,
    LeaveMarathonView,
    MyProfileView,
    MyStatusView,
    OrganizerListCreateView,
    OrganizerDetailView,
)
from .participants import ParticipantListView, ParticipantDetailView
from .teams import TeamListCreateView, TeamDetailView, TeamApplicationCreateView, LeaveTeamView, MyTeamView
from .requests import TeamRequestListCreateView, VoteView, DecideView
from .applications import (
    MyTeamApplicationsView,
    MyApplicationsView,
    MyApplicationDetailView,
    MyInvitationsView,
    AcceptInvitationView,
    DeclineInvitationView,
)
from .moderation import (
    SuspendParticipantView,
    BanParticipantView,
    UnsuspendParticipantView,
    SuspendTeamView,
    UnsuspendTeamView,
    DeleteTeamView,
)
