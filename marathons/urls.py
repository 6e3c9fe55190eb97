from django.urls import path
from .views import (
    MarathonListCreateView,
    MarathonDetailView,
    JoinMarathonView,
    LeaveMarathonView,
    MyProfileView,
    MyStatusView,
    OrganizerListCreateView,
    OrganizerDetailView,
    TeamListCreateView,
    TeamDetailView,
    TeamApplicationCreateView,
    LeaveTeamView,
    MyTeamView,
    ParticipantListView,
    ParticipantDetailView,
    TeamRequestListCreateView,
    VoteView,
    DecideView,
    MyTeamApplicationsView,
    MyApplicationsView,
    MyApplicationDetailView,
    MyInvitationsView,
    AcceptInvitationView,
    DeclineInvitationView,
    SuspendParticipantView,
    BanParticipantView,
    UnsuspendParticipantView,
    SuspendTeamView,
    UnsuspendTeamView,
    DeleteTeamView,
)

urlpatterns = [
    path("", MarathonListCreateView.as_view(), name="marathon-list-create"),
    path("<str:slug>/", MarathonDetailView.as_view(), name="marathon-detail"),
    path("<str:slug>/join/", JoinMarathonView.as_view(), name="marathon-join"),
    path("<str:slug>/leave/", LeaveMarathonView.as_view(), name="marathon-leave"),
    path("<str:slug>/my-profile/", MyProfileView.as_view(), name="marathon-my-profile"),
    path("<str:slug>/my-status/", MyStatusView.as_view(), name="marathon-my-status"),

    # Organizers
    path("<str:slug>/organizers/", OrganizerListCreateView.as_view(), name="marathon-organizers"),
    path("<str:slug>/organizers/<int:user_id>/", OrganizerDetailView.as_view(), name="marathon-organizer-detail"),

    # Teams
    path("<str:slug>/teams/", TeamListCreateView.as_view(), name="team-list-create"),
    path("<str:slug>/teams/<int:team_id>/", TeamDetailView.as_view(), name="team-detail"),
    path("<str:slug>/teams/<int:team_id>/applications/", TeamApplicationCreateView.as_view(), name="team-apply"),
    path("<str:slug>/teams/<int:team_id>/suspend/", SuspendTeamView.as_view(), name="team-suspend"),
    path("<str:slug>/teams/<int:team_id>/unsuspend/", UnsuspendTeamView.as_view(), name="team-unsuspend"),
    path("<str:slug>/teams/<int:team_id>/delete/", DeleteTeamView.as_view(), name="team-delete"),

    # My team (governance)
    path("<str:slug>/my-team/", MyTeamView.as_view(), name="my-team"),
    path("<str:slug>/my-team/leave/", LeaveTeamView.as_view(), name="my-team-leave"),
    path("<str:slug>/my-team/requests/", TeamRequestListCreateView.as_view(), name="my-team-requests"),
    path("<str:slug>/my-team/requests/<int:request_id>/vote/", VoteView.as_view(), name="my-team-request-vote"),
    path("<str:slug>/my-team/requests/<int:request_id>/decide/", DecideView.as_view(), name="my-team-request-decide"),
    path("<str:slug>/my-team/applications/", MyTeamApplicationsView.as_view(), name="my-team-applications"),

    # Applications / invitations
    path("<str:slug>/my-applications/", MyApplicationsView.as_view(), name="my-applications"),
    path("<str:slug>/my-applications/<int:application_id>/", MyApplicationDetailView.as_view(), name="my-application-detail"),
    path("<str:slug>/my-invitations/", MyInvitationsView.as_view(), name="my-invitations"),
    path("<str:slug>/my-invitations/<int:invitation_id>/accept/", AcceptInvitationView.as_view(), name="my-invitation-accept"),
    path("<str:slug>/my-invitations/<int:invitation_id>/decline/", DeclineInvitationView.as_view(), name="my-invitation-decline"),

    # Participants
    path("<str:slug>/participants/", ParticipantListView.as_view(), name="participant-list"),
    path("<str:slug>/participants/<int:participant_id>/", ParticipantDetailView.as_view(), name="participant-detail"),

    # Moderation
    path("<str:slug>/participants/<int:participant_id>/suspend/", SuspendParticipantView.as_view(), name="participant-suspend"),
    path("<str:slug>/participants/<int:participant_id>/ban/", BanParticipantView.as_view(), name="participant-ban"),
    path("<str:slug>/participants/<int:participant_id>/unsuspend/", UnsuspendParticipantView.as_view(), name="participant-unsuspend"),
]
