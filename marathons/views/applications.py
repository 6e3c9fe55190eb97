from rest_framework import status
from rest_framework.response import Response

from core.exceptions import NotFound
from marathons import services
from marathons.models import Application, Invitation
from marathons.serializers import ApplicationSerializer, InvitationSerializer
from .generics import MarathonAPIView


class MyTeamApplicationsView(MarathonAPIView):
    def get(self, request, slug):
        applications = services.list_team_applications(self.get_actor())
        return Response(ApplicationSerializer(applications, many=True).data)


class MyApplicationsView(MarathonAPIView):
    def get(self, request, slug):
        applications = services.list_my_applications(self.get_actor())
        return Response(ApplicationSerializer(applications, many=True).data)


class MyApplicationDetailView(MarathonAPIView):
    def delete(self, request, slug, application_id):
        application = Application.objects.filter(pk=application_id, marathon=self.get_marathon()).first()
        if application is None:
            raise NotFound("Application not found.")
        application = services.cancel_application(application, self.get_actor())
        return Response(ApplicationSerializer(application).data)


class MyInvitationsView(MarathonAPIView):
    def get(self, request, slug):
        invitations = services.list_my_invitations(self.get_actor())
        return Response(InvitationSerializer(invitations, many=True).data)


class _InvitationActionView(MarathonAPIView):
    def get_invitation(self, invitation_id):
        invitation = Invitation.objects.filter(pk=invitation_id, marathon=self.get_marathon()).first()
        if invitation is None:
            raise NotFound("Invitation not found.")
        return invitation


class AcceptInvitationView(_InvitationActionView):
    def post(self, request, slug, invitation_id):
        invitation = services.accept_invitation(self.get_invitation(invitation_id), self.get_actor())
        invitation.refresh_from_db()
        return Response(InvitationSerializer(invitation).data, status=status.HTTP_200_OK)


class DeclineInvitationView(_InvitationActionView):
    def post(self, request, slug, invitation_id):
        invitation = services.decline_invitation(self.get_invitation(invitation_id), self.get_actor())
        return Response(InvitationSerializer(invitation).data)
