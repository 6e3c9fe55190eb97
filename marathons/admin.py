from django.contrib import admin
from .models import (
    Marathon, Participant, Team, OpenPosition,
    Application, Invitation, TeamRequest, TeamRequestVote
)

@admin.register(Marathon)
class MarathonAdmin(admin.ModelAdmin):
    list_display = ('name', 'slug', 'creator', 'min_team_size', 'max_team_size', 'created_at')
    search_fields = ('name', 'slug', 'creator__username')
    filter_horizontal = ('organizers',)

@admin.register(Participant)
class ParticipantAdmin(admin.ModelAdmin):
    list_display = ('user', 'nickname', 'marathon', 'team', 'is_suspended', 'is_banned')
    list_filter = ('marathon', 'is_suspended', 'is_banned')
    search_fields = ('user__username', 'nickname', 'name')

@admin.register(Team)
class TeamAdmin(admin.ModelAdmin):
    list_display = ('name', 'marathon', 'decision_system', 'leader', 'member_count', 'is_suspended')
    list_filter = ('marathon', 'decision_system', 'is_suspended')
    search_fields = ('name',)
    # Membership fields are owned by the membership services
    readonly_fields = ('member_count', 'leader', 'decision_system')

@admin.register(OpenPosition)
class OpenPositionAdmin(admin.ModelAdmin):
    list_display = ('role', 'team', 'marathon', 'created_at')
    search_fields = ('role', 'team__name')

@admin.register(Application)
class ApplicationAdmin(admin.ModelAdmin):
    list_display = ('participant', 'team', 'status', 'created_at', 'resolved_at')
    list_filter = ('status', 'marathon')

@admin.register(Invitation)
class InvitationAdmin(admin.ModelAdmin):
    list_display = ('participant', 'team', 'status', 'created_at', 'resolved_at')
    list_filter = ('status', 'marathon')

class TeamRequestVoteInline(admin.TabularInline):
    model = TeamRequestVote
    extra = 0
    readonly_fields = ('participant', 'vote', 'voted_at')

@admin.register(TeamRequest)
class TeamRequestAdmin(admin.ModelAdmin):
    list_display = ('type', 'team', 'author', 'status', 'decided_by', 'created_at', 'resolved_at')
    list_filter = ('type', 'status', 'marathon')
    inlines = [TeamRequestVoteInline]
