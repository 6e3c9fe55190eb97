# marathons/models.py
from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator, RegexValidator
from django.db import models


SLUG_VALIDATOR = RegexValidator(
    regex=r"^[a-z0-9_-]{1,16}$",
    message="Slug must be 1-16 characters of a-z, 0-9, '_' or '-'.",
)


class Marathon(models.Model):
    name = models.CharField(max_length=100)
    slug = models.CharField(max_length=16, unique=True, validators=[SLUG_VALIDATOR])
    description = models.TextField(blank=True, default="")

    min_team_size = models.PositiveIntegerField(
        default=1, validators=[MinValueValidator(1), MaxValueValidator(50)]
    )
    max_team_size = models.PositiveIntegerField(
        default=5, validators=[MinValueValidator(1), MaxValueValidator(50)]
    )

    creator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="created_marathons",
    )
    organizers = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        related_name="organized_marathons",
        blank=True,
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["created_at"], name="marathon_created_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.slug})"


class Participant(models.Model):
    """
    A user's membership record within one marathon.

    `team` is a weak reference: only the membership services in
    `marathons.services.membership` write it, together with
    `Team.member_count`.
    """
    marathon = models.ForeignKey(Marathon, on_delete=models.CASCADE, related_name="participants")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="participations",
    )

    name = models.CharField(max_length=100, blank=True, default="")
    nickname = models.CharField(max_length=32, blank=True, null=True)
    roles = models.JSONField(default=list, blank=True)
    technologies = models.JSONField(default=list, blank=True)
    description = models.TextField(blank=True, default="")

    team = models.ForeignKey(
        "Team",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="members",
    )

    is_banned = models.BooleanField(default=False)
    ban_reason = models.TextField(blank=True, default="")
    is_suspended = models.BooleanField(default=False)
    suspend_reason = models.TextField(blank=True, default="")

    joined_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["marathon", "user"], name="participant_marathon_user_uniq"),
            models.UniqueConstraint(fields=["marathon", "nickname"], name="participant_marathon_nick_uniq"),
        ]
        indexes = [
            models.Index(fields=["marathon", "team"], name="participant_marathon_team_idx"),
        ]

    def __str__(self):
        return f"{self.nickname or self.name or self.user} @ {self.marathon.slug}"


class Team(models.Model):
    DECISION_DICTATORSHIP = "dictatorship"
    DECISION_DEMOCRACY = "democracy"

    DECISION_CHOICES = [
        (DECISION_DICTATORSHIP, "Dictatorship"),
        (DECISION_DEMOCRACY, "Democracy"),
    ]

    MANAGEMENT_SCRUM = "scrum"
    MANAGEMENT_KANBAN = "kanban"
    MANAGEMENT_AGILE = "agile"
    MANAGEMENT_WATERFALL = "waterfall"
    MANAGEMENT_FREE = "free"

    MANAGEMENT_CHOICES = [
        (MANAGEMENT_SCRUM, "Scrum"),
        (MANAGEMENT_KANBAN, "Kanban"),
        (MANAGEMENT_AGILE, "Agile"),
        (MANAGEMENT_WATERFALL, "Waterfall"),
        (MANAGEMENT_FREE, "Free"),
    ]

    # Fields a team may patch through an update_settings request
    SETTINGS_FIELDS = (
        "name",
        "management_type",
        "genre",
        "description",
        "pitch_document",
        "design_document",
        "chat_link",
        "git_link",
    )

    marathon = models.ForeignKey(Marathon, on_delete=models.CASCADE, related_name="teams")
    name = models.CharField(max_length=100)
    management_type = models.CharField(max_length=16, choices=MANAGEMENT_CHOICES, default=MANAGEMENT_FREE)
    decision_system = models.CharField(max_length=16, choices=DECISION_CHOICES, default=DECISION_DEMOCRACY)

    # Set iff decision_system == dictatorship
    leader = models.ForeignKey(
        Participant,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="led_teams",
    )
    member_count = models.PositiveIntegerField(default=0)

    genre = models.CharField(max_length=64, blank=True, default="")
    description = models.TextField(blank=True, default="")
    pitch_document = models.URLField(max_length=1024, blank=True, default="")
    design_document = models.URLField(max_length=1024, blank=True, default="")
    chat_link = models.URLField(max_length=1024, blank=True, default="")
    git_link = models.URLField(max_length=1024, blank=True, default="")

    is_suspended = models.BooleanField(default=False)
    suspend_reason = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["marathon", "name"], name="team_marathon_name_uniq"),
        ]
        indexes = [
            models.Index(fields=["marathon", "created_at"], name="team_marathon_created_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.marathon.slug})"

    @property
    def is_dictatorship(self):
        return self.decision_system == self.DECISION_DICTATORSHIP

    @property
    def is_full(self):
        return self.member_count >= self.marathon.max_team_size


class OpenPosition(models.Model):
    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name="open_positions")
    marathon = models.ForeignKey(Marathon, on_delete=models.CASCADE, related_name="open_positions")
    role = models.CharField(max_length=64)
    description = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.role} @ {self.team_id}"


class Application(models.Model):
    STATUS_PENDING = "pending"
    STATUS_ACCEPTED = "accepted"
    STATUS_REJECTED = "rejected"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_ACCEPTED, "Accepted"),
        (STATUS_REJECTED, "Rejected"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    marathon = models.ForeignKey(Marathon, on_delete=models.CASCADE, related_name="applications")
    # Nullable so that resolved applications survive the team being dissolved
    team = models.ForeignKey(
        Team,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="applications",
    )
    participant = models.ForeignKey(Participant, on_delete=models.CASCADE, related_name="applications")
    message = models.TextField(blank=True, default="")
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING)

    created_at = models.DateTimeField(auto_now_add=True)
    resolved_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["participant", "team"],
                condition=models.Q(status="pending"),
                name="application_one_pending_uniq",
            ),
        ]
        indexes = [
            models.Index(fields=["team", "status"], name="application_team_status_idx"),
            models.Index(fields=["participant", "status"], name="application_part_status_idx"),
        ]

    def __str__(self):
        return f"Application {self.pk} ({self.status})"


class Invitation(models.Model):
    STATUS_PENDING = "pending"
    STATUS_ACCEPTED = "accepted"
    STATUS_DECLINED = "declined"
    STATUS_INVALIDATED = "invalidated"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_ACCEPTED, "Accepted"),
        (STATUS_DECLINED, "Declined"),
        (STATUS_INVALIDATED, "Invalidated"),
    ]

    marathon = models.ForeignKey(Marathon, on_delete=models.CASCADE, related_name="invitations")
    team = models.ForeignKey(
        Team,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="invitations",
    )
    participant = models.ForeignKey(Participant, on_delete=models.CASCADE, related_name="invitations")
    request = models.ForeignKey(
        "TeamRequest",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="invitations",
    )
    message = models.TextField(blank=True, default="")
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING)

    created_at = models.DateTimeField(auto_now_add=True)
    resolved_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["participant", "status"], name="invitation_part_status_idx"),
            models.Index(fields=["team", "status"], name="invitation_team_status_idx"),
        ]

    def __str__(self):
        return f"Invitation {self.pk} ({self.status})"


class TeamRequest(models.Model):
    """
    Governance proposal for a team. `payload` holds the JSON form of the
    typed payload in `marathons.payloads`; use `typed_payload` to read it.
    """
    TYPE_INVITE = "invite"
    TYPE_OPEN_POSITION = "open_position"
    TYPE_CLOSE_POSITION = "close_position"
    TYPE_KICK = "kick"
    TYPE_UPDATE_SETTINGS = "update_settings"
    TYPE_ACCEPT_APPLICATION = "accept_application"
    TYPE_REJECT_APPLICATION = "reject_application"
    TYPE_TRANSFER_LEAD = "transfer_lead"
    TYPE_CHANGE_DECISION_SYSTEM = "change_decision_system"

    TYPE_CHOICES = [
        (TYPE_INVITE, "Invite"),
        (TYPE_OPEN_POSITION, "Open position"),
        (TYPE_CLOSE_POSITION, "Close position"),
        (TYPE_KICK, "Kick"),
        (TYPE_UPDATE_SETTINGS, "Update settings"),
        (TYPE_ACCEPT_APPLICATION, "Accept application"),
        (TYPE_REJECT_APPLICATION, "Reject application"),
        (TYPE_TRANSFER_LEAD, "Transfer lead"),
        (TYPE_CHANGE_DECISION_SYSTEM, "Change decision system"),
    ]

    STATUS_PENDING = "pending"
    STATUS_APPROVED = "approved"
    STATUS_REJECTED = "rejected"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_APPROVED, "Approved"),
        (STATUS_REJECTED, "Rejected"),
    ]

    marathon = models.ForeignKey(Marathon, on_delete=models.CASCADE, related_name="team_requests")
    team = models.ForeignKey(
        Team,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="requests",
    )
    author = models.ForeignKey(
        Participant,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="authored_requests",
    )
    type = models.CharField(max_length=32, choices=TYPE_CHOICES)
    payload = models.JSONField(default=dict, blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING)

    decided_by = models.ForeignKey(
        Participant,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="decided_requests",
    )
    decided_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    resolved_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["team", "type"],
                condition=models.Q(status="pending"),
                name="teamrequest_one_pending_type_uniq",
            ),
        ]
        indexes = [
            models.Index(fields=["team", "status"], name="teamrequest_team_status_idx"),
        ]

    def __str__(self):
        return f"{self.type} request {self.pk} ({self.status})"

    @property
    def typed_payload(self):
        from .payloads import payload_from_dict
        return payload_from_dict(self.type, self.payload)


class TeamRequestVote(models.Model):
    VOTE_APPROVE = "approve"
    VOTE_REJECT = "reject"

    VOTE_CHOICES = [
        (VOTE_APPROVE, "Approve"),
        (VOTE_REJECT, "Reject"),
    ]

    request = models.ForeignKey(TeamRequest, on_delete=models.CASCADE, related_name="votes")
    participant = models.ForeignKey(Participant, on_delete=models.CASCADE, related_name="votes")
    vote = models.CharField(max_length=8, choices=VOTE_CHOICES)
    voted_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["request", "participant"], name="vote_request_participant_uniq"),
        ]

    def __str__(self):
        return f"{self.participant_id} {self.vote} on {self.request_id}"
