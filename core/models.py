#  core/models.py
from django.db import models
from django.conf import settings
from django.contrib.contenttypes.fields import GenericForeignKey
from django.contrib.contenttypes.models import ContentType


class DomainActivity(models.Model):
    """
    Immutable ledger of all governance-significant actions in the system.
    Source of truth for team histories and moderation audits.
    """
    # Who did it? Null for system passes (member-count repair).
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="activities",
    )

    # What happened? (e.g., 'team_request.approved')
    verb = models.CharField(max_length=64, db_index=True)

    # To what? The target row may be gone later (dissolved teams)
    content_type = models.ForeignKey(ContentType, on_delete=models.CASCADE)
    object_id = models.PositiveBigIntegerField()
    content_object = GenericForeignKey("content_type", "object_id")

    # Where?
    marathon = models.ForeignKey(
        "marathons.Marathon",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="activities",
    )

    # Snapshot of the transition (ids, statuses, names at time of logging)
    metadata = models.JSONField(default=dict, blank=True)

    timestamp = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        verbose_name_plural = "Domain Activities"
        ordering = ["-timestamp", "-id"]
        indexes = [
            models.Index(fields=["marathon", "-timestamp"], name="activity_marathon_ts_idx"),
            models.Index(fields=["content_type", "object_id"], name="activity_target_idx"),
        ]

    def __str__(self):
        return f"{self.actor} - {self.verb} - {self.timestamp}"
