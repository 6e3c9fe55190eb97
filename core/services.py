from django.contrib.contenttypes.models import ContentType
import logging

from .models import DomainActivity

logger = logging.getLogger("tf.core")


class ActivityService:
    @staticmethod
    def log_activity(actor, verb, target, marathon=None, metadata=None):
        """
        Logs a domain activity row for the given target.
        `actor` may be None for system-initiated changes.
        """
        if metadata is None:
            metadata = {}

        activity = DomainActivity.objects.create(
            actor=actor,
            verb=verb,
            content_type=ContentType.objects.get_for_model(target),
            object_id=target.pk,
            marathon=marathon,
            metadata=metadata,
        )
        logger.debug(f"Activity logged: {verb} on {target.__class__.__name__} {target.pk}")
        return activity

    @staticmethod
    def history_for(target):
        """All activity rows recorded against `target`, newest first."""
        return DomainActivity.objects.filter(
            content_type=ContentType.objects.get_for_model(target),
            object_id=target.pk,
        )
