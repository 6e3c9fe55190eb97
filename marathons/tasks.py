# marathons/tasks.py

from celery import shared_task

from .models import Marathon
from .services.membership import reconcile_member_counts


@shared_task
def reconcile_member_counts_task(marathon_id=None):
    """
    Periodic repair of Team.member_count drift (see CELERY_BEAT_SCHEDULE).
    Returns the number of corrected teams.
    """
    marathon = None
    if marathon_id is not None:
        try:
            marathon = Marathon.objects.get(pk=marathon_id)
        except Marathon.DoesNotExist:
            return 0

    return reconcile_member_counts(marathon)
