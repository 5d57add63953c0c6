from celery import shared_task
from django.conf import settings

from .services import sweep_pending


@shared_task(name="letterings.auto_approve_pending")
def auto_approve_pending() -> int:
    if not getattr(settings, "ENABLE_PENDING_AUTO_APPROVE", True):
        return 0
    approved = sweep_pending(
        older_than_minutes=int(getattr(settings, "PENDING_AUTO_APPROVE_MINUTES", 30)),
        batch_size=int(getattr(settings, "PENDING_AUTO_APPROVE_BATCH_SIZE", 50)),
    )
    return len(approved)
