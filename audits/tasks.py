import logging
from datetime import timedelta

from celery import shared_task
from django.conf import settings
from django.utils import timezone

from .models import AuditLog

log = logging.getLogger(__name__)


def purge_before(days: int | None = None) -> int:
    days = days if days is not None else getattr(settings, "AUDIT_RETENTION_DAYS", 365)
    cutoff = timezone.now() - timedelta(days=days)
    deleted, _ = AuditLog.objects.filter(created_at__lt=cutoff).delete()
    return deleted


@shared_task(name="audits.purge_old_audit_logs")
def purge_old_audit_logs():
    deleted = purge_before()
    log.info("Purged %s audit logs older than %s days", deleted, getattr(settings, "AUDIT_RETENTION_DAYS", 365))
    return deleted
