import logging
from typing import Dict, Optional

from celery import shared_task
from django.contrib.auth import get_user_model

from .models import Notification

log = logging.getLogger(__name__)
User = get_user_model()


@shared_task(name="notifications.tasks.notify_user", autoretry_for=(Exception,), retry_backoff=2, max_retries=5)
def notify_user(user_id: Optional[str], type_: str, title: str, body: str, metadata: Optional[Dict] = None):
    # 익명(레거시) 업로드는 수신자가 없으므로 건너뛴다.
    if not user_id or not User.objects.filter(pk=user_id).exists():
        return None
    n = Notification.objects.create(user_id=user_id, type=type_, title=title, body=body, metadata=metadata or {})
    log.info("Notification %s sent to %s", type_, user_id)
    return str(n.id)
