import json
import logging
from typing import Any, Dict, Optional

from django.conf import settings
from django.db import transaction

log = logging.getLogger(__name__)


def spawn(task, *args, **kwargs):
    # 테스트/로컬에서 CELERY_TASK_ALWAYS_EAGER=True 라면 즉시 동기 실행(.apply), 그 외 환경에서는 .delay 로 비동기 실행.
    if getattr(settings, "CELERY_TASK_ALWAYS_EAGER", False):
        return task.apply(args=args, kwargs=kwargs)
    return task.delay(*args, **kwargs)


def spawn_on_commit(task, *args, **kwargs):
    # 트랜잭션 안에서 호출되면 커밋 이후에 태스크를 띄운다(롤백 시 발행 안 함).
    transaction.on_commit(lambda: spawn(task, *args, **kwargs))


def publish_event(event: str, payload: Dict[str, Any], key: Optional[str] = None) -> None:
    backend = getattr(settings, "EVENT_BUS_BACKEND", "log")
    if backend != "log":
        log.warning("Unsupported EVENT_BUS_BACKEND=%s. Fallback to log.", backend)
    log.info("[BUS][%s] key=%s %s", event, key or event, json.dumps(payload, ensure_ascii=False, default=str))
