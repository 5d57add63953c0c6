import logging
import uuid
from typing import Callable, Iterable, List

from django.db import transaction
from rest_framework.exceptions import APIException, ValidationError

from .exceptions import flatten_error

log = logging.getLogger(__name__)

MAX_BULK_ITEMS = 200


def validate_bulk_request(ids, action: str, allowed: Iterable[str], *, limit_message: str) -> str:
    allowed = list(allowed)
    action = str(action or "").strip().lower()
    if action not in allowed:
        raise ValidationError(f"action must be one of {', '.join(allowed)}")
    if not ids:
        raise ValidationError("ids cannot be empty")
    if len(ids) > MAX_BULK_ITEMS:
        raise ValidationError(limit_message)
    return action


def run_bulk(ids: List, handler: Callable[[uuid.UUID], None], *, not_found_message: str) -> dict:
    """
    항목별로 독립 트랜잭션에서 handler를 실행한다. 한 항목의 실패가 나머지를 막지 않는다.
    반환: {requested, processed, failed, failed_items: [{id, error}]}
    """
    processed = 0
    failed_items = []
    for raw in ids:
        try:
            item_id = uuid.UUID(str(raw))
        except ValueError:
            failed_items.append({"id": str(raw), "error": not_found_message})
            continue
        try:
            with transaction.atomic():
                handler(item_id)
        except APIException as e:
            failed_items.append({"id": str(item_id), "error": flatten_error(e.detail)})
        else:
            processed += 1

    if failed_items:
        log.info("Bulk run: %s processed, %s failed", processed, len(failed_items))
    return {"requested": len(ids), "processed": processed, "failed": len(failed_items), "failed_items": failed_items}
