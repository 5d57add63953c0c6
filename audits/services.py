import logging
from typing import Mapping, Optional, Union

from .models import AuditAction, AuditLog
from .utils import hashed_ip_ua_from_request

log = logging.getLogger(__name__)

SYSTEM_ACTOR = "system"


def actor_subject(user) -> str:
    if user is None or not getattr(user, "is_authenticated", False):
        return SYSTEM_ACTOR
    return getattr(user, "email", None) or str(user.pk)


def write_audit_log(
    *,
    action: Union[str, AuditAction],
    user=None,
    actor: Optional[str] = None,
    target_type: str = "",
    target_id=None,
    lettering_id=None,
    request=None,
    metadata: Optional[Mapping] = None,
) -> AuditLog:
    """
    표준 수집 함수.
    - actor가 없으면 user에서 subject(email)를 만든다.
    - request가 있으면 IP/UA를 해시하여 함께 저장한다.
    - target_type == "lettering" 이면 lettering_id를 자동으로 채운다.
    """
    ip_hash, ua_hash = hashed_ip_ua_from_request(request) if request is not None else (None, None)
    if lettering_id is None and target_type == "lettering" and target_id:
        lettering_id = target_id

    entry = AuditLog.objects.create(
        actor=actor or actor_subject(user),
        user=user if getattr(user, "is_authenticated", False) else None,
        action=str(action).upper(),
        lettering_id=lettering_id,
        target_type=target_type or "",
        target_id=str(target_id) if target_id else "",
        ip_hash=ip_hash,
        ua_hash=ua_hash,
        metadata=dict(metadata or {}),
    )
    log.info("[AUDIT] %s by %s on %s:%s", entry.action, entry.actor, entry.target_type or "-", entry.target_id or "-")
    return entry
