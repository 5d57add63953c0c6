import logging
import uuid
from typing import Optional

from django.db import transaction
from django.db.models import QuerySet
from rest_framework.exceptions import ValidationError

from audits.models import AuditAction
from audits.services import actor_subject, write_audit_log
from comments.models import Comment
from common.bulk import run_bulk, validate_bulk_request
from letterings import storage
from letterings.models import Lettering, LetteringStatus, Like
from letterings.services import get_lettering_or_404, transition_status
from notifications.models import Notification
from notifications.services import notify_lettering_owner
from regions.models import City

log = logging.getLogger(__name__)

REASON_APPROVED = "Approved by moderation"
REASON_BULK_APPROVED = "Approved by bulk moderation"
REASON_REJECTED = "Rejected by admin"
REASON_REPORTS_CLEARED = "Reports cleared after moderator review"

QUEUE_STATUSES = ("ALL", *LetteringStatus.values)
BULK_ACTIONS = ("approve", "reject", "delete", "keep")


def moderation_queue(status: Optional[str] = None) -> QuerySet:
    status = str(status or "ALL").strip().upper()
    if status not in QUEUE_STATUSES:
        raise ValidationError(f"status must be one of {', '.join(QUEUE_STATUSES)}")
    qs = Lettering.objects.select_related("city", "user")
    if status == "ALL":
        return qs.order_by("-created_at")
    # 특정 상태 큐는 오래된 것부터 처리
    return qs.filter(status=status).order_by("created_at")


def _audit(action, lettering: Lettering, admin, request, metadata: Optional[dict] = None) -> None:
    write_audit_log(
        action=action,
        user=admin,
        target_type="lettering",
        target_id=lettering.pk,
        request=request,
        metadata={"country_code": lettering.city.country_code, **(metadata or {})},
    )


@transaction.atomic
def approve_lettering(lettering_id, *, admin, request=None, reason: Optional[str] = None, bulk: bool = False) -> Lettering:
    lettering = get_lettering_or_404(lettering_id, for_update=True)
    reason = reason or (REASON_BULK_APPROVED if bulk else REASON_APPROVED)
    previous = lettering.status
    transition_status(lettering, LetteringStatus.APPROVED, reason=reason, admin_sub=actor_subject(admin))

    _audit(AuditAction.BULK_APPROVE_LETTERING if bulk else AuditAction.APPROVE_LETTERING, lettering, admin, request, {"from_status": previous, "reason": reason})
    notify_lettering_owner(lettering, Notification.Type.MODERATION_APPROVED)
    return lettering


@transaction.atomic
def reject_lettering(lettering_id, *, admin, request=None, reason: Optional[str] = None, bulk: bool = False) -> Lettering:
    lettering = get_lettering_or_404(lettering_id, for_update=True)
    reason = str(reason or "").strip() or REASON_REJECTED
    previous = lettering.status
    transition_status(lettering, LetteringStatus.REJECTED, reason=reason, admin_sub=actor_subject(admin))

    _audit(AuditAction.BULK_REJECT_LETTERING if bulk else AuditAction.REJECT_LETTERING, lettering, admin, request, {"from_status": previous, "reason": reason})
    notify_lettering_owner(lettering, Notification.Type.MODERATION_REJECTED)
    return lettering


@transaction.atomic
def clear_reports(lettering_id, *, admin, request=None, bulk: bool = False) -> Lettering:
    lettering = get_lettering_or_404(lettering_id, for_update=True)
    cleared = lettering.report_count
    lettering.report_count = 0
    lettering.report_reasons = []
    lettering.save(update_fields=["report_count", "report_reasons", "updated_at"])
    transition_status(lettering, LetteringStatus.APPROVED, reason=REASON_REPORTS_CLEARED, admin_sub=actor_subject(admin))

    _audit(AuditAction.BULK_CLEAR_REPORTS if bulk else AuditAction.CLEAR_REPORTS, lettering, admin, request, {"cleared_reports": cleared})
    notify_lettering_owner(lettering, Notification.Type.REPORTS_CLEARED)
    return lettering


@transaction.atomic
def delete_lettering(lettering_id, *, admin, request=None, reason: Optional[str] = None, bulk: bool = False) -> None:
    """
    삭제 순서: 소유자 알림 → 감사 로그 → 행 삭제(이력/댓글/좋아요 cascade)
    스토리지 객체는 커밋 이후에만 지운다(best-effort). 롤백되면 이미지도 남는다.
    """
    lettering = get_lettering_or_404(lettering_id, for_update=True)
    notify_lettering_owner(lettering, Notification.Type.MODERATION_DELETED)
    storage_key = lettering.storage_key
    if storage_key:
        transaction.on_commit(lambda: storage.delete_object(storage_key))

    snapshot = {"status": lettering.status, "image_url": lettering.image_url}
    if reason:
        snapshot["reason"] = str(reason).strip()
    _audit(AuditAction.BULK_DELETE_LETTERING if bulk else AuditAction.DELETE_LETTERING, lettering, admin, request, snapshot)
    lettering.delete()
    log.info("Lettering %s deleted by %s", lettering_id, actor_subject(admin))


def bulk_moderate_letterings(ids, action, *, admin, reason: Optional[str] = None, request=None) -> dict:
    action = validate_bulk_request(ids, action, BULK_ACTIONS, limit_message="bulk actions are limited to 200 items")

    def handle(lettering_id: uuid.UUID) -> None:
        if action == "approve":
            approve_lettering(lettering_id, admin=admin, request=request, bulk=True)
        elif action == "reject":
            reject_lettering(lettering_id, admin=admin, request=request, reason=reason, bulk=True)
        elif action == "delete":
            delete_lettering(lettering_id, admin=admin, request=request, reason=reason, bulk=True)
        else:
            clear_reports(lettering_id, admin=admin, request=request, bulk=True)

    result = run_bulk(list(ids), handle, not_found_message="Lettering not found")
    log.info("Bulk %s letterings by %s: %s/%s processed", action, actor_subject(admin), result["processed"], result["requested"])
    return result


def admin_stats() -> dict:
    return {
        "total_uploads": Lettering.objects.count(),
        "pending_approvals": Lettering.objects.filter(status=LetteringStatus.PENDING).count(),
        "approved": Lettering.objects.filter(status=LetteringStatus.APPROVED).count(),
        "rejected": Lettering.objects.filter(status=LetteringStatus.REJECTED).count(),
        "total_cities": City.objects.count(),
        "total_likes": Like.objects.count(),
        "total_comments": Comment.objects.count(),
    }
