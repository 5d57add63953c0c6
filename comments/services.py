import logging
import uuid
from typing import Optional

from django.conf import settings
from django.core.cache import cache
from django.db import transaction
from django.db.models import F, Q, QuerySet
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from audits.models import AuditAction
from audits.services import actor_subject, write_audit_log
from audits.utils import hashed_client_ip
from common.bulk import run_bulk, validate_bulk_request
from common.exceptions import RateLimited
from letterings.models import Lettering
from moderation.scoring import apply_region_moderation_policy, assess_comment_content
from notifications.models import Notification
from notifications.services import notify_comment_owner
from regions.services import policy_for_city

from .models import Comment, CommentStatus

log = logging.getLogger(__name__)

MAX_COMMENT_LENGTH = 500
DEFAULT_HIDE_REASON = "Hidden by moderation"
ADMIN_STATUS_FILTERS = ("ALL", CommentStatus.VISIBLE, CommentStatus.HIDDEN)
ADMIN_SORTS = ("priority", "newest", "score")
BULK_ACTIONS = ("hide", "restore", "delete")


def recompute_comments_count(lettering_id) -> int:
    count = Comment.objects.filter(lettering_id=lettering_id, status=CommentStatus.VISIBLE).count()
    Lettering.objects.filter(pk=lettering_id).update(comments_count=count)
    return count


def visible_comments(lettering_id) -> QuerySet:
    if not Lettering.objects.filter(pk=lettering_id).exists():
        raise NotFound("Lettering not found")
    return Comment.objects.filter(lettering_id=lettering_id, status=CommentStatus.VISIBLE).select_related("user").order_by("-created_at")


def _normalize_content(content) -> str:
    content = str(content or "").strip()
    if not content:
        raise ValidationError("Comment cannot be empty")
    if len(content) > MAX_COMMENT_LENGTH:
        raise ValidationError(f"Comment must be {MAX_COMMENT_LENGTH} characters or less")
    return content


def _claim_rate_slot(lettering_id, user, ip_hash: str) -> None:
    seconds = int(getattr(settings, "COMMENT_RATE_LIMIT_SECONDS", 30))
    if seconds <= 0:
        return
    key = f"comment_rate:{lettering_id}:{user.pk}:{ip_hash}"
    # add()는 키가 없을 때만 성공
    if not cache.add(key, 1, seconds):
        log.info("Comment rate limit hit: lettering=%s user=%s", lettering_id, user.pk)
        raise RateLimited("Please wait before commenting again")


def add_comment(lettering_id, user, content, *, request=None) -> Comment:
    """
    댓글 작성 흐름
    1) 내용 정규화(공백 제거, 1~500자)
    2) 지역 정책 게이트(lettering -> city -> country)
    3) (lettering, user, ip) 단위 레이트리밋
    4) 채점 + 지역 레벨 보정 후 저장, 노출 댓글 수 재계산
    """
    content = _normalize_content(content)

    lettering = Lettering.objects.select_related("city").filter(pk=lettering_id).first()
    if lettering is None:
        raise NotFound("Lettering not found")
    policy = policy_for_city(lettering.city)
    if not policy.comments_enabled:
        log.info("Comment blocked by region policy: lettering=%s country=%s", lettering.pk, policy.country_code)
        raise PermissionDenied("Comments are disabled for this region")

    ip_hash = hashed_client_ip(request) if request is not None else ""
    _claim_rate_slot(lettering.pk, user, ip_hash)

    assessment = apply_region_moderation_policy(assess_comment_content(content), policy.auto_moderation_level)
    with transaction.atomic():
        comment = Comment.objects.create(
            lettering=lettering,
            user=user,
            content=content,
            ip_hash=ip_hash or None,
            moderated_at=timezone.now() if assessment.moderated_by else None,
            **assessment.as_dict(),
        )
        recompute_comments_count(lettering.pk)

    if assessment.needs_review:
        log.info(
            "Comment %s flagged: score=%s flags=%s status=%s level=%s",
            comment.pk,
            assessment.moderation_score,
            ",".join(assessment.moderation_flags),
            assessment.status,
            policy.auto_moderation_level,
        )
    return comment


# ---- 관리자 ----
def admin_comment_queryset(*, status=None, q=None, needs_review=None, min_score=None, sort=None) -> QuerySet:
    status = str(status or "ALL").strip().upper()
    if status not in ADMIN_STATUS_FILTERS:
        raise ValidationError("status must be one of ALL, VISIBLE, HIDDEN")
    sort = str(sort or "priority").strip().lower()
    if sort not in ADMIN_SORTS:
        raise ValidationError("sort must be one of priority, newest, score")

    qs = Comment.objects.select_related("user", "lettering")
    if status != "ALL":
        qs = qs.filter(status=status)
    q = str(q or "").strip()
    if q:
        qs = qs.filter(Q(content__icontains=q) | Q(user__display_name__icontains=q) | Q(user__email__icontains=q))
    if needs_review is not None and str(needs_review).strip() != "":
        qs = qs.filter(needs_review=str(needs_review).strip().lower() in ("1", "true", "yes"))
    if min_score is not None and str(min_score).strip() != "":
        try:
            qs = qs.filter(moderation_score__gte=int(min_score))
        except ValueError:
            raise ValidationError("min_score must be an integer")

    if sort == "newest":
        return qs.order_by("-created_at")
    if sort == "score":
        return qs.order_by("-moderation_score", "-created_at")
    return qs.order_by("-review_priority", F("auto_flagged").desc(), "-moderation_score", "-created_at")


def _get_comment(comment_id) -> Comment:
    comment = Comment.objects.select_related("lettering__city").select_for_update(of=("self",)).filter(pk=comment_id).first()
    if comment is None:
        raise NotFound("Comment not found")
    return comment


def _audit(action, comment: Comment, admin, request, metadata: Optional[dict] = None) -> None:
    write_audit_log(
        action=action,
        user=admin,
        target_type="comment",
        target_id=comment.pk,
        lettering_id=comment.lettering_id,
        request=request,
        metadata={"country_code": comment.lettering.city.country_code, **(metadata or {})},
    )


@transaction.atomic
def hide_comment(comment_id, *, admin, reason: Optional[str] = None, request=None, bulk: bool = False) -> Comment:
    comment = _get_comment(comment_id)
    reason = str(reason or "").strip() or DEFAULT_HIDE_REASON
    comment.status = CommentStatus.HIDDEN
    comment.needs_review = False
    comment.moderated_at = timezone.now()
    comment.moderated_by = actor_subject(admin)
    comment.moderation_reason = reason
    comment.save(update_fields=["status", "needs_review", "moderated_at", "moderated_by", "moderation_reason", "updated_at"])
    recompute_comments_count(comment.lettering_id)

    _audit(AuditAction.BULK_HIDE_COMMENT if bulk else AuditAction.HIDE_COMMENT, comment, admin, request, {"reason": reason})
    notify_comment_owner(comment, Notification.Type.COMMENT_HIDDEN, reason)
    return comment


@transaction.atomic
def restore_comment(comment_id, *, admin, request=None, bulk: bool = False) -> Comment:
    comment = _get_comment(comment_id)
    comment.status = CommentStatus.VISIBLE
    comment.needs_review = False
    comment.moderated_at = None
    comment.moderated_by = None
    comment.moderation_reason = None
    comment.save(update_fields=["status", "needs_review", "moderated_at", "moderated_by", "moderation_reason", "updated_at"])
    recompute_comments_count(comment.lettering_id)

    _audit(AuditAction.BULK_RESTORE_COMMENT if bulk else AuditAction.RESTORE_COMMENT, comment, admin, request)
    notify_comment_owner(comment, Notification.Type.COMMENT_RESTORED)
    return comment


@transaction.atomic
def delete_comment(comment_id, *, admin, reason: Optional[str] = None, request=None, bulk: bool = False) -> None:
    comment = _get_comment(comment_id)
    reason = str(reason or "").strip() or None
    # 삭제 전에 알림/감사 정보를 확보
    notify_comment_owner(comment, Notification.Type.COMMENT_DELETED, reason)
    _audit(AuditAction.BULK_DELETE_COMMENT if bulk else AuditAction.DELETE_COMMENT, comment, admin, request, {"reason": reason} if reason else None)

    lettering_id = comment.lettering_id
    comment.delete()
    recompute_comments_count(lettering_id)


def bulk_moderate_comments(ids, action, *, admin, reason: Optional[str] = None, request=None) -> dict:
    action = validate_bulk_request(ids, action, BULK_ACTIONS, limit_message="bulk actions are limited to 200 comments")

    def handle(comment_id: uuid.UUID) -> None:
        if action == "hide":
            hide_comment(comment_id, admin=admin, reason=reason, request=request, bulk=True)
        elif action == "restore":
            restore_comment(comment_id, admin=admin, request=request, bulk=True)
        else:
            delete_comment(comment_id, admin=admin, reason=reason, request=request, bulk=True)

    result = run_bulk(list(ids), handle, not_found_message="Comment not found")
    log.info("Bulk %s comments by %s: %s/%s processed", action, actor_subject(admin), result["processed"], result["requested"])
    return result
