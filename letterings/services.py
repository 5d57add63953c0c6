import hashlib
import logging
import mimetypes
import uuid
from datetime import timedelta
from typing import Optional, Tuple

import redis
from botocore.exceptions import BotoCoreError, ClientError
from django.conf import settings
from django.core.cache import cache
from django.db import IntegrityError, transaction
from django.db.models import Count, Q, QuerySet
from django.utils import timezone
from rest_framework.exceptions import APIException, NotFound, PermissionDenied, ValidationError

from audits.utils import hashed_client_ip
from common.exceptions import RateLimited
from realtime.broadcast import broadcast_processed
from regions.models import City, RegionPolicy
from regions.services import policy_for_city

from . import storage
from .models import ActorType, Lettering, LetteringMetadataHistory, LetteringStatus, LetteringStatusHistory, Like, LocationRevisit
from .queue import get_queue

log = logging.getLogger(__name__)

REASON_UPLOAD_CREATED = "Upload created"
REASON_ML_DISABLED = "Approved automatically (ML processing unavailable)"
REASON_ML_APPROVED = "Approved after ML processing"
REASON_PENDING_TIMEOUT = "Auto-approved after pending timeout"
FALLBACK_DETECTED_TEXT = "Street Discovery"

CONTRIBUTOR_TAG_EXTRA_CHARS = {" ", "_", "-", "."}


class StorageUnavailable(APIException):
    status_code = 502
    default_detail = "Failed to store image"
    default_code = "storage_unavailable"


# ---- 입력 정규화 ----
def normalize_pin_code(value) -> str:
    pin = str(value or "").strip()
    if len(pin) != 6 or not all(c.isascii() and c.isdigit() for c in pin):
        raise ValidationError("pin_code must be 6 digits")
    return pin


def normalize_contributor_tag(value) -> str:
    tag = str(value or "").strip()
    if not 2 <= len(tag) <= 30:
        raise ValidationError("contributor_tag must be between 2 and 30 characters")
    if not all((c.isascii() and c.isalnum()) or c in CONTRIBUTOR_TAG_EXTRA_CHARS for c in tag):
        raise ValidationError("contributor_tag contains unsupported characters")
    return tag


def normalize_description(value) -> str:
    desc = str(value or "").strip()
    if len(desc) > 1200:
        raise ValidationError("description must be 1200 characters or less")
    return desc


# ---- 상태 전이 ----
def classify_actor(*, admin_sub: Optional[str] = None, user_id=None) -> Tuple[str, Optional[str]]:
    if admin_sub:
        return ActorType.ADMIN, str(admin_sub)
    if user_id:
        return ActorType.USER, str(user_id)
    return ActorType.SYSTEM, None


@transaction.atomic
def transition_status(
    lettering: Lettering,
    to_status: str,
    *,
    reason: Optional[str] = None,
    actor_type: Optional[str] = None,
    actor_sub: Optional[str] = None,
    admin_sub: Optional[str] = None,
    user_id=None,
    extra_updates: Optional[dict] = None,
) -> bool:
    """
    lettering.status를 바꾸는 유일한 경로.
    - 상태가 실제로 바뀌면 이력 1행을 남기고 True
    - 같은 상태로의 전이는 아무것도 쓰지 않고 False
    - actor_type 미지정 시: admin_sub → ADMIN, user_id → USER, 둘 다 없으면 SYSTEM
    """
    current = Lettering.objects.select_for_update().filter(pk=lettering.pk).values_list("status", flat=True).first()
    if current is None:
        raise NotFound("Lettering not found")
    if current == to_status:
        return False

    if actor_type is None:
        actor_type, derived_sub = classify_actor(admin_sub=admin_sub, user_id=user_id)
        actor_sub = actor_sub or derived_sub

    now = timezone.now()
    fields = {"status": to_status, "moderation_reason": reason, "updated_at": now}
    if actor_type in (ActorType.ADMIN, ActorType.AUTO):
        fields["moderated_by"] = actor_sub or str(actor_type)
        fields["moderated_at"] = now
    fields.update(extra_updates or {})

    Lettering.objects.filter(pk=lettering.pk).update(**fields)
    for k, v in fields.items():
        setattr(lettering, k, v)

    LetteringStatusHistory.objects.create(
        lettering_id=lettering.pk,
        from_status=current,
        to_status=to_status,
        reason=reason,
        actor_type=actor_type,
        actor_sub=actor_sub,
    )
    log.info("Lettering %s: %s -> %s by %s(%s)", lettering.pk, current, to_status, actor_type, actor_sub or "-")
    return True


@transaction.atomic
def create_lettering(*, city: City, user=None, moderation_reason: Optional[str] = None, **fields) -> Lettering:
    owner = user if getattr(user, "is_authenticated", False) else None
    lettering = Lettering.objects.create(city=city, user=owner, status=LetteringStatus.PENDING, moderation_reason=moderation_reason, **fields)
    LetteringStatusHistory.objects.create(
        lettering=lettering,
        from_status=None,
        to_status=LetteringStatus.PENDING,
        reason=moderation_reason or REASON_UPLOAD_CREATED,
        actor_type=ActorType.USER if owner else ActorType.SYSTEM,
        actor_sub=str(owner.pk) if owner else None,
    )
    return lettering


def approve_automatically(lettering_id, *, reason: str, detected_text: Optional[str] = None, fallback_text: Optional[str] = None) -> bool:
    """
    백그라운드 경로(ML 완료, ML 비활성, 대기 시간 초과)의 승인. PENDING일 때만 승인하고 PROCESSED를 브로드캐스트한다.
    """
    with transaction.atomic():
        lettering = Lettering.objects.select_for_update().filter(pk=lettering_id).first()
        if lettering is None or lettering.status != LetteringStatus.PENDING:
            return False
        text = detected_text if detected_text is not None else lettering.detected_text
        if not text and fallback_text:
            text = fallback_text
        transition_status(lettering, LetteringStatus.APPROVED, reason=reason, actor_type=ActorType.AUTO, extra_updates={"detected_text": text or ""})
    broadcast_processed(lettering_id)
    return True


def sweep_pending(*, older_than_minutes: int, batch_size: int) -> list:
    cutoff = timezone.now() - timedelta(minutes=max(1, older_than_minutes))
    ids = list(
        Lettering.objects.filter(status=LetteringStatus.PENDING, created_at__lt=cutoff).order_by("created_at").values_list("id", flat=True)[: max(1, batch_size)]
    )
    approved = [lid for lid in ids if approve_automatically(lid, reason=REASON_PENDING_TIMEOUT, fallback_text=FALLBACK_DETECTED_TEXT)]
    if approved:
        log.info("Pending sweep approved %s letterings", len(approved))
    return approved


# ---- 업로드 ----
def _extension_for(image) -> str:
    content_type = getattr(image, "content_type", "") or ""
    ext = mimetypes.guess_extension(content_type) if content_type else None
    if not ext:
        name = getattr(image, "name", "") or ""
        ext = "." + name.rsplit(".", 1)[-1] if "." in name else ".bin"
    return ext


UPLOAD_RATE_WINDOW_SECONDS = 3600


def check_upload_rate(request) -> None:
    # 고정 1시간 창, 클라이언트 IP 해시 기준
    limit = int(getattr(settings, "RATE_LIMIT_UPLOADS_PER_IP", 20))
    if limit <= 0:
        return
    key = f"upload_rate:{hashed_client_ip(request)}"
    cache.add(key, 0, UPLOAD_RATE_WINDOW_SECONDS)
    try:
        count = cache.incr(key)
    except ValueError:
        cache.set(key, 1, UPLOAD_RATE_WINDOW_SECONDS)
        count = 1
    if count > limit:
        log.warning("Upload rate limit hit: %s uploads in window", count)
        raise RateLimited("Too many uploads, please try again later")


def _enqueue_ml_job(lettering: Lettering) -> bool:
    if not getattr(settings, "ENABLE_ML_PROCESSING", False):
        return False
    try:
        get_queue().enqueue(lettering.id, lettering.image_url)
    except redis.RedisError as e:
        log.warning("ML queue enqueue failed for %s: %s", lettering.id, e)
        return False
    return True


def upload_lettering(
    *,
    image,
    city_id,
    contributor_tag: str,
    pin_code: str,
    description: str = "",
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
    user=None,
    request=None,
) -> Tuple[Lettering, bool]:
    """
    반환: (lettering, queued) - queued=False 면 즉시 자동 승인된 상태
    """
    city = City.objects.filter(pk=city_id).first()
    if city is None:
        raise ValidationError("City not found")
    if not policy_for_city(city).uploads_enabled:
        log.info("Upload blocked by region policy: city=%s country=%s", city.pk, city.country_code)
        raise PermissionDenied("Uploads are disabled for this region")

    data = image.read()
    if not data:
        raise ValidationError("Missing image")
    image_hash = hashlib.sha256(data).hexdigest()
    if Lettering.objects.filter(image_hash=image_hash).exists():
        raise ValidationError("This exact image has already been archived")

    # 검증/게이트/중복에서 거절된 요청은 시간당 한도를 소모하지 않는다.
    if request is not None:
        check_upload_rate(request)

    lettering_id = uuid.uuid4()
    key = storage.build_storage_key(lettering_id, _extension_for(image))
    try:
        image_url = storage.upload_bytes(key, data, getattr(image, "content_type", None) or "application/octet-stream")
    except (BotoCoreError, ClientError) as e:
        log.error("Storage upload failed for %s: %s", key, e)
        raise StorageUnavailable()

    try:
        lettering = create_lettering(
            id=lettering_id,
            city=city,
            user=user,
            contributor_tag=contributor_tag,
            pin_code=pin_code,
            description=description or "",
            image_url=image_url,
            thumbnail_url=image_url,
            storage_key=key,
            image_hash=image_hash,
            latitude=latitude if latitude is not None else city.center_lat,
            longitude=longitude if longitude is not None else city.center_lng,
            uploaded_by_ip_hash=hashed_client_ip(request) if request is not None else None,
        )
    except IntegrityError:
        storage.delete_object(key)
        raise ValidationError("This exact image has already been archived")

    queued = _enqueue_ml_job(lettering)
    if not queued:
        approve_automatically(lettering.id, reason=REASON_ML_DISABLED, detected_text="")
        lettering.refresh_from_db()
    log.info("Lettering %s uploaded (city=%s, queued=%s)", lettering.id, city.pk, queued)
    return lettering, queued


# ---- 공개 조회 / 신고 / 좋아요 ----
def discoverable_letterings() -> QuerySet:
    # 정책 행이 없는 국가는 노출 허용
    hidden = RegionPolicy.objects.filter(discoverability_enabled=False).values("country_code")
    return Lettering.objects.filter(status=LetteringStatus.APPROVED).exclude(city__country_code__in=hidden).select_related("city", "user")


def get_lettering_or_404(lettering_id, *, for_update: bool = False) -> Lettering:
    qs = Lettering.objects.select_for_update() if for_update else Lettering.objects.select_related("city", "user")
    lettering = qs.filter(pk=lettering_id).first()
    if lettering is None:
        raise NotFound("Lettering not found")
    return lettering


@transaction.atomic
def report_lettering(lettering_id, reason, *, user=None) -> Lettering:
    reason = str(reason or "").strip()
    if not reason:
        raise ValidationError("Report reason is required")

    lettering = get_lettering_or_404(lettering_id, for_update=True)
    lettering.report_count += 1
    lettering.report_reasons = [*(lettering.report_reasons or []), reason]
    lettering.save(update_fields=["report_count", "report_reasons", "updated_at"])

    threshold = getattr(settings, "LETTERING_REPORT_THRESHOLD", 3)
    if lettering.report_count >= threshold:
        user_id = user.pk if getattr(user, "is_authenticated", False) else None
        transition_status(lettering, LetteringStatus.REPORTED, reason=f"Report threshold reached ({lettering.report_count} reports)", user_id=user_id)
    log.info("Lettering %s reported (%s reports)", lettering.pk, lettering.report_count)
    return lettering


@transaction.atomic
def toggle_like(lettering_id, request) -> Tuple[bool, int]:
    lettering = get_lettering_or_404(lettering_id, for_update=True)
    ip_hash = hashed_client_ip(request)

    deleted, _ = Like.objects.filter(lettering=lettering, ip_hash=ip_hash).delete()
    liked = not deleted
    if liked:
        Like.objects.create(lettering=lettering, ip_hash=ip_hash)

    count = Like.objects.filter(lettering=lettering).count()
    Lettering.objects.filter(pk=lettering.pk).update(likes_count=count)
    return liked, count


# ---- 내 업로드 ----
def my_letterings(user, status: Optional[str] = None) -> QuerySet:
    qs = Lettering.objects.filter(user=user).order_by("-created_at")
    if status:
        status = status.strip().upper()
        if status not in LetteringStatus.values:
            raise ValidationError("Invalid status filter")
        qs = qs.filter(status=status)
    return qs


def update_my_lettering(lettering_id, user, changes: dict) -> Lettering:
    editable = [f for f in LetteringMetadataHistory.Field.values if changes.get(f) is not None]
    if not editable:
        raise ValidationError("No updates provided")
    if "pin_code" in editable:
        changes["pin_code"] = normalize_pin_code(changes["pin_code"])

    with transaction.atomic():
        lettering = Lettering.objects.select_for_update().filter(pk=lettering_id, user=user).first()
        if lettering is None:
            raise PermissionDenied("You can only update your own uploads")
        if "description" in editable:
            changes["description"] = normalize_description(changes["description"])
        if "contributor_tag" in editable:
            changes["contributor_tag"] = normalize_contributor_tag(changes["contributor_tag"])

        changed = [f for f in editable if getattr(lettering, f) != changes[f]]
        if not changed:
            log.info("No metadata changes for lettering %s", lettering.pk)
            return lettering

        history = [
            LetteringMetadataHistory(lettering=lettering, edited_by=user, field_name=f, old_value=getattr(lettering, f), new_value=changes[f])
            for f in changed
        ]
        for f in changed:
            setattr(lettering, f, changes[f])
        lettering.save(update_fields=[*changed, "updated_at"])
        LetteringMetadataHistory.objects.bulk_create(history)

    log.info("User %s updated lettering %s: %s", user.pk, lettering.pk, ", ".join(changed))
    return lettering


def lettering_timeline(lettering_id, user) -> Tuple[QuerySet, QuerySet]:
    if not Lettering.objects.filter(pk=lettering_id, user=user).exists():
        log.warning("Timeline access denied: user=%s lettering=%s", user.pk, lettering_id)
        raise PermissionDenied("You can only view your own upload timeline")
    status_history = LetteringStatusHistory.objects.filter(lettering_id=lettering_id).order_by("-created_at")
    metadata_history = LetteringMetadataHistory.objects.filter(lettering_id=lettering_id).order_by("-created_at")
    return status_history, metadata_history


# ---- 기여자 / 도시 통계 / 재방문 ----
def contributor_letterings(tag) -> QuerySet:
    return discoverable_letterings().filter(contributor_tag=str(tag or "").strip()).order_by("-created_at")


def city_pin_code_stats(city_id) -> list:
    rows = (
        discoverable_letterings()
        .filter(city_id=city_id)
        .order_by()
        .values("pin_code")
        .annotate(count=Count("id"))
        .order_by("-count", "pin_code")
    )
    return [{"pin_code": r["pin_code"], "count": r["count"]} for r in rows]


def link_revisit(lettering_id, revisit_lettering_id, user, notes=None) -> LocationRevisit:
    notes = str(notes or "").strip() or None
    if notes and len(notes) > 500:
        raise ValidationError("notes must be 500 characters or less")
    original = get_lettering_or_404(lettering_id)
    revisit = get_lettering_or_404(revisit_lettering_id)
    if original.pk == revisit.pk:
        raise ValidationError("A lettering cannot be its own revisit")
    if revisit.user_id != user.pk:
        log.warning("Revisit link denied: user=%s revisit=%s", user.pk, revisit.pk)
        raise PermissionDenied("You can only link your own uploads as revisits")

    try:
        with transaction.atomic():
            link, created = LocationRevisit.objects.get_or_create(original_lettering=original, revisit_lettering=revisit, defaults={"notes": notes})
    except IntegrityError:
        link, created = LocationRevisit.objects.get(original_lettering=original, revisit_lettering=revisit), False
    if created:
        log.info("Lettering %s linked as revisit of %s", revisit.pk, original.pk)
    return link


def revisits_for(lettering_id) -> QuerySet:
    if not discoverable_letterings().filter(pk=lettering_id).exists():
        raise NotFound("Lettering not found")
    visible = discoverable_letterings().values("pk")
    return (
        LocationRevisit.objects.filter(Q(original_lettering_id=lettering_id) | Q(revisit_lettering_id=lettering_id))
        .filter(original_lettering__in=visible, revisit_lettering__in=visible)
        .select_related("original_lettering", "revisit_lettering")
        .order_by("-created_at")
    )
