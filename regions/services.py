import logging
import re
from dataclasses import dataclass
from typing import Optional

from django.db import IntegrityError, transaction
from rest_framework.exceptions import NotFound, ValidationError

from audits.models import AuditAction
from audits.services import write_audit_log

from .models import City, ModerationLevel, RegionPolicy

log = logging.getLogger(__name__)

_COUNTRY_RE = re.compile(r"^[A-Z]{2}$")
_POLICY_FIELDS = ("uploads_enabled", "comments_enabled", "discoverability_enabled", "auto_moderation_level")


@dataclass(frozen=True)
class EffectivePolicy:
    country_code: Optional[str]
    uploads_enabled: bool = True
    comments_enabled: bool = True
    discoverability_enabled: bool = True
    auto_moderation_level: str = ModerationLevel.STANDARD.value
    explicit: bool = False

    @classmethod
    def from_row(cls, row: RegionPolicy) -> "EffectivePolicy":
        return cls(
            country_code=row.country_code,
            uploads_enabled=row.uploads_enabled,
            comments_enabled=row.comments_enabled,
            discoverability_enabled=row.discoverability_enabled,
            auto_moderation_level=row.auto_moderation_level,
            explicit=True,
        )


def normalize_country_code(value) -> str:
    code = str(value or "").strip().upper()
    if not _COUNTRY_RE.match(code):
        raise ValidationError("country_code must be a 2-letter ISO code")
    return code


def normalize_moderation_level(value) -> str:
    level = str(value or "").strip().lower()
    if level not in ModerationLevel.values:
        raise ValidationError("auto_moderation_level must be one of relaxed, standard, strict")
    return level


def get_effective_policy(country_code: Optional[str]) -> EffectivePolicy:
    """
    국가 코드로 정책 1회 조회. 행이 없으면 전부 허용하는 기본 정책을 돌려준다.
    """
    code = (country_code or "").strip().upper() or None
    if code is None:
        return EffectivePolicy(country_code=None)
    row = RegionPolicy.objects.filter(country_code=code).first()
    return EffectivePolicy.from_row(row) if row else EffectivePolicy(country_code=code)


def policy_for_city(city: City) -> EffectivePolicy:
    return get_effective_policy(city.country_code if city else None)


def policy_for_lettering(lettering_id):
    """
    lettering -> city -> country 로 정책을 찾는다. lettering이 없으면 NotFound.
    """
    from letterings.models import Lettering

    row = Lettering.objects.filter(pk=lettering_id).values("city__country_code").first()
    if row is None:
        raise NotFound("Lettering not found")
    return get_effective_policy(row["city__country_code"])


@transaction.atomic
def upsert_region_policy(country_code, *, user=None, request=None, **fields) -> RegionPolicy:
    code = normalize_country_code(country_code)
    updates = {k: v for k, v in fields.items() if k in _POLICY_FIELDS and v is not None}
    if "auto_moderation_level" in updates:
        updates["auto_moderation_level"] = normalize_moderation_level(updates["auto_moderation_level"])

    policy, created = RegionPolicy.objects.select_for_update().get_or_create(country_code=code, defaults=updates)
    if not created and updates:
        for k, v in updates.items():
            setattr(policy, k, v)
        policy.save(update_fields=[*updates.keys(), "updated_at"])

    snapshot = {"country_code": policy.country_code, **{k: getattr(policy, k) for k in _POLICY_FIELDS}}
    write_audit_log(action=AuditAction.UPSERT_REGION_POLICY, user=user, target_type="region_policy", target_id=code, request=request, metadata=snapshot)
    log.info("Region policy %s %s: %s", code, "created" if created else "updated", snapshot)
    return policy


def create_city(*, name: str, country_code, center_lat=None, center_lng=None, is_active: bool = True, user=None, request=None) -> City:
    code = normalize_country_code(country_code)
    try:
        with transaction.atomic():
            city = City.objects.create(name=name, country_code=code, center_lat=center_lat, center_lng=center_lng, is_active=is_active)
    except IntegrityError:
        raise ValidationError("City already exists")
    write_audit_log(action=AuditAction.CREATE_CITY, user=user, target_type="city", target_id=city.id, request=request, metadata={"name": city.name, "country_code": code})
    return city
