import logging

from django.conf import settings
from django.contrib.auth.hashers import check_password
from django.db import IntegrityError, transaction
from rest_framework.exceptions import PermissionDenied, ValidationError

from core.models import User, UserRole

log = logging.getLogger(__name__)


def _encoded_admin_hash() -> str:
    raw = (getattr(settings, "ADMIN_PASSWORD_HASH", "") or "").strip()
    # htpasswd/bcrypt CLI 형식($2b$...)은 Django 해셔 접두어를 붙여 검증한다.
    if raw.startswith(("$2a$", "$2b$", "$2y$")):
        return f"bcrypt${raw}"
    return raw


def _is_reserved_admin_email(email: str) -> bool:
    admin_email = (getattr(settings, "ADMIN_EMAIL", "") or "").strip().lower()
    return bool(admin_email) and (email or "").strip().lower() == admin_email


def register_user(*, email: str, password: str, display_name: str | None = None) -> User:
    # 관리자 계정은 /admin/login/ 으로만 만들어진다.
    if _is_reserved_admin_email(email) or User.objects.filter(email=email).exists():
        raise ValidationError("Email already registered")
    try:
        with transaction.atomic():
            return User.objects.create_user(email=email, password=password, display_name=display_name)
    except IntegrityError:
        raise ValidationError("Email already registered")


def authenticate_user(*, email: str, password: str) -> User:
    user = User.objects.filter(email=email, is_active=True).first()
    if user is None or not user.check_password(password):
        raise PermissionDenied("Invalid credentials")
    return user


def verify_admin_credentials(*, email: str, password: str) -> bool:
    admin_email = (getattr(settings, "ADMIN_EMAIL", "") or "").strip().lower()
    encoded = _encoded_admin_hash()
    if not admin_email or not encoded:
        log.warning("Admin login attempted but ADMIN_EMAIL/ADMIN_PASSWORD_HASH are not configured")
        return False
    if (email or "").strip().lower() != admin_email:
        return False
    return check_password(password, encoded)


@transaction.atomic
def ensure_admin_user(email: str) -> User:
    user, created = User.objects.get_or_create(
        email=email.strip().lower(),
        defaults={"role": UserRole.ADMIN, "is_staff": True},
    )
    if created:
        user.set_unusable_password()
        user.save(update_fields=["password"])
    elif not user.is_staff or user.role != UserRole.ADMIN or user.has_usable_password():
        # 일반 계정을 승격할 때 기존 비밀번호로는 관리자 토큰을 받을 수 없게 한다.
        user.is_staff = True
        user.role = UserRole.ADMIN
        user.set_unusable_password()
        user.save(update_fields=["is_staff", "role", "password", "updated_at"])
        log.warning("Promoted existing account %s to admin; its password was disabled", user.email)
    return user
