"""
Django settings for the letters project.

Values are read from the environment (or a .env file) with python-decouple.
"""

from datetime import timedelta
from pathlib import Path

from celery.schedules import crontab
from decouple import Csv, config

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = config("SECRET_KEY", default="letters-insecure-dev-key-change-me-0123456789")
DEBUG = config("DEBUG", default=False, cast=bool)
ALLOWED_HOSTS = config("ALLOWED_HOSTS", default="localhost,127.0.0.1,testserver", cast=Csv())

INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.staticfiles",
    "rest_framework",
    "drf_spectacular",
    "channels",
    "core",
    "regions",
    "letterings",
    "comments",
    "moderation",
    "audits",
    "notifications",
    "community",
    "realtime",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "letters.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {"context_processors": ["django.template.context_processors.request"]},
    },
]

WSGI_APPLICATION = "letters.wsgi.application"
ASGI_APPLICATION = "letters.asgi.application"

# Database
DB_ENGINE = config("DB_ENGINE", default="django.db.backends.sqlite3")
if DB_ENGINE.endswith("sqlite3"):
    DATABASES = {"default": {"ENGINE": DB_ENGINE, "NAME": config("DB_NAME", default=str(BASE_DIR / "db.sqlite3"))}}
else:
    DATABASES = {
        "default": {
            "ENGINE": DB_ENGINE,
            "NAME": config("DB_NAME", default="letters"),
            "USER": config("DB_USER", default="letters"),
            "PASSWORD": config("DB_PASSWORD", default=""),
            "HOST": config("DB_HOST", default="localhost"),
            "PORT": config("DB_PORT", default="5432"),
        }
    }

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"
AUTH_USER_MODEL = "core.User"

# bcrypt는 ADMIN_PASSWORD_HASH 검증용
PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.Argon2PasswordHasher",
    "django.contrib.auth.hashers.BCryptPasswordHasher",
    "django.contrib.auth.hashers.BCryptSHA256PasswordHasher",
    "django.contrib.auth.hashers.PBKDF2PasswordHasher",
]

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"

# Redis / cache
REDIS_URL = config("REDIS_URL", default="redis://localhost:6379/0")
if config("CACHE_REDIS", default=False, cast=bool):
    CACHES = {"default": {"BACKEND": "django.core.cache.backends.redis.RedisCache", "LOCATION": REDIS_URL}}
else:
    CACHES = {"default": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache", "LOCATION": "letters"}}

if config("CHANNEL_LAYER_REDIS", default=False, cast=bool):
    CHANNEL_LAYERS = {"default": {"BACKEND": "channels_redis.core.RedisChannelLayer", "CONFIG": {"hosts": [REDIS_URL]}}}
else:
    CHANNEL_LAYERS = {"default": {"BACKEND": "channels.layers.InMemoryChannelLayer"}}

# DRF
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": ("rest_framework_simplejwt.authentication.JWTAuthentication",),
    "DEFAULT_PERMISSION_CLASSES": ("rest_framework.permissions.AllowAny",),
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
    "EXCEPTION_HANDLER": "common.exceptions.api_exception_handler",
}

SIMPLE_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(minutes=config("JWT_ACCESS_MINUTES", default=60, cast=int)),
    "REFRESH_TOKEN_LIFETIME": timedelta(days=config("JWT_REFRESH_DAYS", default=14, cast=int)),
    "ALGORITHM": "HS256",
    "SIGNING_KEY": config("JWT_SECRET", default=SECRET_KEY),
    "AUTH_HEADER_TYPES": ("Bearer",),
    "USER_ID_FIELD": "id",
}

SPECTACULAR_SETTINGS = {
    "TITLE": "Through Your Letters API",
    "DESCRIPTION": "Street lettering archive: uploads, gallery, comments and moderation",
    "VERSION": "1.0.0",
    "SERVE_INCLUDE_SCHEMA": False,
    "COMPONENT_SPLIT_REQUEST": True,
    "APPEND_COMPONENTS": {
        "securitySchemes": {"BearerAuth": {"type": "http", "scheme": "bearer", "bearerFormat": "JWT"}},
    },
    "SECURITY": [{"BearerAuth": []}],
}

# Admin
ADMIN_EMAIL = config("ADMIN_EMAIL", default="")
ADMIN_PASSWORD_HASH = config("ADMIN_PASSWORD_HASH", default="")

# ML pipeline
ENABLE_ML_PROCESSING = config("ENABLE_ML_PROCESSING", default=False, cast=bool)
ML_QUEUE_KEY = config("ML_QUEUE_KEY", default="ml_jobs")
ML_INFERENCE_URL = config("ML_INFERENCE_URL", default="")
ML_INFERENCE_TOKEN = config("ML_INFERENCE_TOKEN", default="")

ENABLE_PENDING_AUTO_APPROVE = config("ENABLE_PENDING_AUTO_APPROVE", default=True, cast=bool)
PENDING_AUTO_APPROVE_MINUTES = config("PENDING_AUTO_APPROVE_MINUTES", default=30, cast=int)
PENDING_AUTO_APPROVE_INTERVAL_SECONDS = config("PENDING_AUTO_APPROVE_INTERVAL_SECONDS", default=300, cast=int)
PENDING_AUTO_APPROVE_BATCH_SIZE = config("PENDING_AUTO_APPROVE_BATCH_SIZE", default=50, cast=int)

# Abuse limits
RATE_LIMIT_UPLOADS_PER_IP = config("RATE_LIMIT_UPLOADS_PER_IP", default=20, cast=int)
COMMENT_RATE_LIMIT_SECONDS = config("COMMENT_RATE_LIMIT_SECONDS", default=30, cast=int)
LETTERING_REPORT_THRESHOLD = config("LETTERING_REPORT_THRESHOLD", default=3, cast=int)

# Audits
AUDIT_RETENTION_DAYS = config("AUDIT_RETENTION_DAYS", default=365, cast=int)
AUDIT_HASH_SALT = config("AUDIT_HASH_SALT", default=SECRET_KEY)

# Object storage (R2/S3)
AWS_S3_ENDPOINT_URL = config("AWS_S3_ENDPOINT_URL", default=None)
AWS_ACCESS_KEY_ID = config("AWS_ACCESS_KEY_ID", default="")
AWS_SECRET_ACCESS_KEY = config("AWS_SECRET_ACCESS_KEY", default="")
AWS_S3_REGION_NAME = config("AWS_S3_REGION_NAME", default="auto")
AWS_S3_SIGNATURE_VERSION = config("AWS_S3_SIGNATURE_VERSION", default="s3v4")
AWS_STORAGE_BUCKET_NAME = config("AWS_STORAGE_BUCKET_NAME", default="letterings")
AWS_PUBLIC_BASE_URL = config("AWS_PUBLIC_BASE_URL", default="")

# Events / realtime
EVENT_BUS_BACKEND = config("EVENT_BUS_BACKEND", default="log")
REALTIME_REQUIRE_AUTH = config("REALTIME_REQUIRE_AUTH", default=False, cast=bool)

# Celery
CELERY_BROKER_URL = config("CELERY_BROKER_URL", default=REDIS_URL)
CELERY_RESULT_BACKEND = config("CELERY_RESULT_BACKEND", default=REDIS_URL)
CELERY_TASK_ALWAYS_EAGER = config("CELERY_TASK_ALWAYS_EAGER", default=False, cast=bool)
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_ACCEPT_CONTENT = ["json"]
CELERY_TASK_SERIALIZER = "json"
CELERY_RESULT_SERIALIZER = "json"
CELERY_TIMEZONE = TIME_ZONE
CELERY_BEAT_SCHEDULE = {
    "auto-approve-pending-letterings": {
        "task": "letterings.auto_approve_pending",
        "schedule": timedelta(seconds=PENDING_AUTO_APPROVE_INTERVAL_SECONDS),
    },
    "purge-old-audit-logs": {
        "task": "audits.purge_old_audit_logs",
        "schedule": crontab(hour=3, minute=0),
    },
}

# Logging
LOG_LEVEL = config("LOG_LEVEL", default="INFO")
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {"format": "%(asctime)s %(levelname)s [%(name)s] %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "standard"},
    },
    "root": {"handlers": ["console"], "level": LOG_LEVEL},
    "loggers": {
        "django": {"handlers": ["console"], "level": config("DJANGO_LOG_LEVEL", default="WARNING"), "propagate": False},
        "celery": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
    },
}
