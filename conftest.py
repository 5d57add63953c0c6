import pytest
from django.core.cache import cache


@pytest.fixture(autouse=True)
def _isolated_runtime(settings):
    # 외부 의존(Redis/Celery 브로커/ML 큐) 없이 동작하도록 고정
    settings.CELERY_TASK_ALWAYS_EAGER = True
    settings.CHANNEL_LAYERS = {"default": {"BACKEND": "channels.layers.InMemoryChannelLayer"}}
    settings.ENABLE_ML_PROCESSING = False
    settings.PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher", "django.contrib.auth.hashers.BCryptPasswordHasher"]
    cache.clear()
    yield
    cache.clear()
