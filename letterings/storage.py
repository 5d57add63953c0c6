import datetime as dt
import logging
from urllib.parse import urljoin

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError
from django.conf import settings

log = logging.getLogger(__name__)


def _client():
    return boto3.client(
        "s3",
        endpoint_url=settings.AWS_S3_ENDPOINT_URL or None,
        aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
        aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
        region_name=(settings.AWS_S3_REGION_NAME or None),
        config=Config(signature_version=getattr(settings, "AWS_S3_SIGNATURE_VERSION", "s3v4")),
    )


def build_storage_key(lettering_id, ext: str) -> str:
    today = dt.datetime.now(dt.timezone.utc).strftime("%Y/%m/%d")
    # rule: letterings/{yyyy/mm/dd}/{lettering_id}.{ext}
    return f"letterings/{today}/{lettering_id}.{ext.lstrip('.').lower() or 'bin'}"


def public_url(key: str) -> str:
    # R2 등 공개 도메인이 있으면 우선 사용, 없으면 path-style: http://endpoint:9000/<bucket>/<key>
    public_base = getattr(settings, "AWS_PUBLIC_BASE_URL", "") or ""
    if public_base:
        return urljoin(public_base.rstrip("/") + "/", key.lstrip("/"))
    base = (settings.AWS_S3_ENDPOINT_URL or "").rstrip("/") + "/"
    path = f"{settings.AWS_STORAGE_BUCKET_NAME}/{key.lstrip('/')}"
    return urljoin(base, path)


def upload_bytes(key: str, data: bytes, content_type: str) -> str:
    _client().put_object(Bucket=settings.AWS_STORAGE_BUCKET_NAME, Key=key, Body=data, ContentType=content_type)
    return public_url(key)


def delete_object(key: str) -> bool:
    # best-effort: 실패해도 행 삭제는 계속 진행한다.
    if not key:
        return False
    try:
        _client().delete_object(Bucket=settings.AWS_STORAGE_BUCKET_NAME, Key=key)
    except (BotoCoreError, ClientError) as e:
        log.warning("Storage delete failed for %s: %s", key, e)
        return False
    return True
