import logging

import requests
from django.conf import settings

log = logging.getLogger(__name__)

FETCH_TIMEOUT = 60.0
INFERENCE_TIMEOUT = 30.0


class MlJobError(Exception):
    pass


def fetch_image(url: str) -> bytes:
    try:
        response = requests.get(url, timeout=FETCH_TIMEOUT)
    except requests.exceptions.RequestException as e:
        raise MlJobError(f"Failed to fetch image from {url}: {e}") from e
    if response.status_code != 200:
        raise MlJobError(f"Image fetch returned HTTP {response.status_code}: {url}")
    if not response.content:
        raise MlJobError(f"Image fetch returned empty body from {url}")
    return response.content


def detect_text(image: bytes) -> str:
    """
    외부 추론 엔드포인트(ML_INFERENCE_URL)로 텍스트 검출을 요청한다.
    - 설정이 없으면 빈 문자열
    - 응답 형식: [{"generated_text": "..."}] 또는 {"text": "..."}
    - 추론 실패는 빈 문자열로 처리(승인은 계속 진행)
    """
    url = getattr(settings, "ML_INFERENCE_URL", "") or ""
    if not url:
        return ""

    headers = {"Content-Type": "application/octet-stream"}
    token = getattr(settings, "ML_INFERENCE_TOKEN", "") or ""
    if token:
        headers["Authorization"] = f"Bearer {token}"

    try:
        response = requests.post(url, headers=headers, data=image, timeout=INFERENCE_TIMEOUT)
        response.raise_for_status()
        payload = response.json()
    except requests.exceptions.Timeout:
        log.warning("ML inference timed out after %ss", INFERENCE_TIMEOUT)
        return ""
    except (requests.exceptions.RequestException, ValueError) as e:
        log.warning("ML inference failed: %s", e)
        return ""

    if isinstance(payload, list) and payload and isinstance(payload[0], dict):
        return str(payload[0].get("generated_text") or "").strip()
    if isinstance(payload, dict):
        return str(payload.get("text") or payload.get("generated_text") or "").strip()
    return ""


def process_ml_job(job: dict) -> bool:
    """
    큐에서 꺼낸 작업 1건 처리: 이미지 다운로드 → 텍스트 검출 → 자동 승인.
    이미 PENDING이 아니면(관리자가 먼저 처리) False.
    """
    from .services import REASON_ML_APPROVED, approve_automatically

    lettering_id = (job or {}).get("lettering_id")
    image_url = (job or {}).get("image_url")
    if not lettering_id or not image_url:
        raise MlJobError(f"Malformed ML job: {job!r}")

    image = fetch_image(image_url)
    text = detect_text(image)
    approved = approve_automatically(lettering_id, reason=REASON_ML_APPROVED, detected_text=text)
    log.info("ML job done: lettering=%s approved=%s text_len=%s", lettering_id, approved, len(text))
    return approved
