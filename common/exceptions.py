import logging

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

log = logging.getLogger(__name__)

_PLAIN_KEYS = {"non_field_errors", "detail", "error"}


class RateLimited(APIException):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_detail = "Rate limit exceeded"
    default_code = "rate_limited"


def flatten_error(detail) -> str:
    # 필드 오류는 "field: message", 도메인 규칙 오류(non_field/plain)는 메시지 그대로.
    if isinstance(detail, dict):
        for key, value in detail.items():
            msg = flatten_error(value)
            return msg if key in _PLAIN_KEYS else f"{key}: {msg}"
        return ""
    if isinstance(detail, (list, tuple)):
        return flatten_error(detail[0]) if detail else ""
    return str(detail)


def api_exception_handler(exc, context):
    """
    모든 API 오류를 {"error": "..."} 형태로 통일한다.
    - DRF 예외: 상태코드 유지, 메시지만 평탄화
    - 그 외 예외: 로깅 후 500
    """
    response = exception_handler(exc, context)
    if response is None:
        view = context.get("view")
        log.exception("Unhandled API error in %s: %s", view.__class__.__name__ if view else "-", exc)
        return Response({"error": "Internal server error"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    response.data = {"error": flatten_error(response.data) or "Request failed"}
    return response
