import logging
import urllib.parse
from typing import Optional

from channels.middleware import BaseMiddleware
from django.conf import settings
from rest_framework_simplejwt.backends import TokenBackend
from rest_framework_simplejwt.exceptions import TokenBackendError

log = logging.getLogger(__name__)


class JWTAuthMiddleware(BaseMiddleware):
    # QueryString ?token=..., scope["subprotocols"], 또는 Sec-WebSocket-Protocol 헤더에서 JWT를 추출한다.
    # 토큰이 없거나 유효하지 않으면 익명(scope["user_id"] = None)으로 통과시킨다. 공개 피드는 익명 구독을 허용한다.

    def _extract_token(self, scope) -> Optional[str]:
        qs = scope.get("query_string", b"").decode()
        if qs:
            params = urllib.parse.parse_qs(qs)
            if params.get("token"):
                return params["token"][0]

        for proto in scope.get("subprotocols") or []:
            p = (proto or "").strip()
            if not p:
                continue
            if p.lower().startswith("bearer "):
                return p[7:].strip()
            return p

        headers = dict(scope.get("headers", []))
        swp = headers.get(b"sec-websocket-protocol")
        if swp:
            p = swp.decode().split(",")[0].strip()
            if p.lower().startswith("bearer "):
                p = p[7:].strip()
            return p or None

        return None

    def _decode_user_id(self, token: str) -> Optional[str]:
        backend = TokenBackend(
            algorithm=settings.SIMPLE_JWT.get("ALGORITHM", "HS256"),
            signing_key=settings.SIMPLE_JWT.get("SIGNING_KEY", settings.SECRET_KEY),
            verifying_key=settings.SIMPLE_JWT.get("VERIFYING_KEY", None),
        )
        try:
            payload = backend.decode(token, verify=True)
        except TokenBackendError:
            log.info("Rejected invalid websocket token; continuing as anonymous")
            return None
        user_id = payload.get("sub") or payload.get("user_id")
        return str(user_id) if user_id else None

    async def __call__(self, scope, receive, send):
        token = self._extract_token(scope)
        scope["user_id"] = self._decode_user_id(token) if token else None
        return await super().__call__(scope, receive, send)
