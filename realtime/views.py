from drf_spectacular.utils import OpenApiExample, OpenApiResponse, extend_schema
from rest_framework import serializers, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from common.schema import RealtimeCapabilitiesOut

CAPABILITIES = {
    "websocket_url": "/ws/feed/",
    "auth": {"query_string": "?token=<JWT_ACCESS_TOKEN>", "subprotocol": "<JWT_ACCESS_TOKEN>", "required": False},
    "events": [
        {
            "type": "PROCESSED",
            "direction": "server->client",
            "desc": "업로드가 처리(승인)되어 갤러리에 노출됨",
            "example": {"type": "PROCESSED", "id": "uuid"},
        },
        {"type": "ping", "direction": "client->server", "desc": "헬스 체크용 ping", "example": {"type": "ping"}},
        {"type": "pong", "direction": "server->client", "desc": "ping에 대한 응답", "example": {"type": "pong"}},
    ],
    "heartbeat_sec": 25,
    "notes": [
        "익명 구독이 허용되며 모든 연결은 공개 그룹(feed.public)에 참여합니다.",
        "PROCESSED 이벤트를 받으면 클라이언트는 갤러리를 다시 조회합니다.",
    ],
}


class RealtimeDocViewSet(viewsets.ViewSet):
    """
    WebSocket 핸드셰이크/계약을 Swagger/Redoc에서 '발견'할 수 있게 해주는 문서 전용 뷰.
    """

    permission_classes = [AllowAny]
    serializer_class = serializers.Serializer

    @extend_schema(
        tags=["Realtime"],
        summary="Feed WebSocket 연결 가이드/능력치",
        description=(
            "실시간 Feed(WebSocket) 연결 정보를 제공합니다.\n\n"
            "- JWT는 선택 사항입니다. 유효하지 않은 토큰은 익명으로 처리됩니다.\n"
            '- 서버→클라이언트 이벤트: `{"type":"PROCESSED","id":"<uuid>"}`\n'
            '- 클라이언트→서버 메시지: `{"type":"ping"}` 전송 시 `{"type":"pong"}` 응답\n'
        ),
        operation_id="realtime_feed_capabilities",
        responses={200: OpenApiResponse(response=RealtimeCapabilitiesOut)},
        examples=[OpenApiExample("응답 예시", value=CAPABILITIES, response_only=True)],
    )
    @action(detail=False, methods=["get"], url_path="capabilities")
    def capabilities(self, request):
        return Response(CAPABILITIES)
