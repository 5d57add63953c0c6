from drf_spectacular.utils import inline_serializer
from rest_framework import serializers

# Common
ErrorOut = inline_serializer(
    name="ErrorOut",
    fields={"error": serializers.CharField(help_text="Human readable error message.")},
)

OkOut = inline_serializer(
    name="OkOut",
    fields={"ok": serializers.BooleanField()},
)

# Auth
AuthUserOut = inline_serializer(
    name="AuthUserOut",
    fields={
        "id": serializers.UUIDField(),
        "email": serializers.EmailField(),
        "display_name": serializers.CharField(allow_null=True),
        "role": serializers.ChoiceField(choices=["USER", "ADMIN"]),
        "created_at": serializers.DateTimeField(),
    },
)

AuthOut = inline_serializer(
    name="AuthOut",
    fields={
        "token": serializers.CharField(help_text="JWT access token"),
        "refresh": serializers.CharField(),
        "user": AuthUserOut,
    },
)

AdminTokenOut = inline_serializer(
    name="AdminTokenOut",
    fields={"token": serializers.CharField(help_text="관리자 JWT access token")},
)

# Bulk moderation
BulkActionIn = inline_serializer(
    name="BulkActionIn",
    fields={
        "ids": serializers.ListField(child=serializers.CharField(), required=False, help_text="대상 ID 목록(1~200개)"),
        "action": serializers.CharField(),
        "reason": serializers.CharField(required=False, allow_blank=True),
    },
)

BulkActionOut = inline_serializer(
    name="BulkActionOut",
    fields={
        "requested": serializers.IntegerField(),
        "processed": serializers.IntegerField(),
        "failed": serializers.IntegerField(),
        "failed_items": serializers.ListField(
            child=inline_serializer(
                name="BulkActionFailure",
                fields={"id": serializers.CharField(), "error": serializers.CharField()},
            )
        ),
    },
)

ReasonIn = inline_serializer(
    name="ReasonIn",
    fields={"reason": serializers.CharField(required=False, allow_blank=True)},
)

# Letterings
LikeOut = inline_serializer(
    name="LikeOut",
    fields={"liked": serializers.BooleanField(), "likes_count": serializers.IntegerField()},
)

AdminStatsOut = inline_serializer(
    name="AdminStatsOut",
    fields={
        "total_uploads": serializers.IntegerField(),
        "pending_approvals": serializers.IntegerField(),
        "approved": serializers.IntegerField(),
        "rejected": serializers.IntegerField(),
        "total_cities": serializers.IntegerField(),
        "total_likes": serializers.IntegerField(),
        "total_comments": serializers.IntegerField(),
    },
)

# Realtime (WebSocket)
RealtimeCapabilitiesOut = inline_serializer(
    name="RealtimeCapabilitiesOut",
    fields={
        "websocket_url": serializers.CharField(help_text="WS endpoint (absolute or relative)"),
        "auth": inline_serializer(
            name="RealtimeAuthHints",
            fields={
                "query_string": serializers.CharField(required=False, help_text="예: ?token=<JWT>"),
                "subprotocol": serializers.CharField(required=False, help_text="예: JWT 를 Sec-WebSocket-Protocol 로 전달"),
                "required": serializers.BooleanField(required=False, help_text="인증 필수 여부"),
            },
        ),
        "events": serializers.ListField(
            child=inline_serializer(
                name="RealtimeEventMeta",
                fields={
                    "type": serializers.CharField(),
                    "direction": serializers.ChoiceField(choices=["server->client", "client->server"]),
                    "desc": serializers.CharField(required=False),
                    "example": serializers.DictField(child=serializers.CharField(), required=False),
                },
            ),
            help_text="지원 이벤트/메시지 요약",
        ),
        "heartbeat_sec": serializers.IntegerField(required=False, help_text="권장 ping 주기(클라이언트에서 전송)"),
        "notes": serializers.ListField(child=serializers.CharField(), required=False),
    },
)
