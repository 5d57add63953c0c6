from drf_spectacular.utils import OpenApiExample, OpenApiParameter, OpenApiResponse, OpenApiTypes, extend_schema, extend_schema_view, inline_serializer
from rest_framework import mixins, serializers, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from common.pagination import EnvelopePagination
from common.schema import ErrorOut

from .models import Notification
from .serializers import NotificationOut

NotificationPageOut = inline_serializer(
    name="NotificationPageOut",
    fields={
        "items": NotificationOut(many=True),
        "total": serializers.IntegerField(),
        "unread": serializers.IntegerField(help_text="읽지 않은 알림 수"),
        "limit": serializers.IntegerField(),
        "offset": serializers.IntegerField(),
    },
)


@extend_schema_view(
    list=extend_schema(
        tags=["Notifications"],
        summary="내 알림 목록",
        description="현재 사용자에게 발송된 알림을 최신순으로 반환합니다. 응답에 읽지 않은 알림 수(`unread`)가 포함됩니다.",
        operation_id="me_notifications_list",
        parameters=[
            OpenApiParameter(name="limit", location=OpenApiParameter.QUERY, type=OpenApiTypes.INT, required=False, description="1~100 (기본 20)"),
            OpenApiParameter(name="offset", location=OpenApiParameter.QUERY, type=OpenApiTypes.INT, required=False),
        ],
        responses={200: OpenApiResponse(response=NotificationPageOut), 401: OpenApiResponse(response=ErrorOut)},
    ),
)
class NotificationViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    permission_classes = [IsAuthenticated]
    serializer_class = NotificationOut
    pagination_class = None
    lookup_value_regex = "[0-9a-f-]{36}"

    def get_queryset(self):
        return Notification.objects.filter(user=self.request.user).order_by("-created_at")

    def list(self, request, *args, **kwargs):
        qs = self.get_queryset()
        paginator = EnvelopePagination()
        page = paginator.paginate_queryset(qs, request, view=self)
        return Response(
            {
                "items": NotificationOut(page, many=True).data,
                "total": paginator.count,
                "unread": qs.filter(is_read=False).count(),
                "limit": paginator.limit,
                "offset": paginator.offset,
            }
        )

    @extend_schema(
        tags=["Notifications"],
        summary="알림 읽음 처리",
        description="본인 소유의 알림 하나를 읽음 처리합니다. 없거나 타인 소유면 404 `Notification not found`.",
        operation_id="me_notifications_read",
        request=None,
        parameters=[OpenApiParameter(name="pk", location=OpenApiParameter.PATH, type=OpenApiTypes.UUID, description="알림 ID (UUID)")],
        responses={200: OpenApiResponse(response=NotificationOut), 401: OpenApiResponse(response=ErrorOut), 404: OpenApiResponse(response=ErrorOut)},
    )
    @action(detail=True, methods=["POST"])
    def read(self, request, pk=None):
        n = Notification.objects.filter(user=request.user, pk=pk).first()
        if n is None:
            raise NotFound("Notification not found")
        if not n.is_read:
            n.is_read = True
            n.save(update_fields=["is_read"])
        return Response(NotificationOut(n).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["Notifications"],
        summary="모든 알림 읽음 처리",
        operation_id="me_notifications_read_all",
        request=None,
        responses={
            200: OpenApiResponse(response=inline_serializer(name="MarkReadOut", fields={"updated": serializers.IntegerField(help_text="읽음 처리된 개수")})),
            401: OpenApiResponse(response=ErrorOut),
        },
        examples=[OpenApiExample("응답 예시", value={"updated": 3}, response_only=True)],
    )
    @action(detail=False, methods=["POST"], url_path="read-all")
    def read_all(self, request):
        updated = Notification.objects.filter(user=request.user, is_read=False).update(is_read=True)
        return Response({"updated": updated})
