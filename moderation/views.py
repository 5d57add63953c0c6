from drf_spectacular.utils import OpenApiExample, OpenApiParameter, OpenApiResponse, OpenApiTypes, extend_schema, extend_schema_view
from rest_framework import mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from common.pagination import AdminPagination
from common.schema import AdminStatsOut, BulkActionIn, BulkActionOut, ErrorOut, ReasonIn

from .scoring import apply_region_moderation_policy, assess_comment_content
from .serializers import AdminLetteringOut, ModerationCheckIn, ModerationCheckOut
from .services import (
    QUEUE_STATUSES,
    admin_stats,
    approve_lettering,
    bulk_moderate_letterings,
    clear_reports as clear_lettering_reports,
    delete_lettering,
    moderation_queue,
    reject_lettering,
)

LETTERING_PATH = OpenApiParameter(name="id", location=OpenApiParameter.PATH, type=OpenApiTypes.UUID, description="레터링 ID")
ACTION_RESPONSES = {
    204: OpenApiResponse(description="처리 완료"),
    401: OpenApiResponse(response=ErrorOut),
    403: OpenApiResponse(response=ErrorOut),
    404: OpenApiResponse(response=ErrorOut, description="Lettering not found"),
}


@extend_schema_view(
    list=extend_schema(
        tags=["Admin"],
        summary="모더레이션 큐",
        description=(
            "- `status`: ALL(기본, 최신순) 또는 PENDING | APPROVED | REJECTED | REPORTED (오래된 순)\n"
            "- **limit**: 1~200 (기본 50), **offset**: 0 이상"
        ),
        operation_id="admin_moderation_queue",
        parameters=[OpenApiParameter(name="status", location=OpenApiParameter.QUERY, type=OpenApiTypes.STR, required=False, enum=list(QUEUE_STATUSES))],
        responses={200: OpenApiResponse(response=AdminLetteringOut(many=True)), 400: OpenApiResponse(response=ErrorOut), 401: OpenApiResponse(response=ErrorOut), 403: OpenApiResponse(response=ErrorOut)},
    ),
)
class ModerationViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    permission_classes = [permissions.IsAdminUser]
    serializer_class = AdminLetteringOut
    pagination_class = AdminPagination

    def get_queryset(self):
        return moderation_queue(self.request.query_params.get("status"))

    @extend_schema(
        tags=["Admin"],
        summary="댓글 위험도 미리보기",
        description=(
            "댓글 작성 시와 동일한 채점 함수로 결과를 미리 확인합니다.\n"
            "- `level`: relaxed | standard(기본) | strict 지역 보정 레벨"
        ),
        operation_id="admin_moderation_check",
        request=ModerationCheckIn,
        responses={200: OpenApiResponse(response=ModerationCheckOut), 400: OpenApiResponse(response=ErrorOut), 401: OpenApiResponse(response=ErrorOut), 403: OpenApiResponse(response=ErrorOut)},
        examples=[
            OpenApiExample("요청 예시", value={"content": "click here for free money", "level": "strict"}, request_only=True),
            OpenApiExample(
                "응답 예시",
                value={
                    "level": "strict",
                    "status": "HIDDEN",
                    "moderation_score": 80,
                    "moderation_flags": ["SPAM:free money", "SPAM:click here"],
                    "auto_flagged": True,
                    "needs_review": True,
                    "review_priority": 100,
                    "moderated_by": "AUTO_MODERATOR",
                    "moderation_reason": "Auto-hidden by moderation for potentially harmful/offensive content",
                },
                response_only=True,
            ),
        ],
    )
    @action(detail=False, methods=["post"], url_path="check")
    def check(self, request):
        s = ModerationCheckIn(data=request.data)
        s.is_valid(raise_exception=True)
        level = s.validated_data.get("level") or "standard"
        assessment = apply_region_moderation_policy(assess_comment_content(s.validated_data["content"]), level)
        return Response({"level": level, **assessment.as_dict()}, status=status.HTTP_200_OK)


class AdminLetteringViewSet(viewsets.GenericViewSet):
    """
    /api/v1/admin/letterings/{id}/(approve|reject|clear-reports)/, DELETE /api/v1/admin/letterings/{id}/
    """

    permission_classes = [permissions.IsAdminUser]
    serializer_class = AdminLetteringOut
    lookup_field = "id"
    lookup_value_regex = "[0-9a-f-]{36}"

    @extend_schema(tags=["Admin"], summary="레터링 승인", operation_id="admin_letterings_approve", parameters=[LETTERING_PATH], request=None, responses=ACTION_RESPONSES)
    @action(detail=True, methods=["post"], url_path="approve")
    def approve(self, request, id=None):
        approve_lettering(id, admin=request.user, request=request)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        tags=["Admin"],
        summary="레터링 반려",
        description="사유 미지정 시 `Rejected by admin`.",
        operation_id="admin_letterings_reject",
        parameters=[LETTERING_PATH],
        request=ReasonIn,
        responses=ACTION_RESPONSES,
        examples=[OpenApiExample("요청 예시", value={"reason": "Not street lettering"}, request_only=True)],
    )
    @action(detail=True, methods=["post"], url_path="reject")
    def reject(self, request, id=None):
        reject_lettering(id, admin=request.user, request=request, reason=request.data.get("reason"))
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        tags=["Admin"],
        summary="신고 초기화",
        description="신고 수/사유를 비우고 APPROVED로 되돌립니다.",
        operation_id="admin_letterings_clear_reports",
        parameters=[LETTERING_PATH],
        request=None,
        responses=ACTION_RESPONSES,
    )
    @action(detail=True, methods=["post"], url_path="clear-reports")
    def clear_reports(self, request, id=None):
        clear_lettering_reports(id, admin=request.user, request=request)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        tags=["Admin"],
        summary="레터링 삭제",
        description="소유자 알림 후 스토리지 객체(best-effort)와 행을 삭제합니다.",
        operation_id="admin_letterings_destroy",
        parameters=[LETTERING_PATH],
        responses=ACTION_RESPONSES,
    )
    def destroy(self, request, id=None):
        delete_lettering(id, admin=request.user, request=request)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        tags=["Admin"],
        summary="레터링 일괄 처리",
        description="`action`: approve | reject | delete | keep(신고 초기화). 항목별 독립 처리, 최대 200개.",
        operation_id="admin_letterings_bulk",
        request=BulkActionIn,
        responses={200: OpenApiResponse(response=BulkActionOut), 400: OpenApiResponse(response=ErrorOut), 401: OpenApiResponse(response=ErrorOut), 403: OpenApiResponse(response=ErrorOut)},
        examples=[OpenApiExample("요청 예시", value={"ids": ["11111111-1111-1111-1111-111111111111"], "action": "approve"}, request_only=True)],
    )
    @action(detail=False, methods=["post"], url_path="bulk")
    def bulk(self, request):
        ids = request.data.get("ids") or []
        if not isinstance(ids, list):
            ids = [ids]
        result = bulk_moderate_letterings(ids, request.data.get("action"), admin=request.user, reason=request.data.get("reason"), request=request)
        return Response(result, status=status.HTTP_200_OK)


class AdminStatsViewSet(viewsets.ViewSet):
    permission_classes = [permissions.IsAdminUser]

    @extend_schema(
        tags=["Admin"],
        summary="관리자 통계",
        operation_id="admin_stats",
        responses={200: OpenApiResponse(response=AdminStatsOut), 401: OpenApiResponse(response=ErrorOut), 403: OpenApiResponse(response=ErrorOut)},
    )
    def list(self, request):
        return Response(admin_stats(), status=status.HTTP_200_OK)
