from drf_spectacular.utils import OpenApiExample, OpenApiParameter, OpenApiResponse, OpenApiTypes, extend_schema, extend_schema_view
from rest_framework import mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from common.pagination import AdminPagination, EnvelopePagination
from common.schema import BulkActionIn, BulkActionOut, ErrorOut, ReasonIn

from .models import Comment
from .serializers import AdminCommentOut, CommentIn, CommentOut
from .services import (
    add_comment,
    admin_comment_queryset,
    bulk_moderate_comments,
    delete_comment,
    hide_comment,
    restore_comment,
    visible_comments,
)

LETTERING_PATH = OpenApiParameter(name="lettering_id", location=OpenApiParameter.PATH, type=OpenApiTypes.UUID, description="레터링 ID")
COMMENT_PATH = OpenApiParameter(name="id", location=OpenApiParameter.PATH, type=OpenApiTypes.UUID, description="댓글 ID")


@extend_schema_view(
    list=extend_schema(
        tags=["Comments"],
        summary="레터링 댓글 목록",
        description="노출(VISIBLE) 상태 댓글을 최신순으로 반환합니다. `commenter_name`은 표시 이름, 이메일, `Anonymous` 순으로 결정됩니다.",
        operation_id="lettering_comments_list",
        parameters=[LETTERING_PATH],
        responses={200: OpenApiResponse(response=CommentOut(many=True)), 404: OpenApiResponse(response=ErrorOut)},
    ),
    create=extend_schema(
        tags=["Comments"],
        summary="댓글 작성",
        description=(
            "인증 사용자만 작성할 수 있습니다.\n\n"
            "- 내용은 공백 제거 후 1~500자\n"
            "- 지역 정책상 댓글이 금지된 국가는 403\n"
            "- (레터링, 사용자, IP) 기준 30초에 1회 (429)\n"
            "- 작성 시 위험도 점수가 계산되며 높으면 자동 숨김 처리됩니다."
        ),
        operation_id="lettering_comments_create",
        parameters=[LETTERING_PATH],
        request=CommentIn,
        responses={
            201: OpenApiResponse(response=CommentOut),
            400: OpenApiResponse(response=ErrorOut),
            401: OpenApiResponse(response=ErrorOut),
            403: OpenApiResponse(response=ErrorOut),
            404: OpenApiResponse(response=ErrorOut),
            429: OpenApiResponse(response=ErrorOut),
        },
        examples=[OpenApiExample("요청 예시", value={"content": "Love the hand-painted serif!"}, request_only=True)],
    ),
)
class LetteringCommentViewSet(mixins.ListModelMixin, mixins.CreateModelMixin, viewsets.GenericViewSet):
    """
    /api/v1/letterings/{lettering_id}/comments/
    - GET: 공개
    - POST: 인증 필요
    """

    serializer_class = CommentOut
    pagination_class = EnvelopePagination

    def get_permissions(self):
        if self.action == "create":
            return [permissions.IsAuthenticated()]
        return [permissions.AllowAny()]

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return Comment.objects.none()
        return visible_comments(self.kwargs["lettering_id"])

    def create(self, request, lettering_id=None):
        s = CommentIn(data=request.data)
        s.is_valid(raise_exception=True)
        comment = add_comment(lettering_id, request.user, s.validated_data.get("content"), request=request)
        return Response(CommentOut(comment).data, status=status.HTTP_201_CREATED)


@extend_schema_view(
    list=extend_schema(
        tags=["Admin"],
        summary="댓글 모더레이션 목록",
        description=(
            "- `status`: ALL(기본) | VISIBLE | HIDDEN\n"
            "- `q`: 내용, 작성자 표시 이름/이메일 부분 일치\n"
            "- `needs_review`, `min_score` 필터\n"
            "- `sort`: priority(기본: 검토 우선순위, 자동 플래그, 점수, 최신순) | newest | score\n"
            "- **limit**: 1~200 (기본 50)"
        ),
        operation_id="admin_comments_list",
        parameters=[
            OpenApiParameter(name="status", location=OpenApiParameter.QUERY, type=OpenApiTypes.STR, required=False, enum=["ALL", "VISIBLE", "HIDDEN"]),
            OpenApiParameter(name="q", location=OpenApiParameter.QUERY, type=OpenApiTypes.STR, required=False),
            OpenApiParameter(name="needs_review", location=OpenApiParameter.QUERY, type=OpenApiTypes.BOOL, required=False),
            OpenApiParameter(name="min_score", location=OpenApiParameter.QUERY, type=OpenApiTypes.INT, required=False),
            OpenApiParameter(name="sort", location=OpenApiParameter.QUERY, type=OpenApiTypes.STR, required=False, enum=["priority", "newest", "score"]),
        ],
        responses={200: OpenApiResponse(response=AdminCommentOut(many=True)), 400: OpenApiResponse(response=ErrorOut), 401: OpenApiResponse(response=ErrorOut), 403: OpenApiResponse(response=ErrorOut)},
    ),
    destroy=extend_schema(
        tags=["Admin"],
        summary="댓글 삭제",
        operation_id="admin_comments_destroy",
        parameters=[COMMENT_PATH],
        responses={204: OpenApiResponse(description="삭제 완료"), 401: OpenApiResponse(response=ErrorOut), 403: OpenApiResponse(response=ErrorOut), 404: OpenApiResponse(response=ErrorOut)},
    ),
)
class AdminCommentViewSet(mixins.ListModelMixin, mixins.DestroyModelMixin, viewsets.GenericViewSet):
    permission_classes = [permissions.IsAdminUser]
    serializer_class = AdminCommentOut
    pagination_class = AdminPagination
    lookup_field = "id"
    lookup_value_regex = "[0-9a-f-]{36}"

    def get_queryset(self):
        params = self.request.query_params
        return admin_comment_queryset(
            status=params.get("status"),
            q=params.get("q"),
            needs_review=params.get("needs_review"),
            min_score=params.get("min_score"),
            sort=params.get("sort"),
        )

    def destroy(self, request, id=None):
        delete_comment(id, admin=request.user, reason=request.data.get("reason"), request=request)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        tags=["Admin"],
        summary="댓글 숨김",
        description="사유 미지정 시 `Hidden by moderation`. 작성자에게 `COMMENT_HIDDEN` 알림이 전송됩니다.",
        operation_id="admin_comments_hide",
        parameters=[COMMENT_PATH],
        request=ReasonIn,
        responses={200: OpenApiResponse(response=AdminCommentOut), 401: OpenApiResponse(response=ErrorOut), 403: OpenApiResponse(response=ErrorOut), 404: OpenApiResponse(response=ErrorOut)},
    )
    @action(detail=True, methods=["post"], url_path="hide")
    def hide(self, request, id=None):
        comment = hide_comment(id, admin=request.user, reason=request.data.get("reason"), request=request)
        return Response(AdminCommentOut(comment).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["Admin"],
        summary="댓글 복구",
        operation_id="admin_comments_restore",
        parameters=[COMMENT_PATH],
        request=None,
        responses={200: OpenApiResponse(response=AdminCommentOut), 401: OpenApiResponse(response=ErrorOut), 403: OpenApiResponse(response=ErrorOut), 404: OpenApiResponse(response=ErrorOut)},
    )
    @action(detail=True, methods=["post"], url_path="restore")
    def restore(self, request, id=None):
        comment = restore_comment(id, admin=request.user, request=request)
        return Response(AdminCommentOut(comment).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["Admin"],
        summary="댓글 일괄 처리",
        description="`action`: hide | restore | delete. 항목별로 독립 처리되며 실패 항목은 `failed_items`에 모입니다. 최대 200개.",
        operation_id="admin_comments_bulk",
        request=BulkActionIn,
        responses={200: OpenApiResponse(response=BulkActionOut), 400: OpenApiResponse(response=ErrorOut), 401: OpenApiResponse(response=ErrorOut), 403: OpenApiResponse(response=ErrorOut)},
        examples=[OpenApiExample("요청 예시", value={"ids": ["11111111-1111-1111-1111-111111111111"], "action": "hide", "reason": "Spam"}, request_only=True)],
    )
    @action(detail=False, methods=["post"], url_path="bulk")
    def bulk(self, request):
        ids = request.data.get("ids") or []
        if not isinstance(ids, list):
            ids = [ids]
        result = bulk_moderate_comments(ids, request.data.get("action"), admin=request.user, reason=request.data.get("reason"), request=request)
        return Response(result, status=status.HTTP_200_OK)
