import uuid

from django.db.models import QuerySet
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, OpenApiTypes, extend_schema, extend_schema_view
from rest_framework import mixins, permissions, viewsets
from rest_framework.exceptions import ValidationError

from common.pagination import AdminPagination
from common.schema import ErrorOut

from .models import AuditAction, AuditLog
from .serializers import AuditLogOut


@extend_schema_view(
    list=extend_schema(
        tags=["Admin"],
        summary="감사 로그 조회",
        description=(
            "관리자 조치 감사(Audit) 로그를 최신순으로 조회합니다.\n\n"
            "- **Filters**: `action`(대소문자 무관), `country_code`(metadata.country_code 일치), `lettering_id`\n"
            "- **limit**: 1~200 (기본 50), **offset**: 0 이상"
        ),
        operation_id="admin_audit_logs_list",
        parameters=[
            OpenApiParameter(name="action", location=OpenApiParameter.QUERY, type=OpenApiTypes.STR, required=False, enum=[c[0] for c in AuditAction.choices], description="감사 액션 코드"),
            OpenApiParameter(name="country_code", location=OpenApiParameter.QUERY, type=OpenApiTypes.STR, required=False, description="예) KR, US"),
            OpenApiParameter(name="lettering_id", location=OpenApiParameter.QUERY, type=OpenApiTypes.UUID, required=False),
        ],
        responses={200: OpenApiResponse(response=AuditLogOut(many=True)), 400: OpenApiResponse(response=ErrorOut), 401: OpenApiResponse(response=ErrorOut), 403: OpenApiResponse(response=ErrorOut)},
    )
)
class AuditLogViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    permission_classes = [permissions.IsAdminUser]
    serializer_class = AuditLogOut
    pagination_class = AdminPagination

    def get_queryset(self) -> QuerySet:
        qs = AuditLog.objects.all().order_by("-created_at")
        params = self.request.query_params

        action = (params.get("action") or "").strip().upper()
        country_code = (params.get("country_code") or "").strip().upper()
        lettering_id = (params.get("lettering_id") or "").strip()

        if action:
            qs = qs.filter(action=action)
        if country_code:
            qs = qs.filter(metadata__country_code=country_code)
        if lettering_id:
            try:
                qs = qs.filter(lettering_id=uuid.UUID(lettering_id))
            except ValueError:
                raise ValidationError("lettering_id must be a valid UUID")
        return qs
