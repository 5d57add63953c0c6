import uuid

from django.db.models import Q
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, OpenApiResponse, OpenApiTypes, extend_schema, extend_schema_view
from rest_framework import mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotAuthenticated, NotFound, ValidationError
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.response import Response

from common.pagination import EnvelopePagination, clamp_int
from common.schema import ErrorOut, LikeOut

from .models import Lettering
from .serializers import (
    ContributorOut,
    LetteringDetailOut,
    LetteringOut,
    LetteringUpdateIn,
    LetteringUploadIn,
    LetteringUploadOut,
    MetadataHistoryOut,
    MyLetteringOut,
    ReportIn,
    RevisitIn,
    RevisitListOut,
    RevisitOut,
    StatusHistoryOut,
    TimelineOut,
)
from .services import (
    contributor_letterings,
    discoverable_letterings,
    lettering_timeline,
    link_revisit,
    my_letterings,
    report_lettering,
    revisits_for,
    toggle_like,
    update_my_lettering,
    upload_lettering,
)

UUID_PATH = OpenApiParameter(name="id", location=OpenApiParameter.PATH, type=OpenApiTypes.UUID, description="레터링 ID")


@extend_schema_view(
    list=extend_schema(
        tags=["Letterings"],
        summary="갤러리(공개 목록)",
        description=(
            "승인(APPROVED)되었고 지역 정책상 노출이 허용된 레터링을 최신순으로 반환합니다.\n\n"
            "- `city_id`: 도시 필터\n"
            "- `q`: 검출 텍스트/설명/기여자 태그 부분 일치\n"
            "- **limit**: 1~100 (기본 20), **offset**: 0 이상"
        ),
        operation_id="letterings_list",
        parameters=[
            OpenApiParameter(name="city_id", location=OpenApiParameter.QUERY, type=OpenApiTypes.UUID, required=False),
            OpenApiParameter(name="q", location=OpenApiParameter.QUERY, type=OpenApiTypes.STR, required=False),
        ],
        responses={200: OpenApiResponse(response=LetteringOut(many=True))},
    ),
    retrieve=extend_schema(
        tags=["Letterings"],
        summary="레터링 상세",
        description="공개된 레터링 또는 본인 업로드를 조회합니다. `is_owner`가 포함됩니다.",
        operation_id="letterings_retrieve",
        parameters=[UUID_PATH],
        responses={200: OpenApiResponse(response=LetteringDetailOut), 404: OpenApiResponse(response=ErrorOut)},
    ),
)
class LetteringViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    permission_classes = [permissions.AllowAny]
    serializer_class = LetteringOut
    pagination_class = EnvelopePagination
    lookup_field = "id"
    lookup_value_regex = "[0-9a-f-]{36}"

    def get_queryset(self):
        qs = discoverable_letterings().order_by("-created_at")
        if self.action != "list":
            return qs
        city_id = (self.request.query_params.get("city_id") or "").strip()
        q = (self.request.query_params.get("q") or "").strip()
        if city_id:
            try:
                qs = qs.filter(city_id=uuid.UUID(city_id))
            except ValueError:
                raise ValidationError("city_id must be a valid UUID")
        if q:
            qs = qs.filter(Q(detected_text__icontains=q) | Q(description__icontains=q) | Q(contributor_tag__icontains=q))
        return qs

    def retrieve(self, request, id=None):
        lettering = self.get_queryset().filter(pk=id).first()
        if lettering is None and request.user.is_authenticated:
            lettering = Lettering.objects.select_related("city").filter(pk=id, user=request.user).first()
        if lettering is None:
            raise NotFound("Lettering not found")
        return Response(LetteringDetailOut(lettering, context={"request": request}).data)

    @extend_schema(
        tags=["Letterings"],
        summary="레터링 업로드",
        description=(
            "multipart 업로드. 이미지를 오브젝트 스토리지에 저장하고 PENDING 상태로 생성합니다.\n\n"
            "- ML 처리가 켜져 있으면 `ml_jobs` 큐에 작업을 넣고 `processing`을 반환\n"
            "- ML이 꺼져 있거나 큐 적재에 실패하면 즉시 자동 승인되고 `approved`를 반환\n"
            "- 지역 정책상 업로드가 금지된 국가는 403\n"
            "- 클라이언트 IP당 시간당 업로드 수 제한(429)"
        ),
        operation_id="letterings_upload",
        request={"multipart/form-data": LetteringUploadIn},
        responses={
            201: OpenApiResponse(response=LetteringUploadOut),
            400: OpenApiResponse(response=ErrorOut),
            403: OpenApiResponse(response=ErrorOut, description="Uploads are disabled for this region"),
            429: OpenApiResponse(response=ErrorOut),
        },
    )
    @action(detail=False, methods=["post"], url_path="upload", parser_classes=[MultiPartParser, FormParser])
    def upload(self, request):
        s = LetteringUploadIn(data=request.data)
        s.is_valid(raise_exception=True)
        v = s.validated_data
        lettering, queued = upload_lettering(
            image=v["image"],
            city_id=v["city_id"],
            contributor_tag=v["contributor_tag"],
            pin_code=v["pin_code"],
            description=v.get("description", ""),
            latitude=v.get("latitude"),
            longitude=v.get("longitude"),
            user=request.user,
            request=request,
        )
        body = {"id": str(lettering.id), "status": "processing" if queued else "approved"}
        if queued:
            body["message"] = "Upload received. Processing will finish shortly."
        return Response(body, status=status.HTTP_201_CREATED)

    @extend_schema(
        tags=["Letterings"],
        summary="레터링 신고",
        description="신고 사유를 누적합니다. 누적 신고 수가 임계값(기본 3) 이상이면 REPORTED로 전이됩니다.",
        operation_id="letterings_report",
        parameters=[UUID_PATH],
        request=ReportIn,
        responses={200: OpenApiResponse(response=LetteringOut), 400: OpenApiResponse(response=ErrorOut), 404: OpenApiResponse(response=ErrorOut)},
        examples=[OpenApiExample("요청 예시", value={"reason": "Contains personal information"}, request_only=True)],
    )
    @action(detail=True, methods=["post"], url_path="report")
    def report(self, request, id=None):
        s = ReportIn(data=request.data)
        s.is_valid(raise_exception=True)
        lettering = report_lettering(id, s.validated_data.get("reason"), user=request.user)
        return Response(LetteringOut(lettering).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["Letterings"],
        summary="좋아요 토글",
        description="클라이언트 IP 기준으로 좋아요를 켜거나 끕니다.",
        operation_id="letterings_like",
        parameters=[UUID_PATH],
        request=None,
        responses={200: OpenApiResponse(response=LikeOut), 404: OpenApiResponse(response=ErrorOut)},
    )
    @action(detail=True, methods=["post"], url_path="like")
    def like(self, request, id=None):
        liked, count = toggle_like(id, request)
        return Response({"liked": liked, "likes_count": count}, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["Letterings"],
        summary="재방문 목록/연결",
        description=(
            "같은 장소를 나중에 다시 찍은 레터링 쌍을 다룹니다.\n\n"
            "- GET: 이 레터링이 원본 또는 재방문인 연결을 최신순으로 반환\n"
            "- POST: 로그인 사용자가 본인 업로드를 이 레터링의 재방문으로 연결(멱등)"
        ),
        operation_id="letterings_revisits",
        parameters=[UUID_PATH],
        request=RevisitIn,
        responses={
            200: OpenApiResponse(response=RevisitListOut),
            201: OpenApiResponse(response=RevisitOut),
            400: OpenApiResponse(response=ErrorOut),
            401: OpenApiResponse(response=ErrorOut),
            403: OpenApiResponse(response=ErrorOut),
            404: OpenApiResponse(response=ErrorOut),
        },
        examples=[OpenApiExample("요청 예시", value={"revisit_lettering_id": "3f1c2a7e-8a51-4a44-9d0e-2b4f6f0c9a11", "notes": "Repainted in 2026"}, request_only=True)],
    )
    @action(detail=True, methods=["get", "post"], url_path="revisits")
    def revisits(self, request, id=None):
        if request.method == "GET":
            return Response({"revisits": RevisitOut(revisits_for(id), many=True).data})
        if not request.user.is_authenticated:
            raise NotAuthenticated()
        s = RevisitIn(data=request.data)
        s.is_valid(raise_exception=True)
        link = link_revisit(id, s.validated_data["revisit_lettering_id"], request.user, s.validated_data.get("notes"))
        return Response(RevisitOut(link).data, status=status.HTTP_201_CREATED)


class ContributorViewSet(viewsets.GenericViewSet):
    permission_classes = [permissions.AllowAny]
    serializer_class = ContributorOut
    lookup_field = "tag"
    lookup_value_regex = "[^/]+"

    @extend_schema(
        tags=["Letterings"],
        summary="기여자별 레터링",
        description="해당 기여자 태그의 노출 가능한 레터링을 최신순으로 반환합니다. **limit**: 1~100 (기본 50)",
        operation_id="contributors_retrieve",
        parameters=[
            OpenApiParameter(name="tag", location=OpenApiParameter.PATH, type=OpenApiTypes.STR, description="기여자 태그"),
            OpenApiParameter(name="limit", location=OpenApiParameter.QUERY, type=OpenApiTypes.INT, required=False),
            OpenApiParameter(name="offset", location=OpenApiParameter.QUERY, type=OpenApiTypes.INT, required=False),
        ],
        responses={200: OpenApiResponse(response=ContributorOut)},
    )
    def retrieve(self, request, tag=None):
        qs = contributor_letterings(tag)
        limit = clamp_int(request.query_params.get("limit"), 50, 1, 100)
        offset = clamp_int(request.query_params.get("offset"), 0, 0)
        return Response(
            {
                "contributor_tag": tag.strip(),
                "total_count": qs.count(),
                "letterings": LetteringOut(qs[offset : offset + limit], many=True).data,
            }
        )


@extend_schema_view(
    list=extend_schema(
        tags=["Me"],
        summary="내 업로드 목록",
        operation_id="me_letterings_list",
        parameters=[OpenApiParameter(name="status", location=OpenApiParameter.QUERY, type=OpenApiTypes.STR, required=False, enum=["PENDING", "APPROVED", "REJECTED", "REPORTED"])],
        responses={200: OpenApiResponse(response=MyLetteringOut(many=True)), 400: OpenApiResponse(response=ErrorOut), 401: OpenApiResponse(response=ErrorOut)},
    ),
)
class MyLetteringViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = MyLetteringOut
    pagination_class = EnvelopePagination
    lookup_field = "id"
    lookup_value_regex = "[0-9a-f-]{36}"

    def get_queryset(self):
        if getattr(self, "swagger_fake_view", False):
            return Lettering.objects.none()
        return my_letterings(self.request.user, self.request.query_params.get("status")).select_related("city")

    @extend_schema(
        tags=["Me"],
        summary="내 업로드 메타데이터 수정",
        description="`description`, `contributor_tag`, `pin_code` 중 전달된 필드만 수정합니다. 변경된 필드마다 메타데이터 이력이 1행씩 남습니다.",
        operation_id="me_letterings_update",
        parameters=[UUID_PATH],
        request=LetteringUpdateIn,
        responses={200: OpenApiResponse(response=MyLetteringOut), 400: OpenApiResponse(response=ErrorOut), 401: OpenApiResponse(response=ErrorOut), 403: OpenApiResponse(response=ErrorOut)},
        examples=[OpenApiExample("요청 예시", value={"description": "Hand-painted sign near the market"}, request_only=True)],
    )
    def partial_update(self, request, id=None):
        s = LetteringUpdateIn(data=request.data)
        s.is_valid(raise_exception=True)
        lettering = update_my_lettering(id, request.user, dict(s.validated_data))
        return Response(MyLetteringOut(lettering).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["Me"],
        summary="내 업로드 타임라인",
        description="상태 이력과 메타데이터 수정 이력을 각각 최신순으로 반환합니다.",
        operation_id="me_letterings_timeline",
        parameters=[UUID_PATH],
        responses={
            200: OpenApiResponse(response=TimelineOut),
            401: OpenApiResponse(response=ErrorOut),
            403: OpenApiResponse(response=ErrorOut),
        },
    )
    @action(detail=True, methods=["get"], url_path="timeline")
    def timeline(self, request, id=None):
        status_history, metadata_history = lettering_timeline(id, request.user)
        return Response(
            {
                "status_history": StatusHistoryOut(status_history, many=True).data,
                "metadata_history": MetadataHistoryOut(metadata_history, many=True).data,
            }
        )
