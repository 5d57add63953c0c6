from drf_spectacular.utils import OpenApiExample, OpenApiParameter, OpenApiResponse, OpenApiTypes, extend_schema, extend_schema_view
from rest_framework import mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.response import Response

from common.pagination import EnvelopePagination, RegionPolicyPagination
from common.schema import ErrorOut
from letterings.serializers import PinCodeStatOut
from letterings.services import city_pin_code_stats

from .models import City, RegionPolicy
from .serializers import CityIn, CityOut, RegionPolicyIn, RegionPolicyOut
from .services import create_city, normalize_country_code, upsert_region_policy


@extend_schema_view(
    list=extend_schema(
        tags=["Cities"],
        summary="도시 목록",
        description="활성화된 도시 목록을 이름순으로 반환합니다. `country_code`, `q`(이름 부분 일치)로 필터링할 수 있습니다.",
        operation_id="cities_list",
        parameters=[
            OpenApiParameter(name="country_code", location=OpenApiParameter.QUERY, type=OpenApiTypes.STR, required=False),
            OpenApiParameter(name="q", location=OpenApiParameter.QUERY, type=OpenApiTypes.STR, required=False),
        ],
        responses={200: OpenApiResponse(response=CityOut(many=True))},
    ),
    retrieve=extend_schema(
        tags=["Cities"],
        summary="도시 상세",
        operation_id="cities_retrieve",
        responses={200: OpenApiResponse(response=CityOut), 404: OpenApiResponse(response=ErrorOut)},
    ),
)
class CityViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    permission_classes = [permissions.AllowAny]
    serializer_class = CityOut
    pagination_class = EnvelopePagination
    lookup_value_regex = "[0-9a-f-]{36}"

    def get_queryset(self):
        qs = City.objects.filter(is_active=True).order_by("name")
        country_code = (self.request.query_params.get("country_code") or "").strip().upper()
        q = (self.request.query_params.get("q") or "").strip()
        if country_code:
            qs = qs.filter(country_code=country_code)
        if q:
            qs = qs.filter(name__icontains=q)
        return qs

    def get_object(self):
        city = self.get_queryset().filter(pk=self.kwargs["pk"]).first()
        if city is None:
            raise NotFound("City not found")
        return city

    @extend_schema(
        tags=["Cities"],
        summary="도시 핀 코드 통계",
        description="도시의 노출 가능한 레터링을 핀 코드별로 집계해 개수 내림차순으로 반환합니다.",
        operation_id="cities_stats",
        responses={200: OpenApiResponse(response=PinCodeStatOut(many=True)), 404: OpenApiResponse(response=ErrorOut)},
        examples=[OpenApiExample("응답 예시", value=[{"pin_code": "110011", "count": 4}], response_only=True)],
    )
    @action(detail=True, methods=["get"], url_path="stats")
    def stats(self, request, pk=None):
        city = self.get_object()
        return Response(PinCodeStatOut(city_pin_code_stats(city.pk), many=True).data)


class AdminCityViewSet(viewsets.GenericViewSet):
    permission_classes = [permissions.IsAdminUser]
    serializer_class = CityIn

    @extend_schema(
        tags=["Admin"],
        summary="도시 생성",
        description="관리자가 도시를 추가합니다. (name, country_code) 조합은 유일해야 하며 `CREATE_CITY` 감사 로그가 남습니다.",
        operation_id="admin_cities_create",
        request=CityIn,
        responses={201: OpenApiResponse(response=CityOut), 400: OpenApiResponse(response=ErrorOut), 401: OpenApiResponse(response=ErrorOut), 403: OpenApiResponse(response=ErrorOut)},
        examples=[OpenApiExample("요청 예시", value={"name": "Seoul", "country_code": "KR", "center_lat": 37.5665, "center_lng": 126.978}, request_only=True)],
    )
    def create(self, request):
        s = CityIn(data=request.data)
        s.is_valid(raise_exception=True)
        city = create_city(**s.validated_data, user=request.user, request=request)
        return Response(CityOut(city).data, status=status.HTTP_201_CREATED)


@extend_schema_view(
    list=extend_schema(
        tags=["Admin"],
        summary="지역 정책 목록",
        description=(
            "국가별 지역 정책을 국가 코드순으로 조회합니다.\n\n"
            "- 정책 행이 없는 국가는 업로드/댓글/노출이 모두 허용됩니다.\n"
            "- **limit**: 1~500 (기본 200), **offset**: 0 이상"
        ),
        operation_id="admin_region_policies_list",
        parameters=[OpenApiParameter(name="country_code", location=OpenApiParameter.QUERY, type=OpenApiTypes.STR, required=False, description="2자리 ISO 국가 코드")],
        responses={200: OpenApiResponse(response=RegionPolicyOut(many=True)), 400: OpenApiResponse(response=ErrorOut), 401: OpenApiResponse(response=ErrorOut), 403: OpenApiResponse(response=ErrorOut)},
    ),
    update=extend_schema(
        tags=["Admin"],
        summary="지역 정책 생성/수정",
        description="전달된 필드만 갱신합니다. 결과 스냅샷이 `UPSERT_REGION_POLICY` 감사 로그 metadata에 남습니다.",
        operation_id="admin_region_policies_upsert",
        parameters=[OpenApiParameter(name="country_code", location=OpenApiParameter.PATH, type=OpenApiTypes.STR, description="2자리 ISO 국가 코드")],
        request=RegionPolicyIn,
        responses={200: OpenApiResponse(response=RegionPolicyOut), 400: OpenApiResponse(response=ErrorOut), 401: OpenApiResponse(response=ErrorOut), 403: OpenApiResponse(response=ErrorOut)},
        examples=[OpenApiExample("요청 예시", value={"comments_enabled": False, "auto_moderation_level": "strict"}, request_only=True)],
    ),
)
class AdminRegionPolicyViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    permission_classes = [permissions.IsAdminUser]
    serializer_class = RegionPolicyOut
    pagination_class = RegionPolicyPagination
    lookup_field = "country_code"

    def get_queryset(self):
        qs = RegionPolicy.objects.all().order_by("country_code")
        raw = self.request.query_params.get("country_code")
        if raw:
            qs = qs.filter(country_code=normalize_country_code(raw))
        return qs

    def update(self, request, country_code=None):
        s = RegionPolicyIn(data=request.data)
        s.is_valid(raise_exception=True)
        policy = upsert_region_policy(country_code, user=request.user, request=request, **s.validated_data)
        return Response(RegionPolicyOut(policy).data, status=status.HTTP_200_OK)
