from drf_spectacular.utils import OpenApiExample, OpenApiParameter, OpenApiResponse, OpenApiTypes, extend_schema, extend_schema_view
from rest_framework import mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from common.pagination import EnvelopePagination
from common.schema import ErrorOut

from .serializers import CollectionDetailOut, CollectionIn, CollectionOut, LeaderboardEntryOut
from .services import (
    add_collection_item,
    collection_letterings,
    create_collection,
    get_visible_collection,
    public_collections,
    remove_collection_item,
    top_contributors,
)

COLLECTION_ID = OpenApiParameter(name="id", location=OpenApiParameter.PATH, type=OpenApiTypes.UUID, description="컬렉션 ID")
LETTERING_ID = OpenApiParameter(name="lettering_id", location=OpenApiParameter.PATH, type=OpenApiTypes.UUID, description="레터링 ID")


@extend_schema_view(
    list=extend_schema(
        tags=["Community"],
        summary="공개 컬렉션 목록",
        description="공개 컬렉션을 최신순으로 반환합니다. 각 항목에 `item_count`가 포함됩니다.",
        operation_id="collections_list",
        responses={200: OpenApiResponse(response=CollectionOut(many=True))},
    ),
    retrieve=extend_schema(
        tags=["Community"],
        summary="컬렉션 상세",
        description="공개 컬렉션 또는 본인 컬렉션을 조회합니다. 노출 가능한 레터링만 최신순으로 포함됩니다.",
        operation_id="collections_retrieve",
        parameters=[COLLECTION_ID],
        responses={200: OpenApiResponse(response=CollectionDetailOut), 404: OpenApiResponse(response=ErrorOut)},
    ),
    create=extend_schema(
        tags=["Community"],
        summary="컬렉션 생성",
        description="로그인한 사용자가 컬렉션을 만듭니다. `creator_tag`가 없으면 표시 이름을 사용합니다.",
        operation_id="collections_create",
        request=CollectionIn,
        responses={201: OpenApiResponse(response=CollectionOut), 400: OpenApiResponse(response=ErrorOut), 401: OpenApiResponse(response=ErrorOut)},
        examples=[OpenApiExample("요청 예시", value={"name": "Hand-painted shop signs", "description": "Old Seoul signage", "creator_tag": "walker"}, request_only=True)],
    ),
)
class CollectionViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, mixins.CreateModelMixin, viewsets.GenericViewSet):
    serializer_class = CollectionOut
    pagination_class = EnvelopePagination
    lookup_value_regex = "[0-9a-f-]{36}"

    def get_permissions(self):
        if self.action in ("list", "retrieve"):
            return [permissions.AllowAny()]
        return [permissions.IsAuthenticated()]

    def get_queryset(self):
        return public_collections()

    def create(self, request, *args, **kwargs):
        s = CollectionIn(data=request.data)
        s.is_valid(raise_exception=True)
        collection = create_collection(user=request.user, **s.validated_data)
        return Response(CollectionOut(collection).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        collection = get_visible_collection(pk, request.user)
        collection.visible_letterings = list(collection_letterings(collection))
        return Response(CollectionDetailOut(collection, context={"user": request.user}).data)

    @extend_schema(
        tags=["Community"],
        summary="컬렉션 항목 추가/삭제",
        description=(
            "본인 컬렉션에 레터링을 추가(POST)하거나 제거(DELETE)합니다.\n\n"
            "- 추가는 멱등이며 이미 있는 항목도 201을 반환합니다.\n"
            "- 노출 불가능한 레터링은 404 `Lettering not found`."
        ),
        operation_id="collections_items",
        parameters=[COLLECTION_ID, LETTERING_ID],
        request=None,
        responses={
            201: OpenApiResponse(response=CollectionOut),
            204: OpenApiResponse(description="삭제됨"),
            401: OpenApiResponse(response=ErrorOut),
            403: OpenApiResponse(response=ErrorOut),
            404: OpenApiResponse(response=ErrorOut),
        },
    )
    @action(detail=True, methods=["post", "delete"], url_path=r"items/(?P<lettering_id>[0-9a-f-]{36})")
    def items(self, request, pk=None, lettering_id=None):
        if request.method == "DELETE":
            remove_collection_item(pk, lettering_id, request.user)
            return Response(status=status.HTTP_204_NO_CONTENT)
        add_collection_item(pk, lettering_id, request.user)
        return Response(CollectionOut(get_visible_collection(pk, request.user)).data, status=status.HTTP_201_CREATED)


class CommunityViewSet(viewsets.GenericViewSet):
    permission_classes = [permissions.AllowAny]
    serializer_class = LeaderboardEntryOut

    @extend_schema(
        tags=["Community"],
        summary="기여자 리더보드",
        description="노출 가능한 레터링 수 기준 상위 50명의 기여자 태그를 반환합니다. 동률이면 좋아요 합계가 큰 순서입니다.",
        operation_id="community_leaderboard",
        responses={200: OpenApiResponse(response=LeaderboardEntryOut(many=True))},
        examples=[OpenApiExample("응답 예시", value=[{"tag": "walker", "count": 12, "total_likes": 40}], response_only=True)],
    )
    @action(detail=False, methods=["get"], url_path="leaderboard")
    def leaderboard(self, request):
        return Response(LeaderboardEntryOut(top_contributors(), many=True).data)
