from collections import OrderedDict

from rest_framework.pagination import LimitOffsetPagination
from rest_framework.response import Response


def clamp_int(raw, default: int, lo: int, hi: int | None = None) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    value = max(lo, value)
    return min(value, hi) if hi is not None else value


class EnvelopePagination(LimitOffsetPagination):
    """
    limit/offset 페이지네이션. 응답 형식: {items, total, limit, offset}
    - limit은 [1, max_limit]로 클램프, offset은 0 이상
    """

    default_limit = 20
    max_limit = 100

    def get_limit(self, request):
        return clamp_int(request.query_params.get(self.limit_query_param), self.default_limit, 1, self.max_limit)

    def get_offset(self, request):
        return clamp_int(request.query_params.get(self.offset_query_param), 0, 0)

    def get_paginated_response(self, data):
        return Response(OrderedDict([("items", data), ("total", self.count), ("limit", self.limit), ("offset", self.offset)]))

    def get_paginated_response_schema(self, schema):
        return {
            "type": "object",
            "required": ["items", "total", "limit", "offset"],
            "properties": {
                "items": schema,
                "total": {"type": "integer"},
                "limit": {"type": "integer"},
                "offset": {"type": "integer"},
            },
        }


class AdminPagination(EnvelopePagination):
    default_limit = 50
    max_limit = 200


class RegionPolicyPagination(EnvelopePagination):
    default_limit = 200
    max_limit = 500
