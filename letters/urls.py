"""
URL configuration for the letters project.

Every app router is mounted under /api/v1/; the OpenAPI schema and its UIs live under /api/.
"""

from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView, SpectacularSwaggerView

urlpatterns = [
    path("api/v1/", include("core.urls")),
    path("api/v1/", include("regions.urls")),
    path("api/v1/", include("letterings.urls")),
    path("api/v1/", include("comments.urls")),
    path("api/v1/", include("moderation.urls")),
    path("api/v1/", include("audits.urls")),
    path("api/v1/", include("notifications.urls")),
    path("api/v1/", include("community.urls")),
    path("api/v1/", include("realtime.urls")),
    # OpenAPI schema & docs
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path("api/docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    path("api/redoc/", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
]
