from rest_framework.routers import DefaultRouter

from .views import AdminLetteringViewSet, AdminStatsViewSet, ModerationViewSet

router = DefaultRouter()
router.register(r"admin/moderation", ModerationViewSet, basename="admin-moderation")
router.register(r"admin/letterings", AdminLetteringViewSet, basename="admin-letterings")
router.register(r"admin/stats", AdminStatsViewSet, basename="admin-stats")

urlpatterns = router.urls
