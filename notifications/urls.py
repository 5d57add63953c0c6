from rest_framework.routers import DefaultRouter

from .views import NotificationViewSet

router = DefaultRouter()
router.register(r"me/notifications", NotificationViewSet, basename="me-notification")

urlpatterns = router.urls
