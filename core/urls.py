from rest_framework.routers import DefaultRouter

from .views import AdminAuthViewSet, AuthViewSet

router = DefaultRouter()
router.register(r"auth", AuthViewSet, basename="auth")
router.register(r"admin", AdminAuthViewSet, basename="admin-auth")

urlpatterns = router.urls
