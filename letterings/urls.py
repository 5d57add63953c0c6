from rest_framework.routers import DefaultRouter

from .views import ContributorViewSet, LetteringViewSet, MyLetteringViewSet

router = DefaultRouter()
router.register(r"letterings", LetteringViewSet, basename="lettering")
router.register(r"me/letterings", MyLetteringViewSet, basename="me-lettering")
router.register(r"contributors", ContributorViewSet, basename="contributor")

urlpatterns = router.urls
