from rest_framework.routers import DefaultRouter

from .views import CollectionViewSet, CommunityViewSet

router = DefaultRouter()
router.register(r"collections", CollectionViewSet, basename="collection")
router.register(r"community", CommunityViewSet, basename="community")

urlpatterns = router.urls
