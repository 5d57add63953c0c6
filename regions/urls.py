from rest_framework.routers import DefaultRouter

from .views import AdminCityViewSet, AdminRegionPolicyViewSet, CityViewSet

router = DefaultRouter()
router.register(r"cities", CityViewSet, basename="city")
router.register(r"admin/cities", AdminCityViewSet, basename="admin-city")
router.register(r"admin/region-policies", AdminRegionPolicyViewSet, basename="admin-region-policy")

urlpatterns = router.urls
