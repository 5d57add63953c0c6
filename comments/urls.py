from rest_framework.routers import SimpleRouter

from .views import AdminCommentViewSet, LetteringCommentViewSet

router = SimpleRouter()
router.register(r"letterings/(?P<lettering_id>[0-9a-f-]{36})/comments", LetteringCommentViewSet, basename="lettering-comments")
router.register(r"admin/comments", AdminCommentViewSet, basename="admin-comments")

urlpatterns = router.urls
