# apps/outreach/urls.py

from rest_framework.routers import SimpleRouter

from .views import ReviewItemViewSet, SendAccountViewSet

router = SimpleRouter()
router.register(r"review", ReviewItemViewSet, basename="reviewitem")
router.register(r"accounts", SendAccountViewSet, basename="sendaccount")

urlpatterns = router.urls
