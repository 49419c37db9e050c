# apps/blocklist/urls.py

from rest_framework.routers import SimpleRouter

from .views import BlockEntryViewSet

router = SimpleRouter()
router.register(r"entries", BlockEntryViewSet, basename="blockentry")

urlpatterns = router.urls
