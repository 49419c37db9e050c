# apps/api/urls_v1.py

from django.urls import path, include

urlpatterns = [
    path("", include("apps.sites.urls")),
    path("", include("apps.outreach.urls")),
    path("blocklist/", include("apps.blocklist.urls")),
]
