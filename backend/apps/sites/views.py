# apps/sites/views.py

from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.common.enums import SiteStatus
from apps.common.exceptions import PermanentError

from .models import Site
from .selectors import get_site_stats
from .serializers import IngestDomainsSerializer, SiteListSerializer, SiteSerializer
from .services import ingest_domains, mark_for_review, reset_crawl
from .tasks import crawl_site


class SiteViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    viewsets.GenericViewSet,
):
    queryset = Site.objects.select_related("matched_requirement").order_by("-created_at")

    def get_serializer_class(self):
        if self.action == "list":
            return SiteListSerializer
        return SiteSerializer

    def get_queryset(self):
        qs = super().get_queryset()
        site_status = self.request.query_params.get("status")
        if site_status:
            qs = qs.filter(status=site_status)
        qualified = self.request.query_params.get("qualified")
        if qualified is not None:
            qs = qs.filter(is_qualified=qualified.lower() in ("1", "true", "yes"))
        return qs

    @action(detail=False, methods=["post"])
    def ingest(self, request):
        serializer = IngestDomainsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return Response(ingest_domains(serializer.validated_data["domains"]), status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"])
    def crawl(self, request, pk=None):
        site = self.get_object()
        if site.status == SiteStatus.FAILED:
            site = reset_crawl(site)
        elif site.status != SiteStatus.PENDING:
            return Response(
                {"error": f"Site is {site.status}, only pending or failed sites can be crawled"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        result = crawl_site.delay(site.id)
        return Response({"message": "Crawl triggered", "task_id": result.id, "site": site.domain})

    @action(detail=True, methods=["post"], url_path="flag-for-review")
    def flag_for_review(self, request, pk=None):
        site = self.get_object()
        try:
            site = mark_for_review(site, request.user)
        except PermanentError as e:
            return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(SiteSerializer(site).data)

    @action(detail=False, methods=["get"])
    def stats(self, request):
        return Response(get_site_stats())
