# apps/sites/selectors.py

from datetime import timedelta
from typing import Optional

from django.conf import settings
from django.db.models import Count, Q, QuerySet
from django.utils import timezone

from apps.common.enums import SiteStatus

from .models import Site


def get_site_by_id(site_id: int) -> Optional[Site]:
    try:
        return Site.objects.get(id=site_id)
    except Site.DoesNotExist:
        return None


def get_site_by_domain(domain: str) -> Optional[Site]:
    return Site.objects.filter(domain=domain.strip().lower()).first()


def stale_crawl_cutoff():
    stale_after = getattr(settings, "LEADMAILER_CRAWL_STALE_AFTER", 30 * 60)
    return timezone.now() - timedelta(seconds=stale_after)


def get_sites_due_for_crawl(limit: int = 100) -> QuerySet[Site]:
    """
    Pending sites, failed sites with attempts left, and sites whose crawl
    claim has gone stale; oldest first.
    """
    max_attempts = getattr(settings, "LEADMAILER_MAX_CRAWL_ATTEMPTS", 3)
    return (
        Site.objects
        .filter(
            Q(status=SiteStatus.PENDING)
            | Q(status=SiteStatus.FAILED, crawl_attempts__lt=max_attempts)
            | Q(status=SiteStatus.CRAWLING, crawl_started_at__lt=stale_crawl_cutoff())
        )
        .order_by("crawl_attempts", "created_at")[:limit]
    )


def get_qualified_sites() -> QuerySet[Site]:
    return Site.objects.filter(is_qualified=True, status__in=[SiteStatus.COMPLETED, SiteStatus.PER_REVIEW])


def get_site_stats() -> dict:
    by_status = Site.objects.values("status").annotate(count=Count("id")).order_by("status")
    return {
        "total": Site.objects.count(),
        "qualified": Site.objects.filter(is_qualified=True).count(),
        "by_status": {row["status"]: row["count"] for row in by_status},
    }
