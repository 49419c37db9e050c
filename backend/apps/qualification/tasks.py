# apps/qualification/tasks.py

import logging

from celery import shared_task

from apps.common.enums import SiteStatus
from apps.sites.selectors import get_site_by_id

from .services import evaluate_site as run_evaluation

logger = logging.getLogger(__name__)


@shared_task(soft_time_limit=120)
def evaluate_site(site_id: int) -> dict:
    """
    Evaluate a crawled site against the active requirement sets and, when
    it qualifies, queue review-item creation for it.
    """
    from apps.outreach.tasks import create_review_items_for_site

    site = get_site_by_id(site_id)
    if not site:
        logger.error(f"Site {site_id} not found")
        return {"error": f"Site {site_id} not found"}

    if site.status not in (SiteStatus.COMPLETED, SiteStatus.PER_REVIEW) or not site.has_snapshot:
        logger.warning(f"Site {site_id} has no completed crawl, skipping evaluation")
        return {"site_id": site_id, "skipped": True}

    site = run_evaluation(site)

    if site.is_qualified:
        create_review_items_for_site.delay(site.id)

    return {
        "site_id": site.id,
        "qualified": site.is_qualified,
        "matched_requirement": site.matched_requirement_id,
    }
