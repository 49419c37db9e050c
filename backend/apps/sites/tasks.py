# apps/sites/tasks.py

import logging

from celery import shared_task
from celery.exceptions import SoftTimeLimitExceeded

from apps.common.collaborators import get_content_fetcher
from apps.common.exceptions import TransientError
from apps.common.locks import sweep_lock
from apps.common.retry import backoff_countdown, retries_exhausted
from apps.qualification.models import calculate_page_budget

from .selectors import get_site_by_id, get_sites_due_for_crawl
from .services import begin_crawl, complete_crawl, expire_stale_crawls, fail_crawl

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=2, soft_time_limit=10 * 60)
def crawl_site(self, site_id: int) -> dict:
    """
    Crawl one site and hand the snapshot to extraction and evaluation.

    A site already being crawled by another worker is skipped. Transient
    fetch errors leave the site ``failed`` and are retried with backoff;
    each retry claims the site again from ``failed``.
    """
    from apps.contacts.tasks import extract_contacts
    from apps.qualification.tasks import evaluate_site

    site = get_site_by_id(site_id)
    if not site:
        logger.error(f"Site {site_id} not found")
        return {"error": f"Site {site_id} not found"}

    if not begin_crawl(site.id):
        return {"site_id": site.id, "skipped": True}

    site.refresh_from_db()
    budget = calculate_page_budget()
    logger.info(f"Crawling {site.domain} (attempt {site.crawl_attempts}, budget {budget} pages)")

    try:
        pages = get_content_fetcher().fetch(site.domain, budget)
        if not pages:
            raise TransientError(f"No pages fetched from {site.domain}")
    except (TransientError, SoftTimeLimitExceeded) as e:
        reason = "Crawl timed out" if isinstance(e, SoftTimeLimitExceeded) else str(e)
        fail_crawl(site, reason)
        if retries_exhausted(self):
            logger.error(f"Giving up on {site.domain} after {site.crawl_attempts} attempt(s): {reason}")
            return {"site_id": site.id, "status": site.status, "error": reason}
        raise self.retry(countdown=backoff_countdown(self.request.retries))
    except Exception as e:
        logger.exception(f"Unexpected error crawling {site.domain}")
        fail_crawl(site, f"Crawl error: {e}")
        return {"site_id": site.id, "status": site.status, "error": str(e)}

    if not complete_crawl(site, pages):
        return {"site_id": site.id, "skipped": True}

    # Independent hand-offs; each is idempotent on the stored snapshot
    extract_contacts.delay(site.id)
    evaluate_site.delay(site.id)

    return {
        "site_id": site.id,
        "status": site.status,
        "page_count": site.page_count,
        "word_count": site.word_count,
        "platform": site.detected_platform,
    }


@shared_task
def dispatch_crawl_batch(limit: int = 100) -> dict:
    """
    Queue crawls for pending sites and failed sites with attempts left.
    Overlapping runs skip instead of double-queueing.
    """
    with sweep_lock("crawl-batch") as acquired:
        if not acquired:
            return {"skipped": True}

        expired = expire_stale_crawls()
        site_ids = list(get_sites_due_for_crawl(limit).values_list("id", flat=True))
        for site_id in site_ids:
            crawl_site.delay(site_id)

    summary = {"queued": len(site_ids), "expired": expired}
    logger.info(f"Crawl batch dispatched: {summary}")
    return summary
