# apps/outreach/tasks.py

import logging

from celery import shared_task

from apps.common.exceptions import PermanentError, TransientError
from apps.common.locks import sweep_lock
from apps.common.retry import backoff_countdown, retries_exhausted
from apps.sites.selectors import get_qualified_sites, get_site_by_id

from . import accounts, review
from .dispatch import dispatch_review_item, in_send_window, release_claim
from .errors import NoAccountAvailable
from .models import ReviewItem

logger = logging.getLogger(__name__)


@shared_task(soft_time_limit=2 * 60)
def create_review_items_for_site(site_id: int) -> dict:
    site = get_site_by_id(site_id)
    if not site:
        logger.error(f"Site {site_id} not found")
        return {"error": f"Site {site_id} not found"}
    return {"site_id": site.id, **review.create_review_items_for_site(site)}


@shared_task
def create_review_items(limit: int = 500) -> dict:
    """
    Sweep qualified sites that have a template bound and fill in any
    missing review items (e.g. contacts validated after qualification).
    """
    with sweep_lock("create-review-items") as acquired:
        if not acquired:
            return {"skipped": True}

        sites = get_qualified_sites().filter(email_template__isnull=False).order_by("evaluated_at")[:limit]
        created = 0
        checked = 0
        for site in sites:
            created += review.create_review_items_for_site(site)["created"]
            checked += 1

    logger.info(f"Review item sweep: {created} created across {checked} site(s)")
    return {"sites_checked": checked, "created": created}


@shared_task(bind=True, max_retries=3, soft_time_limit=2 * 60)
def send_review_item(self, item_id: int) -> dict:
    """
    Dispatch one approved review item.

    Policy failures are final. Transient failures (no account capacity,
    retryable transport errors) are retried with backoff; a retry may pick
    up the item a failed attempt left behind.
    """
    try:
        item = dispatch_review_item(item_id, allow_failed=self.request.retries > 0)
    except PermanentError as e:
        return {"item_id": item_id, "status": "not_sent", "reason": str(e)}
    except TransientError as e:
        if not e.retryable:
            return {"item_id": item_id, "status": "failed", "reason": str(e)}
        if retries_exhausted(self):
            logger.error(f"Giving up on review item {item_id}: {e}")
            if isinstance(e, NoAccountAvailable):
                item = ReviewItem.objects.filter(pk=item_id).first()
                if item:
                    release_claim(item, note=f"Not sent after retries: {e}")
            return {"item_id": item_id, "status": "gave_up", "reason": str(e)}
        raise self.retry(countdown=backoff_countdown(self.request.retries, base=5 * 60))

    if item is None:
        return {"item_id": item_id, "skipped": True}
    return {"item_id": item.id, "status": item.status, "account": item.send_account_id}


@shared_task
def dispatch_approved_items(batch_size: int = 10) -> dict:
    """Hand the next batch of approved items to the dispatcher."""
    if not in_send_window():
        logger.info("Outside sending window, not dispatching")
        return {"skipped": True, "reason": "outside_send_window"}

    with sweep_lock("dispatch-approved") as acquired:
        if not acquired:
            return {"skipped": True}

        items = review.select_dispatchable(batch_size)
        for item in items:
            send_review_item.delay(item.id)

    return {"queued": len(items)}


@shared_task
def reset_daily_send_counters() -> dict:
    return {"accounts_reset": accounts.reset_daily_counters()}


@shared_task
def disable_unhealthy_accounts() -> dict:
    disabled = accounts.disable_unhealthy()
    return {"disabled": disabled}


@shared_task
def cleanup_old_review_items(days: int = 90) -> dict:
    return {"deleted": review.cleanup_old_items(days)}
