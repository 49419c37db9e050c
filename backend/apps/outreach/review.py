# apps/outreach/review.py

"""
Review queue.

    pending -> approved -> sent | failed
            -> rejected

Decisions are conditional UPDATEs on ``status=pending``, so deciding an
already decided item changes nothing.
"""

import logging
from datetime import timedelta

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Count, Q
from django.utils import timezone

from apps.common.collaborators import get_template_renderer
from apps.common.enums import ReviewStatus
from apps.contacts.selectors import get_reachable_contacts

from .errors import ReviewError
from .models import ReviewItem
from .templating import build_context

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("subject", "body", "preheader")


def create_review_items_for_site(site) -> dict:
    """
    Render the site's template for its best reachable contacts and queue
    the messages for review. Existing (site, contact) pairs are left alone.
    """
    template = site.email_template
    if not site.is_qualified:
        return {"created": 0, "existing": 0, "skipped": "Site is not qualified"}
    if template is None or not template.is_active:
        return {"created": 0, "existing": 0, "skipped": "No active email template bound to site"}

    max_items = getattr(settings, "LEADMAILER_MAX_REVIEW_ITEMS_PER_SITE", 3)
    contacts = get_reachable_contacts(site, limit=max_items)
    if not contacts:
        return {"created": 0, "existing": 0, "skipped": "No valid contacts"}

    existing_pairs = set(ReviewItem.objects.filter(site=site).values_list("contact_id", flat=True))
    room = max(0, max_items - len(existing_pairs))
    renderer = get_template_renderer()
    created = 0
    existing = 0

    for contact in contacts:
        if contact.id in existing_pairs:
            existing += 1
            continue
        if created >= room:
            break

        message = renderer.render(template, build_context(site, contact))
        try:
            with transaction.atomic():
                _, was_created = ReviewItem.objects.get_or_create(
                    site=site,
                    contact=contact,
                    defaults={
                        "template": template,
                        "send_account": site.send_account,
                        "subject": message.subject[:500],
                        "body": message.body,
                        "preheader": message.preheader[:255],
                        "priority": contact.priority,
                    },
                )
        except IntegrityError:
            was_created = False

        if was_created:
            created += 1
        else:
            existing += 1

    logger.info(f"Review items for {site.domain}: {created} created, {existing} existing")
    return {"created": created, "existing": existing}


def _decide(queryset, status: str, actor, notes: str | None, extra: dict | None = None) -> int:
    if actor is None:
        raise ReviewError("A reviewer is required")
    now = timezone.now()
    fields = {"status": status, "reviewed_by": actor, "reviewed_at": now, "updated_at": now}
    if notes is not None:
        fields["review_notes"] = notes
    fields.update(extra or {})
    return queryset.filter(status=ReviewStatus.PENDING).update(**fields)


def approve(item: ReviewItem, actor, notes: str | None = None, modifications: dict | None = None) -> bool:
    """
    Approve a pending item, optionally with reviewer edits to the subject,
    body or preheader. Returns False when the item was not pending.
    """
    edits = {key: value for key, value in (modifications or {}).items() if key in EDITABLE_FIELDS}
    changed = _decide(ReviewItem.objects.filter(pk=item.pk), ReviewStatus.APPROVED, actor, notes, edits)
    item.refresh_from_db()
    if changed:
        logger.info(f"Review item {item.id} approved by {actor}")
    return bool(changed)


def reject(item: ReviewItem, actor, notes: str | None = None) -> bool:
    changed = _decide(ReviewItem.objects.filter(pk=item.pk), ReviewStatus.REJECTED, actor, notes)
    item.refresh_from_db()
    if changed:
        logger.info(f"Review item {item.id} rejected by {actor}")
    return bool(changed)


def bulk_approve(item_ids, actor, notes: str | None = None) -> int:
    """Approve the pending items among ``item_ids``; others are skipped."""
    return _decide(ReviewItem.objects.filter(pk__in=list(item_ids)), ReviewStatus.APPROVED, actor, notes)


def bulk_reject(item_ids, actor, notes: str | None = None) -> int:
    return _decide(ReviewItem.objects.filter(pk__in=list(item_ids)), ReviewStatus.REJECTED, actor, notes)


def requeue(item: ReviewItem) -> bool:
    """Send a rejected or failed item back to pending review."""
    changed = ReviewItem.objects.filter(
        pk=item.pk,
        status__in=[ReviewStatus.REJECTED, ReviewStatus.FAILED],
    ).update(
        status=ReviewStatus.PENDING,
        reviewed_by=None,
        reviewed_at=None,
        failure_reason="",
        claimed_at=None,
        updated_at=timezone.now(),
    )
    item.refresh_from_db()
    return bool(changed)


def claim_cutoff():
    timeout = getattr(settings, "LEADMAILER_DISPATCH_CLAIM_TIMEOUT", 10 * 60)
    return timezone.now() - timedelta(seconds=timeout)


def select_dispatchable(batch_size: int = 10) -> list[ReviewItem]:
    """Approved items not held by a dispatcher, by priority then age."""
    return list(
        ReviewItem.objects
        .filter(status=ReviewStatus.APPROVED)
        .filter(Q(claimed_at__isnull=True) | Q(claimed_at__lt=claim_cutoff()))
        .order_by("-priority", "created_at", "id")[:batch_size]
    )


def cleanup_old_items(days: int = 90) -> int:
    """Delete decided items older than ``days``. Pending and approved items are kept."""
    cutoff = timezone.now() - timedelta(days=days)
    deleted, _ = ReviewItem.objects.filter(
        status__in=[ReviewStatus.REJECTED, ReviewStatus.SENT, ReviewStatus.FAILED],
        updated_at__lt=cutoff,
    ).delete()
    if deleted:
        logger.info(f"Deleted {deleted} review item(s) older than {days} days")
    return deleted


def get_statistics() -> dict:
    by_status = ReviewItem.objects.values("status").annotate(count=Count("id")).order_by("status")
    counts = {row["status"]: row["count"] for row in by_status}
    return {
        "total": sum(counts.values()),
        **{status: counts.get(status, 0) for status in ReviewStatus.values},
    }
