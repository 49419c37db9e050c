# apps/outreach/dispatch.py

"""
Guarded delivery of approved review items.

Order of checks: claim, send window, blocklist, duplicate history, account
capacity, transport. Policy failures (blocklist, duplicate) fail the item
without touching any account counter. Transport failures release the
reserved capacity and count against the account.
"""

import logging

from django.conf import settings
from django.db import transaction
from django.db.models import F, Q
from django.utils import timezone

from apps.blocklist.services import auto_block_from_bounce, check_recipient
from apps.common.collaborators import get_mail_transport
from apps.common.enums import DeliveryStatus, ReviewStatus

from . import accounts
from .duplicates import check_duplicate
from .errors import Blocklisted, DuplicateSend, NoAccountAvailable, OutsideSendWindow, TransportError
from .models import EmailTemplate, ReviewItem, SentRecord
from .review import claim_cutoff
from .transport import OutgoingMessage

logger = logging.getLogger(__name__)


def in_send_window(now=None) -> bool:
    window = getattr(settings, "LEADMAILER_SEND_WINDOW", None) or {}
    if not window.get("enabled", False):
        return True
    local = timezone.localtime(now or timezone.now())
    if window.get("weekdays_only", False) and local.weekday() >= 5:
        return False
    return window.get("start_hour", 0) <= local.hour < window.get("end_hour", 24)


def claim_item(item_id: int, allow_failed: bool = False) -> bool:
    """
    Take exclusive hold of an approved item. A retry may also re-claim an
    item that a previous attempt left ``failed``; it goes back to approved.
    """
    statuses = [ReviewStatus.APPROVED]
    if allow_failed:
        statuses.append(ReviewStatus.FAILED)

    now = timezone.now()
    return bool(
        ReviewItem.objects
        .filter(pk=item_id, status__in=statuses)
        .filter(Q(claimed_at__isnull=True) | Q(claimed_at__lt=claim_cutoff()))
        .update(
            status=ReviewStatus.APPROVED,
            claimed_at=now,
            send_attempts=F("send_attempts") + 1,
            updated_at=now,
        )
    )


def release_claim(item: ReviewItem, note: str = "") -> None:
    fields = {"claimed_at": None, "updated_at": timezone.now()}
    if note:
        fields["failure_reason"] = note
    ReviewItem.objects.filter(pk=item.pk).update(**fields)


def _sent_record(item: ReviewItem, status: str, account=None, error: str = "") -> SentRecord:
    return SentRecord.objects.create(
        recipient_email=item.contact.email,
        recipient_name=item.contact.name,
        site=item.site,
        contact=item.contact,
        review_item=item,
        send_account=account,
        template=item.template,
        subject=item.subject,
        body=item.body,
        status=status,
        error_message=error,
    )


def _finish(item: ReviewItem, status: str, **fields) -> None:
    now = timezone.now()
    ReviewItem.objects.filter(pk=item.pk).update(status=status, claimed_at=None, updated_at=now, **fields)


@transaction.atomic
def _record_policy_failure(item: ReviewItem, reason: str) -> None:
    _sent_record(item, DeliveryStatus.FAILED, error=reason)
    _finish(item, ReviewStatus.FAILED, failure_reason=reason)
    logger.warning(f"Review item {item.id} not sent: {reason}")


@transaction.atomic
def _record_transport_failure(item: ReviewItem, account, error: TransportError) -> None:
    accounts.release(account)
    accounts.record_failure(account)
    status = DeliveryStatus.BOUNCED if error.bounce_type else DeliveryStatus.FAILED
    _sent_record(item, status, account=account, error=str(error))
    _finish(item, ReviewStatus.FAILED, failure_reason=str(error), send_account=account)
    if error.bounce_type == "hard":
        auto_block_from_bounce(item.contact.email, "hard")
    logger.warning(f"Delivery of review item {item.id} via {account.name} failed: {error}")


@transaction.atomic
def _record_success(item: ReviewItem, account) -> None:
    now = timezone.now()
    accounts.record_success(account)
    item.contact.mark_contacted()
    EmailTemplate.objects.filter(pk=item.template_id).update(usage_count=F("usage_count") + 1)
    _sent_record(item, DeliveryStatus.SENT, account=account)
    _finish(item, ReviewStatus.SENT, sent_at=now, send_account=account, failure_reason="")
    logger.info(f"Review item {item.id} sent to {item.contact.email} via {account.name}")


def build_message(item: ReviewItem) -> OutgoingMessage:
    return OutgoingMessage(
        to_email=item.contact.email,
        to_name=item.contact.name,
        subject=item.subject,
        body=item.body,
        preheader=item.preheader,
    )


def dispatch_review_item(item_id: int, allow_failed: bool = False, transport=None) -> ReviewItem | None:
    """
    Deliver one approved item. Returns the sent item, None when another
    dispatcher holds it (or it is not approved), and raises the domain error
    for every other outcome after recording it.
    """
    if not claim_item(item_id, allow_failed=allow_failed):
        logger.info(f"Review item {item_id} is not dispatchable, skipping")
        return None

    item = ReviewItem.objects.select_related("site", "contact", "template", "send_account").get(pk=item_id)

    if not in_send_window():
        release_claim(item)
        raise OutsideSendWindow("Outside the allowed sending window")

    block = check_recipient(item.contact.email, site_domain=item.site.domain)
    if block.blocked:
        reason = f"Blocklisted: {block.reason}"
        _record_policy_failure(item, reason)
        raise Blocklisted(reason)

    duplicate = check_duplicate(item.contact, template=item.template, site=item.site)
    if duplicate.blocked:
        reason = f"Duplicate: {duplicate.reason}"
        _record_policy_failure(item, reason)
        raise DuplicateSend(reason)

    try:
        account = accounts.select_and_reserve(preferred=item.send_account)
    except NoAccountAvailable as e:
        release_claim(item, note=str(e))
        raise

    transport = transport or get_mail_transport()
    try:
        transport.send(account, build_message(item))
    except TransportError as e:
        _record_transport_failure(item, account, e)
        raise
    except Exception as e:
        error = TransportError(f"{e.__class__.__name__}: {e}")
        _record_transport_failure(item, account, error)
        raise error from e

    _record_success(item, account)
    item.refresh_from_db()
    return item
