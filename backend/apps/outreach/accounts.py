# apps/outreach/accounts.py

"""
Send account rotation and quota bookkeeping.

Capacity is reserved with one conditional UPDATE that re-checks both quotas,
so concurrent dispatchers can never push a counter past its limit.
"""

import logging
from datetime import timedelta

from django.conf import settings
from django.db.models import F, Q
from django.db.models.functions import Greatest
from django.utils import timezone

from .errors import NoAccountAvailable
from .models import SendAccount

logger = logging.getLogger(__name__)

HOUR = timedelta(hours=1)


def _has_capacity() -> Q:
    return Q(
        is_active=True,
        emails_sent_today__lt=F("daily_limit"),
        emails_sent_this_hour__lt=F("hourly_limit"),
    )


def roll_hourly_windows(now=None) -> int:
    """Start a fresh hourly window for accounts whose window has expired."""
    now = now or timezone.now()
    return SendAccount.objects.filter(
        Q(hour_window_started_at__isnull=True) | Q(hour_window_started_at__lte=now - HOUR)
    ).update(emails_sent_this_hour=0, hour_window_started_at=now, updated_at=now)


def available_accounts():
    """Accounts with capacity left, preferred first: priority asc, then most daily capacity left."""
    return (
        SendAccount.objects
        .filter(_has_capacity())
        .annotate(remaining=F("daily_limit") - F("emails_sent_today"))
        .order_by("priority", "-remaining", "id")
    )


def reserve(account: SendAccount) -> bool:
    """Take one unit of daily and hourly capacity. False if it was already gone."""
    now = timezone.now()
    return bool(
        SendAccount.objects
        .filter(_has_capacity(), pk=account.pk)
        .update(
            emails_sent_today=F("emails_sent_today") + 1,
            emails_sent_this_hour=F("emails_sent_this_hour") + 1,
            updated_at=now,
        )
    )


def select_and_reserve(preferred: SendAccount | None = None) -> SendAccount:
    """
    Pick an account and reserve capacity on it. A preferred account is tried
    first when it has capacity; losing a race moves on to the next candidate.
    """
    roll_hourly_windows()
    candidates = list(available_accounts())
    if preferred is not None:
        candidates.sort(key=lambda account: account.pk != preferred.pk)

    for account in candidates:
        if reserve(account):
            account.refresh_from_db()
            return account
        logger.debug(f"Lost capacity race on account {account.name}")

    raise NoAccountAvailable("No send account with remaining capacity")


def release(account: SendAccount) -> None:
    """Give back a reservation that did not turn into a delivery."""
    SendAccount.objects.filter(pk=account.pk).update(
        emails_sent_today=Greatest(F("emails_sent_today") - 1, 0),
        emails_sent_this_hour=Greatest(F("emails_sent_this_hour") - 1, 0),
        updated_at=timezone.now(),
    )


def record_success(account: SendAccount) -> None:
    now = timezone.now()
    SendAccount.objects.filter(pk=account.pk).update(
        success_count=F("success_count") + 1,
        last_used_at=now,
        updated_at=now,
    )


def record_failure(account: SendAccount) -> None:
    now = timezone.now()
    SendAccount.objects.filter(pk=account.pk).update(
        failure_count=F("failure_count") + 1,
        last_used_at=now,
        updated_at=now,
    )


def reset_daily_counters(today=None) -> int:
    """Zero the daily counters of accounts not yet reset today."""
    today = today or timezone.localdate()
    count = SendAccount.objects.filter(
        Q(last_reset_date__isnull=True) | Q(last_reset_date__lt=today)
    ).update(emails_sent_today=0, last_reset_date=today, updated_at=timezone.now())
    logger.info(f"Reset daily send counters on {count} account(s)")
    return count


def disable_unhealthy(min_success_rate: float | None = None, min_sample: int | None = None) -> list[str]:
    """Deactivate accounts whose success rate fell below the threshold."""
    if min_success_rate is None:
        min_success_rate = getattr(settings, "LEADMAILER_ACCOUNT_MIN_SUCCESS_RATE", 70)
    if min_sample is None:
        min_sample = getattr(settings, "LEADMAILER_ACCOUNT_HEALTH_MIN_SAMPLE", 20)

    disabled = []
    for account in SendAccount.objects.filter(is_active=True):
        attempts = account.success_count + account.failure_count
        if attempts < min_sample or account.success_rate >= min_success_rate:
            continue
        SendAccount.objects.filter(pk=account.pk).update(is_active=False, updated_at=timezone.now())
        disabled.append(account.name)
        logger.warning(f"Disabled send account {account.name}: success rate {account.success_rate}%")
    return disabled


def get_account_stats() -> list[dict]:
    return [
        {
            "id": account.id,
            "name": account.name,
            "is_active": account.is_active,
            "sent_today": account.emails_sent_today,
            "daily_limit": account.daily_limit,
            "sent_this_hour": account.emails_sent_this_hour,
            "hourly_limit": account.hourly_limit,
            "success_rate": account.success_rate,
        }
        for account in SendAccount.objects.order_by("priority", "name")
    ]
