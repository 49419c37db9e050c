# apps/sites/services.py

"""
Crawl state machine.

    pending -> crawling -> completed -> per_review
                        -> failed -> crawling (retry)

Every transition is a conditional UPDATE on the current status, so two
workers can never both move the same site.
"""

import logging
import re
from typing import Iterable

from django.conf import settings
from django.db import IntegrityError
from django.db.models import F, Q
from django.utils import timezone

from apps.common.domains import normalize_domain
from apps.common.enums import SiteStatus
from apps.common.exceptions import PermanentError
from apps.crawler.platforms import detect_platform
from apps.crawler.text import count_words, extract_title, strip_tags

from .models import Site
from .selectors import stale_crawl_cutoff

logger = logging.getLogger(__name__)

_DOMAIN_RE = re.compile(r"^(?=.{4,253}$)([a-z0-9-]{1,63}\.)+[a-z]{2,63}$")


class InvalidTransition(PermanentError):
    """The site is not in a state that allows the requested transition."""


def ingest_domains(domains: Iterable[str]) -> dict:
    """
    Create pending sites for new domains. Known domains and malformed
    values are skipped, so re-importing the same list is harmless.
    """
    created = 0
    existing = 0
    invalid = []

    for raw in domains:
        domain = normalize_domain(raw)
        if not _DOMAIN_RE.match(domain):
            if raw and raw.strip():
                invalid.append(raw.strip())
            continue
        try:
            _, was_created = Site.objects.get_or_create(domain=domain)
        except IntegrityError:
            was_created = False
        if was_created:
            created += 1
        else:
            existing += 1

    logger.info(f"Ingested domains: {created} new, {existing} existing, {len(invalid)} invalid")
    return {"created": created, "existing": existing, "invalid": invalid}


def _claimable() -> Q:
    max_attempts = getattr(settings, "LEADMAILER_MAX_CRAWL_ATTEMPTS", 3)
    return (
        Q(status=SiteStatus.PENDING)
        | Q(status=SiteStatus.FAILED, crawl_attempts__lt=max_attempts)
        | Q(status=SiteStatus.CRAWLING, crawl_started_at__lt=stale_crawl_cutoff(),
            crawl_attempts__lt=max_attempts)
    )


def begin_crawl(site_id: int) -> bool:
    """
    Claim a site for crawling. Returns False when another worker holds it
    or it is not in a crawlable state.
    """
    now = timezone.now()
    claimed = (
        Site.objects
        .filter(pk=site_id)
        .filter(_claimable())
        .update(
            status=SiteStatus.CRAWLING,
            crawl_attempts=F("crawl_attempts") + 1,
            crawl_started_at=now,
            crawl_finished_at=None,
            updated_at=now,
        )
    )
    if not claimed:
        logger.info(f"Site {site_id} not claimable for crawling, skipping")
    return bool(claimed)


def _page_dict(page) -> dict:
    if isinstance(page, dict):
        return {"url": page.get("url", ""), "content": page.get("content", "")}
    return {"url": page.url, "content": page.content}


def complete_crawl(site: Site, pages: list) -> bool:
    """
    Store the fetched snapshot and derived counts. Only a site that is
    still ``crawling`` is updated; returns False otherwise.
    """
    snapshot = [_page_dict(page) for page in pages]
    raw = "\n".join(page["content"] for page in snapshot)
    text = " ".join(strip_tags(page["content"]) for page in snapshot)
    now = timezone.now()

    fields = {
        "snapshot_pages": snapshot,
        "page_count": len(snapshot),
        "word_count": count_words(text),
        "detected_platform": detect_platform(raw),
        "title": (extract_title(snapshot[0]["content"]) if snapshot else "")[:500],
        "status": SiteStatus.COMPLETED,
        "crawl_finished_at": now,
        "last_crawl_error": "",
        "updated_at": now,
    }
    updated = Site.objects.filter(pk=site.pk, status=SiteStatus.CRAWLING).update(**fields)
    if not updated:
        logger.warning(f"Site {site.domain} is no longer crawling, dropping snapshot")
        return False

    for name, value in fields.items():
        setattr(site, name, value)
    logger.info(
        f"Crawl complete for {site.domain}: {site.page_count} pages, "
        f"{site.word_count} words, platform={site.detected_platform}"
    )
    return True


def fail_crawl(site: Site, reason: str) -> bool:
    """
    Record a failed crawl. The site is kept in ``failed`` with the reason
    so it can be inspected and retried.
    """
    now = timezone.now()
    updated = Site.objects.filter(pk=site.pk, status=SiteStatus.CRAWLING).update(
        status=SiteStatus.FAILED,
        last_crawl_error=reason,
        crawl_finished_at=now,
        updated_at=now,
    )
    if updated:
        site.status = SiteStatus.FAILED
        site.last_crawl_error = reason
        site.crawl_finished_at = now
        logger.warning(f"Crawl failed for {site.domain}: {reason}")
    return bool(updated)


def expire_stale_crawls() -> int:
    """Crawl claims abandoned with no attempts left become ``failed``."""
    max_attempts = getattr(settings, "LEADMAILER_MAX_CRAWL_ATTEMPTS", 3)
    now = timezone.now()
    return Site.objects.filter(
        status=SiteStatus.CRAWLING,
        crawl_started_at__lt=stale_crawl_cutoff(),
        crawl_attempts__gte=max_attempts,
    ).update(
        status=SiteStatus.FAILED,
        last_crawl_error="Crawl abandoned by worker (timed out)",
        crawl_finished_at=now,
        updated_at=now,
    )


def reset_crawl(site: Site) -> Site:
    """Put a failed site back to ``pending`` with a fresh attempt budget."""
    updated = Site.objects.filter(pk=site.pk, status=SiteStatus.FAILED).update(
        status=SiteStatus.PENDING,
        crawl_attempts=0,
        updated_at=timezone.now(),
    )
    if not updated:
        raise InvalidTransition(f"Site {site.domain} is {site.status}, only failed sites can be reset")
    site.refresh_from_db()
    return site


def mark_for_review(site: Site, actor) -> Site:
    """A reviewer flags a completed site for manual review."""
    if actor is None:
        raise InvalidTransition("A reviewer is required to flag a site for review")

    updated = Site.objects.filter(pk=site.pk, status=SiteStatus.COMPLETED).update(
        status=SiteStatus.PER_REVIEW,
        updated_at=timezone.now(),
    )
    if not updated:
        raise InvalidTransition(f"Site {site.domain} is {site.status}, only completed sites can be flagged")

    site.refresh_from_db()
    logger.info(f"Site {site.domain} flagged for review by {actor}")
    return site
