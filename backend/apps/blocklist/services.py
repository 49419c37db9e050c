# apps/blocklist/services.py

import logging
from dataclasses import dataclass, field
from typing import Iterable

from django.core.cache import cache
from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db.models import Count

from apps.common.enums import BlockSource, BlockType

from .models import BlockEntry, normalize_value

logger = logging.getLogger(__name__)

CACHE_SECONDS = 60 * 60


@dataclass
class BlockCheck:
    """Outcome of a guard check with the reasons that matched."""
    blocked: bool = False
    reasons: list[str] = field(default_factory=list)

    @property
    def reason(self) -> str:
        return "; ".join(self.reasons)


def _cache_key(block_type: str, value: str) -> str:
    return f"blocklist:{block_type}:{value}"


def _entry_exists(block_type: str, value: str) -> bool:
    key = _cache_key(block_type, value)
    cached = cache.get(key)
    if cached is not None:
        return cached

    exists = BlockEntry.objects.filter(type=block_type, value=value, is_active=True).exists()
    cache.set(key, exists, CACHE_SECONDS)
    return exists


def _forget(block_type: str, value: str) -> None:
    cache.delete(_cache_key(block_type, value))


def email_domain(email: str) -> str:
    """Domain part of an address, lower-cased ('' when there is none)."""
    email = normalize_value(email)
    if "@" not in email:
        return ""
    return email.rsplit("@", 1)[1]


def parent_domains(domain: str) -> list[str]:
    """'a.b.example.com' -> ['a.b.example.com', 'b.example.com', 'example.com']."""
    domain = normalize_value(domain, BlockType.DOMAIN)
    labels = [label for label in domain.split(".") if label]
    if len(labels) < 2:
        return [domain] if domain else []
    return [".".join(labels[i:]) for i in range(len(labels) - 1)]


# === Guard ===

def is_email_blocked(email: str) -> bool:
    email = normalize_value(email)
    if not email:
        return False
    return _entry_exists(BlockType.EMAIL, email)


def is_domain_blocked(domain: str) -> bool:
    """A domain is blocked when it or any of its parent domains is listed."""
    return any(_entry_exists(BlockType.DOMAIN, d) for d in parent_domains(domain))


def check_recipient(email: str, site_domain: str | None = None) -> BlockCheck:
    """
    Check an address before contacting it.

    Looks at the address itself, the address's domain and the domain of the
    site it was found on.
    """
    result = BlockCheck()

    if is_email_blocked(email):
        result.reasons.append(f"Email address {normalize_value(email)} is blocklisted")

    domain = email_domain(email)
    if domain and is_domain_blocked(domain):
        result.reasons.append(f"Email domain {domain} is blocklisted")

    # www. is ignored on both sides
    site_domain = normalize_value(site_domain, BlockType.DOMAIN)
    same_domain = site_domain == normalize_value(domain, BlockType.DOMAIN)
    if site_domain and not same_domain and is_domain_blocked(site_domain):
        result.reasons.append(f"Site domain {site_domain} is blocklisted")

    result.blocked = bool(result.reasons)
    return result


# === Management ===

def _block(block_type: str, value: str, reason: str, source: str) -> BlockEntry:
    value = normalize_value(value, block_type)
    entry, created = BlockEntry.objects.get_or_create(
        type=block_type,
        value=value,
        defaults={"reason": reason, "source": source, "is_active": True},
    )
    if not created and not entry.is_active:
        entry.is_active = True
        entry.reason = reason or entry.reason
        entry.save(update_fields=["is_active", "reason", "updated_at"])

    _forget(block_type, value)
    if created:
        logger.info(f"Blocklisted {block_type} {value} ({source}): {reason}")
    return entry


def block_email(email: str, reason: str = "", source: str = BlockSource.MANUAL) -> BlockEntry:
    return _block(BlockType.EMAIL, email, reason, source)


def block_domain(domain: str, reason: str = "", source: str = BlockSource.MANUAL) -> BlockEntry:
    return _block(BlockType.DOMAIN, domain, reason, source)


def unblock(block_type: str, value: str) -> bool:
    """Remove an entry. Returns True if something was deleted."""
    value = normalize_value(value, block_type)
    deleted, _ = BlockEntry.objects.filter(type=block_type, value=value).delete()
    _forget(block_type, value)
    return deleted > 0


def set_active(entry: BlockEntry, active: bool) -> BlockEntry:
    """Soft enable/disable without losing the entry's history."""
    entry.is_active = active
    entry.save(update_fields=["is_active", "updated_at"])
    _forget(entry.type, entry.value)
    return entry


def bulk_block(
    block_type: str,
    values: Iterable[str],
    reason: str = "Imported",
    source: str = BlockSource.IMPORTED,
) -> dict:
    """
    Block many addresses or domains at once.
    Malformed values are skipped and reported, not raised.
    """
    blocked = 0
    skipped = []

    for raw in values:
        value = normalize_value(raw)
        if not value:
            continue
        if block_type == BlockType.EMAIL:
            try:
                validate_email(value)
            except ValidationError:
                skipped.append(value)
                continue
        else:
            # Accepts bare domains and URLs, never addresses
            domain = normalize_value(value, BlockType.DOMAIN)
            if "@" in value or "." not in domain:
                skipped.append(value)
                continue
            value = domain

        _block(block_type, value, reason, source)
        blocked += 1

    return {"blocked": blocked, "skipped": skipped}


def auto_block_from_bounce(email: str, bounce_type: str = "hard") -> BlockEntry | None:
    """Hard bounces are never retried: keep the address out of future runs."""
    if bounce_type != "hard":
        return None
    return block_email(email, reason="Auto-blocklisted after hard bounce", source=BlockSource.AUTO)


def auto_block_from_complaint(email: str) -> BlockEntry:
    """A spam complaint keeps the address out of every future run."""
    return block_email(email, reason="Auto-blocklisted after spam complaint", source=BlockSource.AUTO)


def get_statistics() -> dict:
    by_source = (
        BlockEntry.objects
        .values("source")
        .annotate(count=Count("id"))
        .order_by("source")
    )
    return {
        "total": BlockEntry.objects.count(),
        "active": BlockEntry.objects.filter(is_active=True).count(),
        "emails": BlockEntry.objects.filter(type=BlockType.EMAIL).count(),
        "domains": BlockEntry.objects.filter(type=BlockType.DOMAIN).count(),
        "by_source": {row["source"]: row["count"] for row in by_source},
    }
