# apps/outreach/duplicates.py

"""
Time-windowed suppression of repeat sends.

- Any successful send to the contact within the short window blocks.
- The same template sent to the contact within the long window blocks.
- Past the long window the contact may be emailed again.
- Optionally, a site may receive at most ``LEADMAILER_MAX_SENDS_PER_SITE``
  messages per short window.
- Likewise, one recipient e-mail domain (a company) may receive at most
  ``LEADMAILER_MAX_SENDS_PER_EMAIL_DOMAIN`` messages per short window.
"""

from dataclasses import dataclass, field
from datetime import timedelta

from django.conf import settings
from django.db.models import Q
from django.utils import timezone

from apps.blocklist.services import email_domain
from apps.common.enums import DeliveryStatus

from .models import SentRecord


@dataclass
class DuplicateCheck:
    blocked: bool = False
    reasons: list[str] = field(default_factory=list)

    @property
    def reason(self) -> str:
        return "; ".join(self.reasons)


def _windows() -> tuple[int, int]:
    short = getattr(settings, "LEADMAILER_DUPLICATE_SHORT_WINDOW_DAYS", 30)
    long = getattr(settings, "LEADMAILER_DUPLICATE_LONG_WINDOW_DAYS", 90)
    return short, max(short, long)


def check_duplicate(contact, template=None, site=None, now=None) -> DuplicateCheck:
    now = now or timezone.now()
    short_days, long_days = _windows()
    result = DuplicateCheck()

    sent = SentRecord.objects.filter(status=DeliveryStatus.SENT)
    to_contact = sent.filter(Q(contact=contact) | Q(recipient_email=contact.email))

    recent = to_contact.filter(sent_at__gte=now - timedelta(days=short_days)).order_by("-sent_at").first()
    if recent:
        result.reasons.append(
            f"Contact was emailed on {recent.sent_at:%Y-%m-%d} (within {short_days} days)"
        )
    elif template is not None:
        same_template = to_contact.filter(
            template=template,
            sent_at__gte=now - timedelta(days=long_days),
        ).order_by("-sent_at").first()
        if same_template:
            result.reasons.append(
                f"Template '{template.name}' was sent to this contact on "
                f"{same_template.sent_at:%Y-%m-%d} (within {long_days} days)"
            )

    max_per_site = getattr(settings, "LEADMAILER_MAX_SENDS_PER_SITE", None)
    if site is not None and max_per_site:
        site_sends = sent.filter(site=site, sent_at__gte=now - timedelta(days=short_days)).count()
        if site_sends >= max_per_site:
            result.reasons.append(
                f"Site has been emailed {site_sends} times in the last {short_days} days"
            )

    max_per_domain = getattr(settings, "LEADMAILER_MAX_SENDS_PER_EMAIL_DOMAIN", None)
    domain = email_domain(contact.email)
    if domain and max_per_domain:
        domain_sends = sent.filter(
            recipient_email__iendswith=f"@{domain}",
            sent_at__gte=now - timedelta(days=short_days),
        ).count()
        if domain_sends >= max_per_domain:
            result.reasons.append(
                f"Domain {domain} has been emailed {domain_sends} times in the last {short_days} days"
            )

    result.blocked = bool(result.reasons)
    return result
