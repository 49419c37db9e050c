# apps/contacts/validation.py

"""
Deliverability checks for extracted addresses.

Checks run in order and stop at the first failure:
syntax, MX records, disposable domain, blocklist.
"""

from dataclasses import dataclass

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import EmailValidator

from apps.blocklist.services import check_recipient, email_domain
from apps.common.collaborators import get_dns_resolver

DISPOSABLE_DOMAINS = frozenset({
    "10minutemail.com",
    "guerrillamail.com",
    "guerrillamail.net",
    "mailinator.com",
    "maildrop.cc",
    "sharklasers.com",
    "tempmail.com",
    "temp-mail.org",
    "throwaway.email",
    "trashmail.com",
    "yopmail.com",
    "getnada.com",
    "dispostable.com",
})

_email_validator = EmailValidator()


@dataclass
class ValidationResult:
    is_valid: bool
    reason: str = ""
    check: str = ""


def disposable_domains() -> frozenset[str]:
    extra = getattr(settings, "LEADMAILER_DISPOSABLE_DOMAINS", []) or []
    return DISPOSABLE_DOMAINS | {domain.strip().lower() for domain in extra}


def check_syntax(email: str, context: dict) -> str | None:
    try:
        _email_validator(email)
    except ValidationError:
        return "Invalid email format"
    return None


def check_mx(email: str, context: dict) -> str | None:
    domain = email_domain(email)
    if not context["resolver"].has_mx(domain):
        return f"No MX records found for {domain}"
    return None


def check_disposable(email: str, context: dict) -> str | None:
    domain = email_domain(email)
    if domain in disposable_domains():
        return f"Disposable email domain: {domain}"
    return None


def check_blocklist(email: str, context: dict) -> str | None:
    result = check_recipient(email, site_domain=context.get("site_domain"))
    if result.blocked:
        return f"Blocklisted: {result.reason}"
    return None


CHECKS = [
    ("syntax", check_syntax),
    ("mx", check_mx),
    ("disposable", check_disposable),
    ("blocklist", check_blocklist),
]


def validate_email_address(email: str, site_domain: str | None = None, resolver=None) -> ValidationResult:
    """
    Run the checks against one address. Resolver failures propagate as
    ``ResolverError`` so the caller decides whether to retry.
    """
    context = {"resolver": resolver or get_dns_resolver(), "site_domain": site_domain}
    email = (email or "").strip().lower()

    for name, check in CHECKS:
        reason = check(email, context)
        if reason:
            return ValidationResult(is_valid=False, reason=reason, check=name)
    return ValidationResult(is_valid=True)
