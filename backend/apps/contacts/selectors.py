# apps/contacts/selectors.py

from typing import Optional

from django.db.models import QuerySet

from apps.blocklist.services import check_recipient

from .models import Contact


def get_contact_by_id(contact_id: int) -> Optional[Contact]:
    try:
        return Contact.objects.select_related("site").get(id=contact_id)
    except Contact.DoesNotExist:
        return None


def get_unvalidated_contacts(limit: int = 500) -> QuerySet[Contact]:
    return Contact.objects.filter(is_validated=False).order_by("created_at")[:limit]


def get_valid_contacts(site) -> QuerySet[Contact]:
    """Validated, deliverable contacts of a site, highest priority first."""
    return (
        Contact.objects
        .filter(site=site, is_validated=True, is_valid=True)
        .order_by("-priority", "created_at")
    )


def get_reachable_contacts(site, limit: int) -> list[Contact]:
    """Valid contacts not on the blocklist, up to ``limit``."""
    reachable = []
    for contact in get_valid_contacts(site):
        if check_recipient(contact.email, site_domain=site.domain).blocked:
            continue
        reachable.append(contact)
        if len(reachable) >= limit:
            break
    return reachable
