# apps/contacts/services.py

import logging

from django.db import IntegrityError, transaction

from apps.sites.models import Site

from .extraction import extract_contacts
from .models import Contact
from .validation import ValidationResult, validate_email_address

logger = logging.getLogger(__name__)


def create_contact(site: Site, email: str, **fields) -> tuple[Contact | None, bool]:
    """
    Insert a contact unless the site already has that address. A concurrent
    insert of the same pair is treated as already existing.
    """
    email = email.strip().lower()
    try:
        with transaction.atomic():
            return Contact.objects.get_or_create(site=site, email=email, defaults=fields)
    except IntegrityError:
        logger.debug(f"Contact {email} for {site.domain} created concurrently")
        return Contact.objects.filter(site=site, email=email).first(), False


def extract_contacts_for_site(site: Site) -> dict:
    """
    Create contacts for every address in the site's snapshot. Running it
    again on the same snapshot creates nothing new.
    """
    extracted = extract_contacts(site.snapshot_pages or [])
    created_ids = []

    for item in extracted:
        contact, created = create_contact(site, item.email, **item.to_fields())
        if created:
            created_ids.append(contact.id)

    logger.info(f"Extracted {len(extracted)} address(es) from {site.domain}, {len(created_ids)} new")
    return {"found": len(extracted), "created": len(created_ids), "contact_ids": created_ids}


def validate_contact(contact: Contact, resolver=None) -> ValidationResult | None:
    """Validate an unvalidated contact. Already validated contacts return None."""
    if contact.is_validated:
        return None

    result = validate_email_address(contact.email, site_domain=contact.site.domain, resolver=resolver)
    contact.mark_validated(result.is_valid, result.reason)

    if result.is_valid:
        logger.info(f"Contact {contact.email} is valid")
    else:
        logger.info(f"Contact {contact.email} is invalid: {result.reason}")
    return result


def mark_validation_failed(contact: Contact, reason: str) -> Contact:
    """Close out a validation that could not complete so it is never left pending."""
    if not contact.is_validated:
        contact.mark_validated(False, reason)
        logger.warning(f"Validation of {contact.email} abandoned: {reason}")
    return contact
