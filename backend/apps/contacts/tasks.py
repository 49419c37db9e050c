# apps/contacts/tasks.py

import logging

from celery import shared_task

from apps.common.retry import backoff_countdown, retries_exhausted
from apps.sites.selectors import get_site_by_id

from .resolvers import ResolverError
from .selectors import get_contact_by_id, get_unvalidated_contacts
from .services import extract_contacts_for_site, mark_validation_failed
from .services import validate_contact as run_validation

logger = logging.getLogger(__name__)


@shared_task(soft_time_limit=5 * 60)
def extract_contacts(site_id: int) -> dict:
    """Extract contacts from a site's snapshot and queue validation of new ones."""
    site = get_site_by_id(site_id)
    if not site:
        logger.error(f"Site {site_id} not found")
        return {"error": f"Site {site_id} not found"}

    if not site.has_snapshot:
        logger.warning(f"Site {site.domain} has no snapshot, nothing to extract")
        return {"site_id": site.id, "skipped": True}

    result = extract_contacts_for_site(site)
    for contact_id in result["contact_ids"]:
        validate_contact.delay(contact_id)

    return {"site_id": site.id, "found": result["found"], "created": result["created"]}


@shared_task(bind=True, max_retries=3, soft_time_limit=60)
def validate_contact(self, contact_id: int) -> dict:
    """
    Validate one contact. DNS failures are retried with backoff; when
    retries run out, or anything unexpected happens, the contact is marked
    invalid with the reason.
    """
    from apps.outreach.tasks import create_review_items_for_site

    contact = get_contact_by_id(contact_id)
    if not contact:
        logger.error(f"Contact {contact_id} not found")
        return {"error": f"Contact {contact_id} not found"}

    try:
        result = run_validation(contact)
    except ResolverError as e:
        if retries_exhausted(self):
            mark_validation_failed(contact, f"Validation failed after retries: {e}")
            return {"contact_id": contact.id, "is_valid": False, "reason": contact.validation_error}
        raise self.retry(countdown=backoff_countdown(self.request.retries, base=30))
    except Exception as e:
        logger.exception(f"Unexpected error validating contact {contact_id}")
        mark_validation_failed(contact, f"Validation error: {e}")
        return {"contact_id": contact.id, "is_valid": False, "reason": contact.validation_error}

    if result is None:
        return {"contact_id": contact.id, "skipped": True}

    # A contact validated after its site qualified still needs a review item
    if result.is_valid and contact.site.is_qualified:
        create_review_items_for_site.delay(contact.site_id)

    return {"contact_id": contact.id, "is_valid": result.is_valid, "reason": result.reason}


@shared_task
def validate_pending_contacts(limit: int = 500) -> dict:
    """Re-queue contacts whose validation never ran (lost hand-off)."""
    contact_ids = list(get_unvalidated_contacts(limit).values_list("id", flat=True))
    for contact_id in contact_ids:
        validate_contact.delay(contact_id)
    return {"queued": len(contact_ids)}
