# apps/qualification/services.py

import logging

from django.db import transaction
from django.utils import timezone

from apps.sites.models import Site

from .criteria import CriteriaEvaluator, RequirementResult, SiteFacts
from .models import RequirementSet

logger = logging.getLogger(__name__)


def facts_for_site(site: Site) -> SiteFacts:
    return SiteFacts(
        page_count=site.page_count,
        word_count=site.word_count,
        platform=site.detected_platform,
        corpus=site.corpus,
    )


def evaluate_requirements(site: Site, requirements=None) -> list[RequirementResult]:
    """Evaluate every active requirement set, highest priority first."""
    if requirements is None:
        requirements = RequirementSet.objects.filter(is_active=True).order_by("-priority", "id")
    evaluator = CriteriaEvaluator(facts_for_site(site))
    return [evaluator.evaluate(requirement) for requirement in requirements]


@transaction.atomic
def evaluate_site(site: Site) -> Site:
    """
    Decide whether a crawled site qualifies and persist the outcome.

    The site qualifies if any active set passes; the highest-priority
    passing set is recorded. Per-set detail is stored either way so a
    rejection can be explained. Re-running on the same snapshot writes the
    same result.
    """
    results = evaluate_requirements(site)
    passing = [result for result in results if result.passed]
    matched = passing[0] if passing else None

    site.is_qualified = matched is not None
    site.matched_requirement_id = matched.requirement_id if matched else None
    site.match_details = {
        "qualified": site.is_qualified,
        "matched_requirement": matched.name if matched else None,
        "requirements": {str(result.requirement_id): result.to_dict() for result in results},
    }
    site.evaluated_at = timezone.now()
    site.save(update_fields=[
        "is_qualified", "matched_requirement", "match_details", "evaluated_at", "updated_at",
    ])

    if matched:
        logger.info(f"Site {site.domain} qualified via '{matched.name}'")
    else:
        logger.info(f"Site {site.domain} did not qualify against {len(results)} requirement set(s)")
    return site
