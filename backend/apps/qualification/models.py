# apps/qualification/models.py

from django.conf import settings
from django.db import models

from apps.common.models import TimestampedModel


class RequirementSet(TimestampedModel):
    """
    A named group of qualification predicates.

    All predicates in a set must pass for the set to pass; a site qualifies
    when any active set passes.
    """
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True, db_index=True)
    priority = models.IntegerField(
        default=0,
        help_text="Higher wins when several sets match",
    )
    criteria = models.JSONField(
        default=dict,
        blank=True,
        help_text="min_pages, max_pages, min_word_count, max_word_count, platforms, "
                  "blocked_platforms, required_keywords, excluded_keywords, required_urls",
    )

    class Meta:
        verbose_name = "Requirement Set"
        verbose_name_plural = "Requirement Sets"
        ordering = ["-priority", "name"]

    def __str__(self):
        return self.name


def calculate_page_budget() -> int:
    """
    Pages to fetch per site: the largest ``min_pages`` any active set asks
    for, plus a margin, never below the configured default.
    """
    default = getattr(settings, "LEADMAILER_DEFAULT_PAGE_BUDGET", 10)
    margin = getattr(settings, "LEADMAILER_PAGE_BUDGET_MARGIN", 5)

    largest = 0
    for criteria in RequirementSet.objects.filter(is_active=True).values_list("criteria", flat=True):
        try:
            largest = max(largest, int((criteria or {}).get("min_pages") or 0))
        except (TypeError, ValueError, AttributeError):
            continue

    if not largest:
        return default
    return max(default, largest + margin)
