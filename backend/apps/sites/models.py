# apps/sites/models.py

from django.db import models

from apps.common.enums import SiteStatus
from apps.common.models import TimestampedModel


class Site(TimestampedModel):
    """
    A web property under qualification.

    Status moves through the crawl state machine in ``apps.sites.services``;
    qualification fields are only written by ``apps.qualification.services``.
    """
    domain = models.CharField(max_length=255, unique=True)
    title = models.CharField(max_length=500, blank=True)
    status = models.CharField(
        max_length=20,
        choices=SiteStatus.choices,
        default=SiteStatus.PENDING,
        db_index=True,
    )

    # Crawl bookkeeping
    crawl_attempts = models.PositiveIntegerField(default=0)
    crawl_started_at = models.DateTimeField(null=True, blank=True)
    crawl_finished_at = models.DateTimeField(null=True, blank=True)
    last_crawl_error = models.TextField(blank=True)

    # Content snapshot
    snapshot_pages = models.JSONField(
        default=list,
        blank=True,
        help_text="Fetched pages as [{url, content}], homepage first",
    )
    page_count = models.PositiveIntegerField(default=0)
    word_count = models.PositiveIntegerField(default=0)
    detected_platform = models.CharField(max_length=50, null=True, blank=True)

    # Qualification
    is_qualified = models.BooleanField(default=False, db_index=True)
    matched_requirement = models.ForeignKey(
        "qualification.RequirementSet",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="matched_sites",
    )
    match_details = models.JSONField(
        default=dict,
        blank=True,
        help_text="Per requirement set evaluation detail",
    )
    evaluated_at = models.DateTimeField(null=True, blank=True)

    # Outreach bindings
    email_template = models.ForeignKey(
        "outreach.EmailTemplate",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sites",
    )
    send_account = models.ForeignKey(
        "outreach.SendAccount",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sites",
        help_text="Preferred account; rotation falls back to any account with capacity",
    )

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "crawl_started_at"], name="site_status_crawl_idx"),
            models.Index(fields=["is_qualified", "status"], name="site_qualified_status_idx"),
        ]

    def __str__(self):
        return f"{self.domain} ({self.status})"

    @property
    def url(self) -> str:
        return f"https://{self.domain}"

    @property
    def corpus(self) -> str:
        """Page URLs and raw content joined; what keyword and URL criteria search."""
        parts = []
        for page in self.snapshot_pages or []:
            parts.append(page.get("url", ""))
            parts.append(page.get("content", ""))
        return "\n".join(parts)

    @property
    def has_snapshot(self) -> bool:
        return bool(self.snapshot_pages)
