# apps/outreach/models.py

from django.conf import settings
from django.db import models
from django.utils import timezone

from apps.common.enums import DeliveryStatus, ReviewStatus
from apps.common.models import TimestampedModel


class EmailTemplate(TimestampedModel):
    """Outreach message with ``{{ placeholder }}`` fields."""
    name = models.CharField(max_length=255)
    subject_template = models.CharField(max_length=500)
    body_template = models.TextField()
    preheader = models.CharField(max_length=255, blank=True)
    is_active = models.BooleanField(default=True, db_index=True)
    usage_count = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class SendAccount(TimestampedModel):
    """
    An outbound mail identity with its own quotas.

    Counters are only changed through ``apps.outreach.accounts``, which
    reserves capacity with conditional UPDATEs.
    """
    name = models.CharField(max_length=255)

    # Connection (the password lives in the secrets store under credentials_key)
    host = models.CharField(max_length=255)
    port = models.PositiveIntegerField(default=587)
    use_tls = models.BooleanField(default=True)
    username = models.CharField(max_length=255, blank=True)
    credentials_key = models.CharField(
        max_length=100,
        blank=True,
        help_text="Key to look up the SMTP password in LEADMAILER_SMTP_CREDENTIALS",
    )
    from_address = models.EmailField()
    from_name = models.CharField(max_length=255, blank=True)

    # Quotas
    daily_limit = models.PositiveIntegerField(default=100)
    hourly_limit = models.PositiveIntegerField(default=20)
    emails_sent_today = models.PositiveIntegerField(default=0)
    emails_sent_this_hour = models.PositiveIntegerField(default=0)
    hour_window_started_at = models.DateTimeField(null=True, blank=True)
    last_reset_date = models.DateField(null=True, blank=True)

    # Rotation
    priority = models.IntegerField(default=10, help_text="Lower is preferred")
    is_active = models.BooleanField(default=True, db_index=True)

    # Health
    success_count = models.PositiveIntegerField(default=0)
    failure_count = models.PositiveIntegerField(default=0)
    last_used_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["priority", "name"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(emails_sent_today__lte=models.F("daily_limit")),
                name="send_account_daily_quota",
            ),
            models.CheckConstraint(
                condition=models.Q(emails_sent_this_hour__lte=models.F("hourly_limit")),
                name="send_account_hourly_quota",
            ),
        ]

    def __str__(self):
        return f"{self.name} <{self.from_address}>"

    @property
    def remaining_daily(self) -> int:
        return max(0, self.daily_limit - self.emails_sent_today)

    @property
    def remaining_hourly(self) -> int:
        return max(0, self.hourly_limit - self.emails_sent_this_hour)

    @property
    def success_rate(self) -> float:
        total = self.success_count + self.failure_count
        if not total:
            return 100.0
        return round(self.success_count / total * 100, 2)


class ReviewItem(TimestampedModel):
    """A rendered outreach message waiting for a reviewer's decision."""

    site = models.ForeignKey("sites.Site", on_delete=models.CASCADE, related_name="review_items")
    contact = models.ForeignKey("contacts.Contact", on_delete=models.CASCADE, related_name="review_items")
    template = models.ForeignKey(EmailTemplate, on_delete=models.PROTECT, related_name="review_items")
    send_account = models.ForeignKey(
        SendAccount,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="review_items",
    )

    subject = models.CharField(max_length=500)
    body = models.TextField()
    preheader = models.CharField(max_length=255, blank=True)

    status = models.CharField(
        max_length=20,
        choices=ReviewStatus.choices,
        default=ReviewStatus.PENDING,
        db_index=True,
    )
    priority = models.PositiveSmallIntegerField(default=50)

    # Review
    reviewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="reviewed_items",
    )
    reviewed_at = models.DateTimeField(null=True, blank=True)
    review_notes = models.TextField(blank=True)

    # Dispatch
    claimed_at = models.DateTimeField(null=True, blank=True)
    send_attempts = models.PositiveSmallIntegerField(default=0)
    failure_reason = models.TextField(blank=True)
    sent_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-priority", "created_at"]
        constraints = [
            models.UniqueConstraint(fields=["site", "contact"], name="unique_review_item_per_contact"),
        ]
        indexes = [
            models.Index(fields=["status", "-priority", "created_at"], name="review_status_priority_idx"),
        ]

    def __str__(self):
        return f"Review {self.id} - {self.contact.email} ({self.status})"


class SentRecord(models.Model):
    """Append-only audit row for every delivery attempt that reached a guard or the transport."""

    recipient_email = models.EmailField(db_index=True)
    recipient_name = models.CharField(max_length=255, blank=True)
    site = models.ForeignKey("sites.Site", on_delete=models.SET_NULL, null=True, related_name="sent_records")
    contact = models.ForeignKey(
        "contacts.Contact",
        on_delete=models.SET_NULL,
        null=True,
        related_name="sent_records",
    )
    review_item = models.ForeignKey(
        ReviewItem,
        on_delete=models.SET_NULL,
        null=True,
        related_name="sent_records",
    )
    send_account = models.ForeignKey(
        SendAccount,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sent_records",
    )
    template = models.ForeignKey(
        EmailTemplate,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sent_records",
    )
    subject = models.CharField(max_length=500)
    body = models.TextField()
    status = models.CharField(max_length=20, choices=DeliveryStatus.choices, db_index=True)
    error_message = models.TextField(blank=True)
    sent_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        ordering = ["-sent_at"]
        indexes = [
            models.Index(fields=["contact", "status", "sent_at"], name="sent_contact_status_idx"),
            models.Index(fields=["site", "status", "sent_at"], name="sent_site_status_idx"),
        ]

    def __str__(self):
        return f"[{self.status}] {self.recipient_email} at {self.sent_at}"

    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise ValueError("Sent records are append-only")
        super().save(*args, **kwargs)
