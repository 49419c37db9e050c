# apps/contacts/models.py

from django.db import models
from django.db.models import F
from django.utils import timezone

from apps.common.enums import ContactSource
from apps.common.models import TimestampedModel

BASE_PRIORITY = 50
NAME_BONUS = 10
ROLE_BONUS = 5
DEFAULT_SOURCE_BONUS = 5

SOURCE_BONUSES = {
    ContactSource.CONTACT_PAGE: 30,
    ContactSource.TEAM_PAGE: 25,
    ContactSource.ABOUT_PAGE: 20,
    ContactSource.HEADER: 15,
    ContactSource.FOOTER: 10,
    ContactSource.BODY: 5,
}


def calculate_priority(source_type: str, has_name: bool = False, has_role: bool = False) -> int:
    """50 + source bonus + 10 for a name + 5 for a role, capped at 100."""
    priority = BASE_PRIORITY + SOURCE_BONUSES.get(source_type, DEFAULT_SOURCE_BONUS)
    if has_name:
        priority += NAME_BONUS
    if has_role:
        priority += ROLE_BONUS
    return min(100, priority)


class Contact(TimestampedModel):
    """An e-mail address found on a site, with its validation and outreach history."""

    site = models.ForeignKey(
        "sites.Site",
        on_delete=models.CASCADE,
        related_name="contacts",
    )
    email = models.EmailField(max_length=254)
    name = models.CharField(max_length=255, blank=True)
    phone = models.CharField(max_length=50, blank=True)
    role = models.CharField(max_length=255, blank=True)

    # Where it was found
    source_type = models.CharField(
        max_length=20,
        choices=ContactSource.choices,
        default=ContactSource.BODY,
    )
    source_url = models.URLField(max_length=2048, blank=True)
    source_context = models.TextField(blank=True)
    priority = models.PositiveSmallIntegerField(default=BASE_PRIORITY, db_index=True)

    # Validation
    is_validated = models.BooleanField(default=False, db_index=True)
    is_valid = models.BooleanField(default=False)
    validation_error = models.CharField(max_length=500, blank=True)
    validated_at = models.DateTimeField(null=True, blank=True)

    # Outreach history
    contacted = models.BooleanField(default=False, db_index=True)
    first_contacted_at = models.DateTimeField(null=True, blank=True)
    last_contacted_at = models.DateTimeField(null=True, blank=True)
    contact_count = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["-priority", "created_at"]
        constraints = [
            models.UniqueConstraint(fields=["site", "email"], name="unique_contact_per_site"),
        ]
        indexes = [
            models.Index(fields=["site", "is_valid", "-priority"], name="contact_site_valid_idx"),
            models.Index(fields=["email"], name="contact_email_idx"),
        ]

    def __str__(self):
        return f"{self.email} ({self.site_id})"

    def save(self, *args, **kwargs):
        self.email = (self.email or "").strip().lower()
        super().save(*args, **kwargs)

    def calculate_priority(self) -> int:
        return calculate_priority(self.source_type, bool(self.name), bool(self.role))

    def mark_validated(self, is_valid: bool, error: str = "") -> None:
        self.is_validated = True
        self.is_valid = is_valid
        self.validation_error = "" if is_valid else error[:500]
        self.validated_at = timezone.now()
        self.save(update_fields=["is_validated", "is_valid", "validation_error", "validated_at", "updated_at"])

    def mark_contacted(self) -> None:
        now = timezone.now()
        Contact.objects.filter(pk=self.pk).update(
            contacted=True,
            contact_count=F("contact_count") + 1,
            last_contacted_at=now,
            updated_at=now,
        )
        Contact.objects.filter(pk=self.pk, first_contacted_at__isnull=True).update(first_contacted_at=now)
        self.refresh_from_db(fields=[
            "contacted", "contact_count", "first_contacted_at", "last_contacted_at", "updated_at",
        ])
