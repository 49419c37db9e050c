# apps/blocklist/models.py

from django.db import models

from apps.common.domains import normalize_domain
from apps.common.enums import BlockSource, BlockType
from apps.common.models import TimestampedModel


class BlockEntry(TimestampedModel):
    """An e-mail address or domain that must never be contacted."""

    type = models.CharField(max_length=10, choices=BlockType.choices, db_index=True)
    value = models.CharField(
        max_length=255,
        help_text="Lower-cased e-mail address or domain",
    )
    reason = models.CharField(max_length=500, blank=True)
    source = models.CharField(
        max_length=20,
        choices=BlockSource.choices,
        default=BlockSource.MANUAL,
    )
    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        verbose_name = "Block Entry"
        verbose_name_plural = "Block Entries"
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(fields=["type", "value"], name="unique_block_entry"),
        ]
        indexes = [
            models.Index(fields=["type", "value", "is_active"], name="blockentry_lookup_idx"),
        ]

    def __str__(self):
        return f"{self.type}:{self.value}"

    def save(self, *args, **kwargs):
        self.value = normalize_value(self.value, self.type)
        super().save(*args, **kwargs)


def normalize_value(value: str, block_type: str = BlockType.EMAIL) -> str:
    """Addresses are trimmed and lower-cased; domains lose scheme, path and `www.`."""
    if block_type == BlockType.DOMAIN:
        return normalize_domain(value)
    return (value or "").strip().lower()
