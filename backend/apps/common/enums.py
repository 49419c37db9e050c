# apps/common/enums.py

from django.db import models


class SiteStatus(models.TextChoices):
    """Crawl lifecycle of a site."""
    PENDING = "pending", "Pending"
    CRAWLING = "crawling", "Crawling"
    COMPLETED = "completed", "Completed"
    FAILED = "failed", "Failed"
    PER_REVIEW = "per_review", "Per Review"


class ContactSource(models.TextChoices):
    """Where on a site an e-mail address was found."""
    CONTACT_PAGE = "contact_page", "Contact Page"
    ABOUT_PAGE = "about_page", "About Page"
    TEAM_PAGE = "team_page", "Team Page"
    HEADER = "header", "Header"
    FOOTER = "footer", "Footer"
    BODY = "body", "Body"


class ReviewStatus(models.TextChoices):
    """Status states for review queue items."""
    PENDING = "pending", "Pending"
    APPROVED = "approved", "Approved"
    REJECTED = "rejected", "Rejected"
    SENT = "sent", "Sent"
    FAILED = "failed", "Failed"


class DeliveryStatus(models.TextChoices):
    """Outcome recorded on a sent record."""
    SENT = "sent", "Sent"
    FAILED = "failed", "Failed"
    BOUNCED = "bounced", "Bounced"


class BlockType(models.TextChoices):
    EMAIL = "email", "Email"
    DOMAIN = "domain", "Domain"


class BlockSource(models.TextChoices):
    """Provenance of a blocklist entry."""
    MANUAL = "manual", "Manual"
    IMPORTED = "imported", "Imported"
    AUTO = "auto", "Auto-detected"
