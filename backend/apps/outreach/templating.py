# apps/outreach/templating.py

"""
Template rendering for outreach messages.

Only the keys in ``PLACEHOLDERS`` are substituted. Anything else written as
``{{ name }}``, and known keys without a value, is left in the text as
written so a reviewer can spot it.
"""

import re
from dataclasses import dataclass
from typing import Protocol

from django.conf import settings

PLACEHOLDERS = (
    "website_url",
    "website_title",
    "domain",
    "contact_name",
    "contact_email",
    "contact_role",
    "platform",
    "page_count",
    "word_count",
    "sender_name",
    "sender_company",
)

_PLACEHOLDER_RE = re.compile(r"\{\{\s*([a-zA-Z_][a-zA-Z0-9_]*)\s*\}\}")


@dataclass
class RenderedMessage:
    subject: str
    body: str
    preheader: str = ""


class TemplateRenderer(Protocol):
    def render(self, template, context: dict) -> RenderedMessage:
        ...


def render_text(text: str, context: dict) -> str:
    """Substitute known placeholders; never raises."""
    if not text:
        return ""

    def replace(match):
        key = match.group(1)
        if key not in PLACEHOLDERS:
            return match.group(0)
        value = context.get(key)
        if value is None or value == "":
            return match.group(0)
        return str(value)

    return _PLACEHOLDER_RE.sub(replace, text)


def build_context(site, contact) -> dict:
    return {
        "website_url": site.url,
        "website_title": site.title or site.domain,
        "domain": site.domain,
        "contact_name": contact.name,
        "contact_email": contact.email,
        "contact_role": contact.role,
        "platform": site.detected_platform,
        "page_count": site.page_count,
        "word_count": site.word_count,
        "sender_name": getattr(settings, "LEADMAILER_SENDER_NAME", ""),
        "sender_company": getattr(settings, "LEADMAILER_SENDER_COMPANY", ""),
    }


class PlaceholderRenderer:
    def render(self, template, context: dict) -> RenderedMessage:
        return RenderedMessage(
            subject=render_text(template.subject_template, context),
            body=render_text(template.body_template, context),
            preheader=render_text(template.preheader, context),
        )
