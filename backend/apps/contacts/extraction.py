# apps/contacts/extraction.py

"""
Contact extraction from a site's content snapshot.

Within a page, addresses are classified in this order: ``mailto:`` links,
then header and footer regions, then the rest of the body; the first
classification of an address on a page sticks. Pages whose URL names a
contact, team or about page tag every address on them with that source.
Across pages the occurrence with the highest priority wins.
"""

import re
from dataclasses import dataclass
from urllib.parse import unquote

from bs4 import BeautifulSoup

from apps.common.enums import ContactSource

from .models import calculate_priority
from .url_patterns import page_source

EMAIL_RE = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
ASSET_RE = re.compile(
    r"\.(jpg|jpeg|png|gif|svg|webp|bmp|ico|pdf|doc|docx|xls|xlsx|zip|rar|js|css)$",
    re.IGNORECASE,
)
RETINA_RE = re.compile(r"@\d+x[-.]", re.IGNORECASE)
PHONE_RE = re.compile(r"(?:\+|00)?\d[\d\s().\-]{7,}\d")

CONTEXT_CHARS = 100

TITLES = [
    # English
    "Co-Founder", "Founder", "CEO", "CTO", "CFO", "COO", "CMO", "Vice President", "President",
    "Managing Director", "Director", "Manager", "Owner", "Partner", "Head of", "Chief",
    # Dutch
    "Medeoprichter", "Oprichter", "Directeur", "Eigenaar", "Zaakvoerder", "Bedrijfsleider", "Hoofd",
    # German
    "Geschäftsführer", "Gründer", "Inhaber", "Leiter", "Direktor",
    # French
    "Fondateur", "Gérant", "Président",
    # Spanish
    "Fundador", "Gerente", "Presidente",
    # Italian
    "Fondatore", "Titolare", "Amministratore",
]
_TITLE_RE = re.compile(
    r"(?<!\w)(" + "|".join(re.escape(title) for title in TITLES) + r")(?!\w)",
    re.IGNORECASE,
)

_NAME = r"([A-Z][a-zà-ÿ'\-]+(?:\s+[A-Z][a-zà-ÿ'\-]+){1,2})"
NAME_PATTERNS = [
    re.compile(r"(?i:contact|e-?mail|reach|write to|ask for)\s*:?\s+" + _NAME),
    re.compile(_NAME + r"\s*[,|\-–]\s*(?:" + "|".join(re.escape(title) for title in TITLES) + r")"),
]
_LINK_NAME_RE = re.compile(r"^" + _NAME + r"$")


@dataclass
class ExtractedContact:
    email: str
    source_type: str
    source_url: str = ""
    name: str = ""
    role: str = ""
    phone: str = ""
    context: str = ""

    @property
    def priority(self) -> int:
        return calculate_priority(self.source_type, bool(self.name), bool(self.role))

    def to_fields(self) -> dict:
        return {
            "name": self.name[:255],
            "role": self.role[:255],
            "phone": self.phone[:50],
            "source_type": self.source_type,
            "source_url": self.source_url[:2048],
            "source_context": self.context,
            "priority": self.priority,
        }


def is_plausible_email(email: str) -> bool:
    """Rejects asset filenames that look like addresses ('logo@2x.png')."""
    if ASSET_RE.search(email) or RETINA_RE.search(email):
        return False
    local, _, domain = email.partition("@")
    return bool(local) and "." in domain and ".." not in email


def _clean(text: str) -> str:
    return re.sub(r"\s+", " ", text or "").strip()


def context_around(text: str, email: str, chars: int = CONTEXT_CHARS) -> str:
    position = text.lower().find(email)
    if position < 0:
        return ""
    start = max(0, position - chars)
    return _clean(text[start:position + len(email) + chars])


def name_from_context(context: str) -> str:
    for pattern in NAME_PATTERNS:
        match = pattern.search(context or "")
        if match:
            return match.group(1).strip()
    return ""


def role_from_context(context: str) -> str:
    match = _TITLE_RE.search(context or "")
    return match.group(1) if match else ""


def phone_from_context(context: str) -> str:
    match = PHONE_RE.search(context or "")
    return _clean(match.group(0)) if match else ""


def _region_of(node) -> str:
    if node.find_parent("header") is not None:
        return ContactSource.HEADER
    if node.find_parent("footer") is not None:
        return ContactSource.FOOTER
    return ContactSource.BODY


def _mailto_addresses(href: str) -> list[str]:
    """'mailto:a@x.com,b@x.com?subject=Hi' -> ['a@x.com', 'b@x.com']."""
    recipients = unquote(href.split(":", 1)[1]).split("?", 1)[0]
    return [address.strip().lower() for address in re.split(r"[,;]", recipients) if address.strip()]


def extract_from_page(url: str, content: str) -> list[ExtractedContact]:
    """All plausible addresses on one page, each classified once."""
    soup = BeautifulSoup(content or "", "lxml")
    for node in soup(["script", "style", "noscript"]):
        node.decompose()

    forced_source = page_source(url)
    page_text = soup.get_text(" ")
    found: dict[str, ExtractedContact] = {}

    def add(email: str, region: str, context: str, name: str = ""):
        email = email.strip().lower().strip(".")
        if email in found or not is_plausible_email(email):
            return
        context = context or context_around(page_text, email)
        found[email] = ExtractedContact(
            email=email,
            source_type=forced_source or region,
            source_url=url,
            name=name or name_from_context(context),
            role=role_from_context(context),
            phone=phone_from_context(context),
            context=context,
        )

    for link in soup.find_all("a", href=re.compile(r"^\s*mailto:", re.IGNORECASE)):
        link_text = _clean(link.get_text(" "))
        link_name = link_text if _LINK_NAME_RE.match(link_text) else ""
        parent = link.parent if link.parent is not None else link
        addresses = _mailto_addresses(link["href"])
        for address in addresses:
            # Link text names the recipient only when there is one
            add(address, _region_of(link), _clean(parent.get_text(" ")), link_name if len(addresses) == 1 else "")

    for tag, region in (("header", ContactSource.HEADER), ("footer", ContactSource.FOOTER)):
        for node in soup.find_all(tag):
            text = node.get_text(" ")
            for email in EMAIL_RE.findall(text):
                add(email, region, context_around(text, email.lower()))

    for email in EMAIL_RE.findall(page_text):
        add(email, ContactSource.BODY, "")

    return list(found.values())


def extract_contacts(pages: list[dict]) -> list[ExtractedContact]:
    """
    Extract and de-duplicate contacts across a snapshot. Result is ordered
    by priority, highest first.
    """
    best: dict[str, ExtractedContact] = {}
    for page in pages:
        for contact in extract_from_page(page.get("url", ""), page.get("content", "")):
            current = best.get(contact.email)
            if current is None or contact.priority > current.priority:
                best[contact.email] = contact
    return sorted(best.values(), key=lambda c: -c.priority)
