# apps/crawler/text.py

"""Helpers for turning fetched page content into countable text."""

import re

from bs4 import BeautifulSoup

_WHITESPACE = re.compile(r"\s+")


def strip_tags(content: str) -> str:
    """Visible text of an HTML fragment, whitespace-normalized."""
    if not content:
        return ""
    soup = BeautifulSoup(content, "lxml")
    for node in soup(["script", "style", "noscript", "template"]):
        node.decompose()
    text = soup.get_text(" ")
    return _WHITESPACE.sub(" ", text).strip()


def extract_title(content: str) -> str:
    if not content:
        return ""
    soup = BeautifulSoup(content, "lxml")
    if soup.title and soup.title.string:
        return _WHITESPACE.sub(" ", soup.title.string).strip()
    return ""


def count_words(text: str) -> int:
    """Whitespace token count of already stripped text."""
    text = text.strip()
    if not text:
        return 0
    return len(text.split())
