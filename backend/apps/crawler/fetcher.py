# apps/crawler/fetcher.py

"""
Content Fetcher collaborator.

A fetcher takes a site's domain and a page budget and returns the raw
content of up to that many pages, homepage first. Implementations raise
``FetchError`` when nothing usable could be fetched.
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Protocol
from urllib.parse import urldefrag, urljoin, urlparse

from bs4 import BeautifulSoup

from apps.common.exceptions import TransientError

from .http_client import HttpClient, HttpClientConfig
from .rate_limit import DomainThrottle

logger = logging.getLogger(__name__)

SKIPPED_EXTENSIONS = (
    ".jpg", ".jpeg", ".png", ".gif", ".svg", ".webp", ".ico",
    ".pdf", ".zip", ".css", ".js", ".xml", ".mp4", ".mp3",
)


@dataclass
class FetchedPage:
    url: str
    content: str

    def to_dict(self) -> dict:
        return {"url": self.url, "content": self.content}


class FetchError(TransientError):
    """The site could not be fetched at all."""


class ContentFetcher(Protocol):
    def fetch(self, domain: str, max_pages: int) -> list[FetchedPage]:
        ...


def _same_site(url: str, domain: str) -> bool:
    host = urlparse(url).netloc.lower().split(":")[0]
    if host.startswith("www."):
        host = host[4:]
    return host == domain


def discover_links(content: str, base_url: str, domain: str) -> list[str]:
    """Internal page links of an HTML document, fragment-free, in document order."""
    soup = BeautifulSoup(content, "lxml")
    links = []
    for anchor in soup.find_all("a", href=True):
        href = anchor["href"].strip()
        if href.startswith(("mailto:", "tel:", "javascript:")):
            continue
        url, _ = urldefrag(urljoin(base_url, href))
        if not url.startswith(("http://", "https://")):
            continue
        if urlparse(url).path.lower().endswith(SKIPPED_EXTENSIONS):
            continue
        if _same_site(url, domain) and url not in links:
            links.append(url)
    return links


class HttpContentFetcher:
    """
    Breadth-first fetch of a site over HTTPS (falling back to HTTP for the
    homepage), following internal links until the page budget is spent.
    """

    def __init__(self, client: HttpClient | None = None, throttle: DomainThrottle | None = None):
        self.client = client or HttpClient(HttpClientConfig())
        self.throttle = throttle or DomainThrottle()

    def _get(self, url: str, domain: str):
        self.throttle.wait(domain)
        return self.client.get(url)

    def _fetch_homepage(self, domain: str):
        last = None
        for scheme in ("https", "http"):
            response = self._get(f"{scheme}://{domain}/", domain)
            if response.ok and response.is_html:
                return response
            last = response
        reason = last.error or f"HTTP {last.status_code}"
        raise FetchError(f"Could not fetch homepage of {domain}: {reason}")

    def fetch(self, domain: str, max_pages: int) -> list[FetchedPage]:
        domain = domain.lower()
        if domain.startswith("www."):
            domain = domain[4:]

        homepage = self._fetch_homepage(domain)
        pages = [FetchedPage(url=homepage.url, content=homepage.text)]
        visited = {homepage.url}
        queue = deque(discover_links(homepage.text, homepage.url, domain))

        while queue and len(pages) < max_pages:
            url = queue.popleft()
            if url in visited:
                continue
            visited.add(url)

            response = self._get(url, domain)
            if not response.ok or not response.is_html:
                logger.debug(f"Skipping {url}: {response.error or response.status_code}")
                continue

            pages.append(FetchedPage(url=response.url, content=response.text))
            for link in discover_links(response.text, response.url, domain):
                if link not in visited and link not in queue:
                    queue.append(link)

        logger.info(f"Fetched {len(pages)} page(s) from {domain}")
        return pages
