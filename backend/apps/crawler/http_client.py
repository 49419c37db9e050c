# apps/crawler/http_client.py

import logging
import time
from dataclasses import dataclass, field

import httpx

logger = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (compatible; LeadMailerBot/1.0)"


@dataclass
class PageResponse:
    """What the fetcher needs from one HTTP exchange."""
    url: str
    status_code: int | None
    text: str
    content_type: str = ""
    duration_ms: int = 0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status_code is not None and 200 <= self.status_code < 400

    @property
    def is_html(self) -> bool:
        return not self.content_type or "html" in self.content_type


@dataclass
class HttpClientConfig:
    timeout: float = 15.0
    max_retries: int = 2
    retry_delay: float = 1.0
    retry_backoff: float = 2.0
    verify_ssl: bool = True
    max_redirects: int = 5
    headers: dict[str, str] = field(default_factory=dict)


class HttpClient:
    """
    Thin httpx wrapper: one pooled client, retries with exponential backoff
    on connection errors, 429 and 5xx. Never raises; failures come back as
    a PageResponse with ``error`` set.
    """

    def __init__(self, config: HttpClientConfig | None = None, transport: httpx.BaseTransport | None = None):
        self.config = config or HttpClientConfig()
        self._client = httpx.Client(
            timeout=self.config.timeout,
            follow_redirects=True,
            max_redirects=self.config.max_redirects,
            verify=self.config.verify_ssl,
            headers={
                "User-Agent": USER_AGENT,
                "Accept": "text/html,application/xhtml+xml;q=0.9,*/*;q=0.8",
                **self.config.headers,
            },
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _should_retry(self, status_code: int | None, attempt: int) -> bool:
        if attempt >= self.config.max_retries:
            return False
        if status_code is None:
            return True
        return status_code >= 500 or status_code == 429

    def _sleep_before_retry(self, url: str, attempt: int, reason: str) -> None:
        delay = self.config.retry_delay * (self.config.retry_backoff ** attempt)
        logger.warning(f"Retry {attempt + 1}/{self.config.max_retries} for {url} ({reason}), waiting {delay:.1f}s")
        time.sleep(delay)

    def get(self, url: str) -> PageResponse:
        attempt = 0
        last_error = None

        while True:
            start = time.monotonic()
            try:
                response = self._client.get(url)
            except httpx.HTTPError as e:
                last_error = f"{e.__class__.__name__}: {e}"
                if not self._should_retry(None, attempt):
                    break
                self._sleep_before_retry(url, attempt, last_error)
                attempt += 1
                continue

            if self._should_retry(response.status_code, attempt):
                self._sleep_before_retry(url, attempt, f"status={response.status_code}")
                attempt += 1
                continue

            return PageResponse(
                url=str(response.url),
                status_code=response.status_code,
                text=response.text,
                content_type=response.headers.get("content-type", "").split(";")[0].strip(),
                duration_ms=int((time.monotonic() - start) * 1000),
            )

        return PageResponse(url=url, status_code=None, text="", error=last_error)
