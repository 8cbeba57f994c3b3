"""
Article fetcher - HTTP GET with a hard deadline, status classification and retries.
"""

import codecs
import time
from typing import Optional

import requests

from config import Settings
from .errors import AnalysisError, ErrorKind, transient
from .extractor import ExtractedArticle, extract
from .retry import RetryPolicy

ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
CHUNK_SIZE = 64 * 1024


def classify_status(status: int, reason: str, url: str) -> AnalysisError:
    """Map a non-2xx HTTP status to a tagged error."""
    if status in (401, 403):
        return AnalysisError(
            ErrorKind.ACCESS_DENIED,
            f"Access denied ({status}). The article may be behind a paywall or login.",
            status_code=status,
        )
    if status == 404:
        return AnalysisError(ErrorKind.NOT_FOUND, f"Article not found (404): {url}", status_code=404)
    if status == 429:
        return AnalysisError(
            ErrorKind.TRANSIENT,
            "Rate limited by the website (429). Please try again later.",
            status_code=429,
        )
    if 500 <= status < 600:
        return AnalysisError(
            ErrorKind.TRANSIENT,
            f"Server error ({status}). The website may be temporarily unavailable.",
            status_code=status,
        )
    return AnalysisError(ErrorKind.DETERMINISTIC, f"HTTP {status}: {reason}", status_code=status)


def _charset(response: requests.Response) -> str:
    """Declared charset, else UTF-8 (requests would guess ISO-8859-1 for text/html)."""
    content_type = response.headers.get("Content-Type") or ""
    if "charset=" in content_type.lower() and response.encoding:
        try:
            return codecs.lookup(response.encoding).name
        except LookupError:
            pass
    return "utf-8"


class Fetcher:
    """
    Fetches article HTML.

    Only transient failures (network, timeout, 429, 5xx, empty body) are
    retried. Access denied, not found and content errors fail immediately.
    """

    def __init__(
        self,
        settings: Settings = None,
        session: Optional[requests.Session] = None,
        policy: RetryPolicy = None,
    ):
        self.settings = settings or Settings()
        self.session = session or requests.Session()
        self.policy = policy or RetryPolicy(
            max_retries=self.settings.fetch_max_retries,
            base_delay=self.settings.fetch_retry_delay,
        )

    @property
    def attempts(self) -> int:
        """Attempts made by the most recent fetch()/scrape()."""
        return self.policy.attempts

    def _headers(self) -> dict:
        return {
            "User-Agent": self.settings.user_agent,
            "Accept": ACCEPT,
            "Accept-Language": "en-US,en;q=0.9",
        }

    def _get_once(self, url: str, timeout: float = None) -> str:
        if timeout is None:
            timeout = self.settings.fetch_timeout
        deadline = time.monotonic() + timeout

        try:
            response = self.session.get(
                url,
                headers=self._headers(),
                timeout=timeout,
                allow_redirects=True,
                stream=True,
            )
        except requests.Timeout:
            raise transient(f"Request timed out after {timeout:g}s", url=url)
        except requests.RequestException as e:
            raise transient(f"Network error: {e}", url=url)

        try:
            if not response.ok:
                raise classify_status(response.status_code, response.reason or "", url)

            # requests' timeout is per socket read; enforce the total deadline here
            chunks = []
            try:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if time.monotonic() > deadline:
                        raise transient(f"Request timed out after {timeout:g}s", url=url)
                    chunks.append(chunk)
            except requests.RequestException as e:
                raise transient(f"Network error while reading body: {e}", url=url)

            body = b"".join(chunks)
            html = body.decode(_charset(response), errors="replace")
        finally:
            response.close()

        if not html.strip():
            raise transient("Empty response received", url=url)
        return html

    def _on_retry(self, url: str):
        def log(attempt: int, error: Exception) -> None:
            print(f"[fetch] Attempt {attempt} failed for {url[:80]}: {error}; retrying")
        return log

    def fetch(self, url: str, timeout: float = None) -> str:
        """
        GET the page. Raises AnalysisError after the retry policy gives up.

        timeout bounds each attempt and defaults to settings.fetch_timeout.
        """
        return self.policy.run(lambda: self._get_once(url, timeout), on_retry=self._on_retry(url))

    def scrape(self, url: str, timeout: float = None) -> ExtractedArticle:
        """Fetch and extract under one retry policy."""
        def attempt() -> ExtractedArticle:
            html = self._get_once(url, timeout)
            return extract(html, min_length=self.settings.min_content_length)

        return self.policy.run(attempt, on_retry=self._on_retry(url))
