# page_scout/crawler/fetcher.py
"""
Fetcher module: HTTP GET primitive with timeout, content-type checks and optional retry/backoff.

The aiohttp session is injected by the caller and owned by it; :meth:`Fetcher.open`
is a convenience context manager that creates and closes one.
"""
from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, Protocol, Sequence, Tuple

from aiohttp import ClientError, ClientResponse, ClientSession, ClientTimeout

from page_scout.config import DiscoveryConfig
from page_scout.crawler.models import FetchedPage
from page_scout.exceptions import (
    FetchError,
    FetchTimeoutError,
    HttpStatusError,
    UnsupportedContentTypeError,
)
from page_scout.logger import get_logger
from page_scout.parser.html_parser import extract_title
from page_scout.utils import validate_root_url

__all__ = ("Fetcher", "SiteFetcher", "fetcher_scope", "HTML_ACCEPT", "XML_ACCEPT", "RETRY_STATUS")

HTML_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
XML_ACCEPT = "application/xml, text/xml, */*"
RETRY_STATUS: Sequence[int] = tuple(range(500, 600)) + (429,)

_HTML_TYPES = ("text/html", "application/xhtml")

logger = get_logger("fetcher")


class Fetcher:
    """Handles HTTP fetching of webpages and sitemaps for one discovery run."""

    def __init__(
        self,
        session: ClientSession,
        config: Optional[DiscoveryConfig] = None,
        retry_status: Sequence[int] = RETRY_STATUS,
    ) -> None:
        self.session = session
        self.config = config or DiscoveryConfig()
        self._retry_status = retry_status

    @classmethod
    @asynccontextmanager
    async def open(cls, config: Optional[DiscoveryConfig] = None) -> AsyncIterator["Fetcher"]:
        """Create a session-backed Fetcher and close the session on exit."""
        config = config or DiscoveryConfig()
        async with ClientSession(
            headers={"User-Agent": config.user_agent},
            raise_for_status=False,
        ) as session:
            yield cls(session, config)

    async def fetch_webpage(self, url: str, timeout: Optional[float] = None) -> FetchedPage:
        """
        Fetch an HTML page.

        Raises InvalidUrlError for non-http(s) URLs and a FetchError subclass
        for timeouts, non-2xx statuses and non-HTML content types.
        """
        validate_root_url(url)
        timeout = self.config.page_timeout if timeout is None else timeout
        final_url, content_type, body = await self._get(url, timeout, HTML_ACCEPT)
        if not any(t in content_type for t in _HTML_TYPES):
            raise UnsupportedContentTypeError(url, content_type)
        html = body.decode(_charset(content_type), errors="replace")
        return FetchedPage(url=final_url, html=html, title=extract_title(html))

    async def fetch_xml(self, url: str, timeout: Optional[float] = None) -> bytes:
        """
        Fetch a sitemap document and return the raw (possibly gzipped) body.

        HTML responses are rejected: many sites answer a missing sitemap with
        a soft-404 page.
        """
        validate_root_url(url)
        timeout = self.config.sitemap_timeout if timeout is None else timeout
        _, content_type, body = await self._get(url, timeout, XML_ACCEPT)
        if any(t in content_type for t in _HTML_TYPES):
            raise UnsupportedContentTypeError(url, content_type)
        return body

    async def _get(self, url: str, timeout: float, accept: str) -> Tuple[str, str, bytes]:
        headers = {
            "User-Agent": self.config.user_agent,
            "Accept": accept,
            "Accept-Language": "en-US,en;q=0.9",
        }
        attempts = 0
        while True:
            try:
                async with self.session.get(
                    url,
                    headers=headers,
                    timeout=ClientTimeout(total=timeout),
                    allow_redirects=True,
                ) as resp:
                    if resp.status in self._retry_status and attempts < self.config.retry_times:
                        raise _Retryable(resp.status)
                    _check_status(url, resp)
                    content_type = resp.headers.get("Content-Type", "").lower()
                    body = await resp.read()
                    return str(resp.url), content_type, body
            except asyncio.TimeoutError as exc:
                raise FetchTimeoutError(url, timeout) from exc
            except _Retryable as exc:
                attempts += 1
                backoff = min(60, 2**attempts)
                logger.debug(
                    "Retry %d/%d for %s after HTTP %d (%.0f s)",
                    attempts, self.config.retry_times, url, exc.status, backoff,
                )
                await asyncio.sleep(backoff)
            except ClientError as exc:
                raise FetchError(url, f"{type(exc).__name__}: {exc}") from exc


class _Retryable(Exception):
    def __init__(self, status: int) -> None:
        self.status = status
        super().__init__(status)


def _check_status(url: str, resp: ClientResponse) -> None:
    if not 200 <= resp.status < 300:
        raise HttpStatusError(url, resp.status, resp.reason)


def _charset(content_type: str) -> str:
    for part in content_type.split(";")[1:]:
        key, _, value = part.strip().partition("=")
        if key == "charset" and value:
            charset = value.strip("\"' ")
            try:
                "".encode(charset)
            except LookupError:
                break
            return charset
    return "utf-8"


class SiteFetcher(Protocol):
    """What discovery and scraping need from a fetcher (``Fetcher`` or a test double)."""

    async def fetch_webpage(self, url: str, timeout: Optional[float] = None) -> FetchedPage: ...

    async def fetch_xml(self, url: str, timeout: Optional[float] = None) -> bytes: ...


@asynccontextmanager
async def fetcher_scope(
    fetcher: Optional[SiteFetcher], config: Optional[DiscoveryConfig] = None
) -> AsyncIterator[SiteFetcher]:
    """Yield *fetcher* as is, or a session-backed :class:`Fetcher` for the duration of the block."""
    if fetcher is not None:
        yield fetcher
        return
    async with Fetcher.open(config) as own:
        yield own
