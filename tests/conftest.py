# File: tests/conftest.py
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List, Optional, Union

import pytest
from aiohttp import web

from page_scout.config import DiscoveryConfig
from page_scout.crawler.models import FetchedPage
from page_scout.crawler.rate_limit import Pacer
from page_scout.exceptions import HttpStatusError
from page_scout.parser.html_parser import extract_title

Response = Union[str, bytes, Exception]


class FakeFetcher:
    """
    In-memory replacement for Fetcher.
    ``pages`` maps URL -> HTML (or an exception to raise), ``xml`` maps URL -> sitemap body.
    Unknown URLs answer with HTTP 404.
    """

    def __init__(self, pages: Optional[Dict[str, Response]] = None, xml: Optional[Dict[str, Response]] = None):
        self.pages = pages or {}
        self.xml = xml or {}
        self.page_calls: List[str] = []
        self.xml_calls: List[str] = []

    async def fetch_webpage(self, url: str, timeout: Optional[float] = None) -> FetchedPage:
        self.page_calls.append(url)
        body = self.pages.get(url)
        if body is None:
            raise HttpStatusError(url, 404, "Not Found")
        if isinstance(body, Exception):
            raise body
        return FetchedPage(url=url, html=body, title=extract_title(body))

    async def fetch_xml(self, url: str, timeout: Optional[float] = None) -> bytes:
        self.xml_calls.append(url)
        body = self.xml.get(url)
        if body is None:
            raise HttpStatusError(url, 404, "Not Found")
        if isinstance(body, Exception):
            raise body
        return body.encode("utf-8") if isinstance(body, str) else body


@pytest.fixture()
def fake_fetcher():
    """Factory: ``fake_fetcher(pages={...}, xml={...})``."""
    return FakeFetcher


@pytest.fixture()
def no_delay() -> Pacer:
    """Pacer without sleeping; still counts waits."""
    return Pacer(0)


@pytest.fixture()
def fast_config() -> DiscoveryConfig:
    """
    Return a DiscoveryConfig suitable for local test servers.
    """
    return DiscoveryConfig(
        user_agent="TestAgent/1.0",
        rate_limit_delay=0,
        sitemap_timeout=2.0,
        crawl_timeout=2.0,
        page_timeout=2.0,
    )


@pytest.fixture()
def serve_app(unused_tcp_port: int):
    """Start an aiohttp app on a free port; ``async with serve_app(app) as base_url``."""

    @asynccontextmanager
    async def _serve(app: web.Application) -> AsyncIterator[str]:
        runner = web.AppRunner(app)
        await runner.setup()
        site = web.TCPSite(runner, "127.0.0.1", unused_tcp_port)
        await site.start()
        try:
            yield f"http://127.0.0.1:{unused_tcp_port}"
        finally:
            await runner.cleanup()

    return _serve


def html_links(*hrefs: str, title: Optional[str] = None) -> str:
    head = f"<head><title>{title}</title></head>" if title else ""
    links = "".join(f'<a href="{h}">{h}</a>' for h in hrefs)
    return f"<html>{head}<body>{links}</body></html>"


@pytest.fixture()
def make_html():
    """Factory: ``make_html("/a", "/b", title="T")`` -> HTML with those links."""
    return html_links


def urlset(*locs: str) -> str:
    entries = "".join(f"<url><loc>{loc}</loc></url>" for loc in locs)
    return f'<?xml version="1.0" encoding="UTF-8"?><urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">{entries}</urlset>'


def sitemap_index(*locs: str) -> str:
    entries = "".join(f"<sitemap><loc>{loc}</loc></sitemap>" for loc in locs)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        f'<sitemapindex xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">{entries}</sitemapindex>'
    )


@pytest.fixture()
def make_urlset():
    return urlset


@pytest.fixture()
def make_index():
    return sitemap_index
