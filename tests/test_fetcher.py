# File: tests/test_fetcher.py
from __future__ import annotations

import asyncio
import gzip

import pytest
from aiohttp import web

from page_scout.config import DiscoveryConfig
from page_scout.crawler.fetcher import Fetcher
from page_scout.exceptions import (
    FetchError,
    FetchTimeoutError,
    HttpStatusError,
    InvalidUrlError,
    UnsupportedContentTypeError,
)


def _app() -> web.Application:
    app = web.Application()

    async def page(request):
        assert request.headers["User-Agent"] == "TestAgent/1.0"
        return web.Response(
            text="<html><head><title> Hello </title></head><body>Hi</body></html>",
            content_type="text/html",
        )

    async def redirect(_):
        raise web.HTTPFound("/page")

    async def missing(_):
        return web.Response(status=404, text="nope")

    async def as_json(_):
        return web.json_response({"ok": True})

    async def slow(_):
        await asyncio.sleep(2)
        return web.Response(text="late", content_type="text/html")

    async def latin1(_):
        body = "<title>Café</title>".encode("latin-1")
        return web.Response(body=body, headers={"Content-Type": "text/html; charset=latin-1"})

    async def sitemap(_):
        return web.Response(text="<urlset/>", content_type="application/xml")

    async def sitemap_gz(_):
        return web.Response(body=gzip.compress(b"<urlset/>"), content_type="application/octet-stream")

    app.router.add_get("/page", page)
    app.router.add_get("/redirect", redirect)
    app.router.add_get("/missing", missing)
    app.router.add_get("/json", as_json)
    app.router.add_get("/slow", slow)
    app.router.add_get("/latin1", latin1)
    app.router.add_get("/sitemap.xml", sitemap)
    app.router.add_get("/sitemap.xml.gz", sitemap_gz)
    return app


@pytest.mark.asyncio()
async def test_fetch_webpage_ok(serve_app, fast_config):
    async with serve_app(_app()) as base:
        async with Fetcher.open(fast_config) as fetcher:
            page = await fetcher.fetch_webpage(f"{base}/page")

    assert page.url == f"{base}/page"
    assert page.title == "Hello"
    assert "<body>Hi</body>" in page.html


@pytest.mark.asyncio()
async def test_fetch_webpage_follows_redirects(serve_app, fast_config):
    async with serve_app(_app()) as base:
        async with Fetcher.open(fast_config) as fetcher:
            page = await fetcher.fetch_webpage(f"{base}/redirect")

    assert page.url == f"{base}/page"


@pytest.mark.asyncio()
async def test_fetch_webpage_decodes_charset(serve_app, fast_config):
    async with serve_app(_app()) as base:
        async with Fetcher.open(fast_config) as fetcher:
            page = await fetcher.fetch_webpage(f"{base}/latin1")

    assert page.title == "Café"


@pytest.mark.asyncio()
async def test_http_error_status(serve_app, fast_config):
    async with serve_app(_app()) as base:
        async with Fetcher.open(fast_config) as fetcher:
            with pytest.raises(HttpStatusError) as exc_info:
                await fetcher.fetch_webpage(f"{base}/missing")

    assert exc_info.value.status == 404
    assert isinstance(exc_info.value, FetchError)


@pytest.mark.asyncio()
async def test_non_html_rejected(serve_app, fast_config):
    async with serve_app(_app()) as base:
        async with Fetcher.open(fast_config) as fetcher:
            with pytest.raises(UnsupportedContentTypeError) as exc_info:
                await fetcher.fetch_webpage(f"{base}/json")

    assert "application/json" in exc_info.value.content_type


@pytest.mark.asyncio()
async def test_timeout(serve_app, fast_config):
    async with serve_app(_app()) as base:
        async with Fetcher.open(fast_config) as fetcher:
            with pytest.raises(FetchTimeoutError) as exc_info:
                await fetcher.fetch_webpage(f"{base}/slow", timeout=0.3)

    assert exc_info.value.timeout == 0.3


@pytest.mark.asyncio()
async def test_connection_refused(unused_tcp_port, fast_config):
    async with Fetcher.open(fast_config) as fetcher:
        with pytest.raises(FetchError):
            await fetcher.fetch_webpage(f"http://127.0.0.1:{unused_tcp_port}/")


@pytest.mark.asyncio()
async def test_invalid_scheme(fast_config):
    async with Fetcher.open(fast_config) as fetcher:
        with pytest.raises(InvalidUrlError):
            await fetcher.fetch_webpage("ftp://example.com/file")


@pytest.mark.asyncio()
async def test_fetch_xml(serve_app, fast_config):
    async with serve_app(_app()) as base:
        async with Fetcher.open(fast_config) as fetcher:
            body = await fetcher.fetch_xml(f"{base}/sitemap.xml")
            gz = await fetcher.fetch_xml(f"{base}/sitemap.xml.gz")
            with pytest.raises(UnsupportedContentTypeError):
                await fetcher.fetch_xml(f"{base}/page")

    assert body == b"<urlset/>"
    assert gzip.decompress(gz) == b"<urlset/>"


@pytest.mark.asyncio()
async def test_retry_on_server_error(serve_app):
    app = web.Application()
    call_count = {"n": 0}

    async def flaky(_):
        call_count["n"] += 1
        if call_count["n"] == 1:
            return web.Response(status=503)
        return web.Response(text="<title>Recovered</title>", content_type="text/html")

    app.router.add_get("/flaky", flaky)
    config = DiscoveryConfig(user_agent="TestAgent/1.0", retry_times=1, page_timeout=5.0)

    async with serve_app(app) as base:
        async with Fetcher.open(config) as fetcher:
            page = await fetcher.fetch_webpage(f"{base}/flaky")

    assert page.title == "Recovered"
    assert call_count["n"] == 2


@pytest.mark.asyncio()
async def test_no_retry_by_default(serve_app, fast_config):
    app = web.Application()
    call_count = {"n": 0}

    async def failing(_):
        call_count["n"] += 1
        return web.Response(status=500)

    app.router.add_get("/", failing)

    async with serve_app(app) as base:
        async with Fetcher.open(fast_config) as fetcher:
            with pytest.raises(HttpStatusError):
                await fetcher.fetch_webpage(base)

    assert call_count["n"] == 1
