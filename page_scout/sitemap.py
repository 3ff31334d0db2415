# File: page_scout/sitemap.py
"""page_scout.sitemap: Загрузка sitemap.xml сайта с рекурсивным обходом sitemap index."""

from __future__ import annotations

from typing import List, Optional, Protocol

from page_scout.exceptions import FetchError, SitemapParseError
from page_scout.logger import get_logger
from page_scout.parser.sitemap_parser import parse_sitemap
from page_scout.utils import is_same_domain, origin_of, root_domain

__all__ = ("SITEMAP_MAX_DEPTH", "SITEMAP_TIMEOUT", "SitemapResolver", "resolve_sitemap")

SITEMAP_MAX_DEPTH = 2
SITEMAP_TIMEOUT = 15.0

logger = get_logger("sitemap")


class XmlFetcher(Protocol):
    async def fetch_xml(self, url: str, timeout: Optional[float] = None) -> bytes: ...


class SitemapResolver:
    """Возвращает плоский список URL страниц из ``<origin>/sitemap.xml``.

    Ошибка загрузки или разбора любой ветки даёт для неё пустой список,
    остальные ветки индекса продолжают участвовать в результате.
    """

    def __init__(
        self,
        fetcher: XmlFetcher,
        *,
        max_depth: int = SITEMAP_MAX_DEPTH,
        timeout: float = SITEMAP_TIMEOUT,
    ) -> None:
        self.fetcher = fetcher
        self.max_depth = max_depth
        self.timeout = timeout

    async def resolve(self, root_url: str) -> List[str]:
        """URL страниц того же домена (без учёта ``www.``), найденные в sitemap.

        Raises:
            InvalidUrlError: некорректный *root_url*.
        """
        domain = root_domain(root_url)
        sitemap_url = f"{origin_of(root_url)}/sitemap.xml"
        urls = await self._collect(sitemap_url, 0)
        same_domain = [u for u in urls if is_same_domain(u, domain)]
        dropped = len(urls) - len(same_domain)
        if dropped:
            logger.debug("Sitemap %s: dropped %d cross-domain URLs", sitemap_url, dropped)
        return same_domain

    async def _collect(self, url: str, depth: int) -> List[str]:
        if depth > self.max_depth:
            logger.debug("Sitemap depth limit reached at %s", url)
            return []
        try:
            content = await self.fetcher.fetch_xml(url, timeout=self.timeout)
            doc = parse_sitemap(content)
        except (FetchError, SitemapParseError, ValueError) as exc:
            logger.warning("Sitemap fetch failed for %s: %s", url, exc)
            return []

        if doc.kind == "sitemapindex":
            urls: List[str] = []
            for nested in doc.locs:
                urls.extend(await self._collect(nested, depth + 1))
            return urls
        if doc.kind == "urlset":
            return doc.locs
        logger.debug("Sitemap %s has no urlset/sitemapindex root", url)
        return []


async def resolve_sitemap(
    root_url: str,
    fetcher: XmlFetcher,
    *,
    max_depth: int = SITEMAP_MAX_DEPTH,
    timeout: float = SITEMAP_TIMEOUT,
) -> List[str]:
    """Функциональная обёртка над :class:`SitemapResolver`."""
    return await SitemapResolver(fetcher, max_depth=max_depth, timeout=timeout).resolve(root_url)
