# File: page_scout/engine.py
"""page_scout.engine: Orchestration layer: sitemap → (при необходимости) обход ссылок → фильтр → ранжирование."""

from __future__ import annotations

import asyncio
from typing import Collection, Dict, Iterable, List, Optional

from page_scout.config import DiscoveryConfig, load_config
from page_scout.crawler.crawler import LinkCrawler
from page_scout.crawler.fetcher import SiteFetcher, fetcher_scope
from page_scout.crawler.models import DiscoveredPage
from page_scout.crawler.rate_limit import Pacer
from page_scout.filters import filter_content_pages, sort_by_content_likelihood
from page_scout.logger import logger
from page_scout.sitemap import SitemapResolver
from page_scout.utils import normalize_url, normalized_set, remove_duplicates, root_domain, validate_root_url

__all__ = ["discover_pages", "Engine"]


async def discover_pages(
    root_url: str,
    max_pages: Optional[int] = None,
    filter_patterns: Optional[Iterable[str]] = None,
    existing_urls: Optional[Collection[str]] = None,
    *,
    config: Optional[DiscoveryConfig] = None,
    fetcher: Optional[SiteFetcher] = None,
    pacer: Optional[Pacer] = None,
) -> List[DiscoveredPage]:
    """Находит контентные страницы сайта.

    Sitemap с не менее чем ``config.sitemap_min_urls`` адресами используется
    без обхода ссылок; иначе к нему добавляются результаты обхода. Объединённый
    список фильтруется, ранжируется и обрезается до *max_pages*.

    Сетевые ошибки только уменьшают результат; некорректный *root_url*
    приводит к :class:`~page_scout.exceptions.InvalidUrlError`.

    Args:
        root_url: корневой URL сайта (http/https).
        max_pages: лимит результата; по умолчанию ``config.max_pages``.
        filter_patterns: regex-исключения; по умолчанию ``config.filter_patterns``.
        existing_urls: уже известные вызывающему URL, для ``is_new``.
        config: параметры таймаутов, глубины и пауз.
        fetcher: готовый HTTP-клиент; если не задан, сессия создаётся на время вызова.
        pacer: пауза между запросами обхода; по умолчанию ``config.rate_limit_delay``.
    """
    config = config or DiscoveryConfig()
    root_url = validate_root_url(root_url)
    domain = root_domain(root_url)
    limit = config.max_pages if max_pages is None else max_pages
    if limit < 1:
        raise ValueError("max_pages must be >= 1")
    patterns = list(config.filter_patterns if filter_patterns is None else filter_patterns)
    known = normalized_set(existing_urls or ())

    logger.info("Discovering pages for %s (max: %d)", root_url, limit)

    titles: Dict[str, str] = {}
    async with fetcher_scope(fetcher, config) as http:
        resolver = SitemapResolver(http, max_depth=config.sitemap_max_depth, timeout=config.sitemap_timeout)
        sitemap_urls = await resolver.resolve(root_url)
        logger.info("Sitemap yielded %d URLs", len(sitemap_urls))

        if len(sitemap_urls) >= config.sitemap_min_urls:
            candidates = remove_duplicates(sitemap_urls)
        else:
            logger.info("Sitemap insufficient, falling back to link crawling")
            crawler = LinkCrawler(
                http,
                pacer if pacer is not None else Pacer(config.rate_limit_delay),
                max_depth=config.max_depth,
                timeout=config.crawl_timeout,
                max_visited=config.max_visited_pages,
            )
            crawled = await crawler.crawl_pages(root_url, limit)
            logger.info("Link crawling yielded %d URLs", len(crawled.urls))
            titles = crawled.titles
            candidates = remove_duplicates([*sitemap_urls, *crawled.urls])

    filtered = filter_content_pages(candidates, domain, patterns)
    logger.info("After filtering: %d content pages", len(filtered))

    ranked = sort_by_content_likelihood(filtered)[:limit]
    pages = [
        DiscoveredPage(url=url, title=titles.get(url), is_new=normalize_url(url) not in known)
        for url in ranked
    ]
    logger.info(
        "Discovered %d pages (%d new)", len(pages), sum(1 for p in pages if p.is_new)
    )
    return pages


class Engine:
    """Фасад для CLI и тестов: конфиг + синхронный запуск discover_pages с общим таймаутом."""

    @staticmethod
    def load_config(path: Optional[str]) -> DiscoveryConfig:
        """Загружает конфиг из YAML/JSON или использует значения по умолчанию."""
        return load_config(path)

    def __init__(self, config: Optional[DiscoveryConfig] = None) -> None:
        self.config = config or DiscoveryConfig()

    async def discover(
        self,
        root_url: str,
        max_pages: Optional[int] = None,
        filter_patterns: Optional[Iterable[str]] = None,
        existing_urls: Optional[Collection[str]] = None,
        *,
        timeout: Optional[float] = None,
    ) -> List[DiscoveredPage]:
        """Асинхронный запуск; *timeout* ограничивает всё обнаружение целиком."""
        coro = discover_pages(
            root_url, max_pages, filter_patterns, existing_urls, config=self.config
        )
        if timeout is None:
            return await coro
        try:
            return await asyncio.wait_for(coro, timeout=timeout)
        except asyncio.TimeoutError:
            logger.error("Discovery did not finish within %s seconds", timeout)
            raise

    def run(
        self,
        root_url: str,
        max_pages: Optional[int] = None,
        filter_patterns: Optional[Iterable[str]] = None,
        existing_urls: Optional[Collection[str]] = None,
        *,
        timeout: Optional[float] = None,
    ) -> List[DiscoveredPage]:
        """Синхронная обёртка над :meth:`discover` (для CLI)."""
        return asyncio.run(
            self.discover(root_url, max_pages, filter_patterns, existing_urls, timeout=timeout)
        )
