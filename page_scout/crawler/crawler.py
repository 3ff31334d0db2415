# === FILE: page_scout/crawler/crawler.py ===
from __future__ import annotations

import time
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Optional, Protocol, Set

from page_scout.crawler.link_extractor import iter_links
from page_scout.crawler.models import CrawlTarget, FetchedPage
from page_scout.crawler.rate_limit import DEFAULT_DELAY, Pacer
from page_scout.exceptions import FetchError
from page_scout.logger import get_logger
from page_scout.utils import normalize_url, root_domain

__all__ = ("MAX_DEPTH", "MAX_VISITED_PAGES", "PageFetcher", "CrawlResult", "LinkCrawler", "crawl_links")

MAX_DEPTH = 3
MAX_VISITED_PAGES = 150
CRAWL_TIMEOUT = 15.0


class PageFetcher(Protocol):
    async def fetch_webpage(self, url: str, timeout: Optional[float] = None) -> FetchedPage: ...


@dataclass(slots=True)
class CrawlResult:
    """Итог обхода: обнаруженные URL в порядке обнаружения и заголовки загруженных страниц."""

    urls: List[str] = field(default_factory=list)
    titles: Dict[str, str] = field(default_factory=dict)
    visited: int = 0


class LinkCrawler:
    """Последовательный BFS-обход ссылок одного домена с паузой после каждой страницы.

    Состояние (очередь, visited, discovered) живёт только внутри одного вызова
    :meth:`crawl`, поэтому один экземпляр можно использовать для разных сайтов.
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        pacer: Optional[Pacer] = None,
        *,
        max_depth: int = MAX_DEPTH,
        timeout: float = CRAWL_TIMEOUT,
        max_visited: int = MAX_VISITED_PAGES,
    ) -> None:
        if max_depth < 0:
            raise ValueError("max_depth must be >= 0")
        if max_visited < 1:
            raise ValueError("max_visited must be >= 1")
        self.fetcher = fetcher
        self.pacer = pacer if pacer is not None else Pacer(DEFAULT_DELAY)
        self.max_depth = max_depth
        self.timeout = timeout
        self.max_visited = max_visited
        self.logger = get_logger("crawler")

    async def crawl(self, root_url: str, max_pages: int) -> List[str]:
        """Обходит сайт от *root_url* и возвращает все обнаруженные URL (включая корень).

        В результат попадают и ссылки, которые так и не были загружены:
        они обнаружены на посещённых страницах, но лимит исчерпался раньше.
        """
        return (await self.crawl_pages(root_url, max_pages)).urls

    async def crawl_pages(self, root_url: str, max_pages: int) -> CrawlResult:
        """То же, что :meth:`crawl`, плюс заголовки реально загруженных страниц."""
        if max_pages < 1:
            raise ValueError("max_pages must be >= 1")
        domain = root_domain(root_url)
        root = normalize_url(root_url.strip())

        queue: Deque[CrawlTarget] = deque([CrawlTarget(root, 0)])
        visited: Set[str] = set()
        # dict keeps insertion order for a reproducible result
        discovered: dict[str, None] = {root: None}
        titles: Dict[str, str] = {}

        self.logger.info("Старт обхода: %s (max_pages=%d)", root, max_pages)
        start = time.monotonic()

        while queue and len(discovered) < max_pages and len(visited) < self.max_visited:
            target = queue.popleft()
            if target.url in visited or target.depth > self.max_depth:
                continue
            visited.add(target.url)
            try:
                page = await self._fetch(target)
                if page is not None:
                    if page.title:
                        titles[target.url] = page.title
                    self._enqueue_links(page, target, domain, queue, visited, discovered, max_pages)
            finally:
                await self.pacer.wait()

        self.logger.info(
            "Обход завершён: посещено %d, обнаружено %d URL за %.2f с",
            len(visited), len(discovered), time.monotonic() - start,
        )
        return CrawlResult(urls=list(discovered), titles=titles, visited=len(visited))

    async def _fetch(self, target: CrawlTarget) -> Optional[FetchedPage]:
        try:
            return await self.fetcher.fetch_webpage(target.url, timeout=self.timeout)
        except FetchError as exc:
            self.logger.warning("Failed to crawl %s: %s", target.url, exc)
            return None

    def _enqueue_links(
        self,
        page: FetchedPage,
        target: CrawlTarget,
        domain: str,
        queue: Deque[CrawlTarget],
        visited: Set[str],
        discovered: dict[str, None],
        max_pages: int,
    ) -> None:
        next_depth = target.depth + 1
        added = 0
        # relative hrefs resolve against the origin of the final (post-redirect) URL
        for link in iter_links(page.html, page.url or target.url, domain):
            if link in discovered:
                continue
            discovered[link] = None
            added += 1
            if next_depth <= self.max_depth and link not in visited:
                queue.append(CrawlTarget(link, next_depth))
            if len(discovered) >= max_pages:
                break
        self.logger.debug("%s (depth %d): +%d new links", target.url, target.depth, added)


async def crawl_links(
    root_url: str,
    max_pages: int,
    fetcher: PageFetcher,
    pacer: Optional[Pacer] = None,
    *,
    max_depth: int = MAX_DEPTH,
    timeout: float = CRAWL_TIMEOUT,
    max_visited: int = MAX_VISITED_PAGES,
) -> List[str]:
    """Функциональная обёртка над :class:`LinkCrawler`."""
    crawler = LinkCrawler(fetcher, pacer, max_depth=max_depth, timeout=timeout, max_visited=max_visited)
    return await crawler.crawl(root_url, max_pages)
