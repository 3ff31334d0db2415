# File: page_scout/scraper.py
"""page_scout.scraper: загрузка одной страницы → извлечение текста → хэш содержимого."""

from __future__ import annotations

from typing import Optional

from page_scout.config import DiscoveryConfig
from page_scout.crawler.fetcher import SiteFetcher, fetcher_scope
from page_scout.crawler.models import ScrapedPage
from page_scout.exceptions import ContentTooShortError
from page_scout.logger import logger
from page_scout.parser.content_extractor import extract_content
from page_scout.utils import hash_content, validate_root_url

__all__ = ["scrape_page", "MIN_CONTENT_LENGTH"]

# pages with less extracted text than this are treated as failed
MIN_CONTENT_LENGTH = 100


async def scrape_page(
    url: str,
    *,
    config: Optional[DiscoveryConfig] = None,
    fetcher: Optional[SiteFetcher] = None,
    full_extraction: bool = False,
    previous_hash: Optional[str] = None,
    timeout: Optional[float] = None,
) -> ScrapedPage:
    """Загружает страницу *url* и извлекает из неё заголовок и основной текст.

    ``content_hash`` не зависит от регистра и пробелов; при переданном
    *previous_hash* поле ``changed`` показывает, изменилось ли содержимое.

    Raises:
        InvalidUrlError: *url* не http/https.
        FetchError: страница не загрузилась (таймаут, не-2xx, не HTML).
        ContentTooShortError: извлечено меньше ``MIN_CONTENT_LENGTH`` символов.
    """
    config = config or DiscoveryConfig()
    url = validate_root_url(url)
    async with fetcher_scope(fetcher, config) as http:
        page = await http.fetch_webpage(url, timeout=timeout if timeout is not None else config.page_timeout)

    extracted = extract_content(page.html, page.url or url, full_extraction=full_extraction)
    if len(extracted.content) < MIN_CONTENT_LENGTH:
        raise ContentTooShortError(page.url or url, len(extracted.content), MIN_CONTENT_LENGTH)

    content_hash = hash_content(extracted.content)
    changed = previous_hash is None or previous_hash != content_hash
    logger.info(
        "Scraped %s: %d chars%s", page.url or url, len(extracted.content), "" if changed else " (unchanged)"
    )
    return ScrapedPage(
        url=page.url or url,
        title=extracted.title,
        domain=extracted.domain,
        content=extracted.content,
        content_hash=content_hash,
        changed=changed,
    )
