# === FILE: page_scout/parser/html_parser.py ===
"""HTML parsing adapter for PageScout.

The crawler and the fetcher only need two things from a page, so this module
keeps BeautifulSoup behind a tiny API:

* title: document ``<title>`` text or ``None`` if absent/empty.
* hrefs: raw ``href`` values of every ``<a href="…">`` in document order.

Resolution of hrefs to absolute URLs lives in
:mod:`page_scout.crawler.link_extractor`.
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Optional

from bs4 import BeautifulSoup
from bs4.element import Tag

__all__: Sequence[str] = ("ParsedPage", "parse_html", "extract_title")


@dataclass(slots=True)
class ParsedPage:
    """Lightweight representation of an HTML page."""

    title: Optional[str]
    hrefs: list[str] = field(default_factory=list)


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def _title(soup: BeautifulSoup) -> Optional[str]:
    tag = soup.find("title")
    if not isinstance(tag, Tag):
        return None
    return tag.get_text(strip=True) or None


def extract_title(html: str) -> Optional[str]:
    """Return the stripped ``<title>`` text, or ``None``."""
    return _title(_soup(html))


def parse_html(html: str) -> ParsedPage:
    """Parse *html* into a :class:`ParsedPage`.

    Empty ``href`` attributes are skipped; duplicates are kept, since the
    crawler dedups after normalization anyway.
    """
    soup = _soup(html)
    hrefs: list[str] = []
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href = tag.get("href")
        if not isinstance(href, str):
            continue
        href = href.strip()
        if href:
            hrefs.append(href)
    return ParsedPage(title=_title(soup), hrefs=hrefs)
