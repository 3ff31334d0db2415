# page_scout/crawler/link_extractor.py
"""
Link extraction for the crawler: resolve anchors, keep same-domain http(s) links, normalize.

Relative hrefs are resolved against the origin (``scheme://host[:port]``) of
the page they were found on, not against its full path: ``second`` on
``https://example.com/blog/first`` becomes ``https://example.com/second``.
"""
from __future__ import annotations

from typing import Iterator, List
from urllib.parse import urljoin

from page_scout.parser.html_parser import parse_html
from page_scout.utils import is_same_domain, normalize_url, origin_of


def _resolve(href: str, origin: str, domain: str) -> str | None:
    try:
        absolute = urljoin(origin + "/", href.strip())
    except ValueError:
        return None
    if not is_same_domain(absolute, domain):
        return None
    return normalize_url(absolute)


def resolve_link(href: str, page_url: str, domain: str) -> str | None:
    """
    Resolve *href* against the origin of *page_url* and return its normalized form.

    Returns None for links to other hosts (``www.`` ignored), non-http(s)
    schemes such as ``mailto:``/``javascript:``, and unparsable hrefs.
    """
    return _resolve(href, origin_of(page_url), domain)


def iter_links(html: str, page_url: str, domain: str) -> Iterator[str]:
    """Yield normalized same-domain links of the page in document order (may repeat)."""
    origin = origin_of(page_url)
    for href in parse_html(html).hrefs:
        link = _resolve(href, origin, domain)
        if link is not None:
            yield link


def extract_links(html: str, page_url: str, domain: str) -> List[str]:
    """Unique normalized same-domain links of the page, in document order."""
    return list(dict.fromkeys(iter_links(html, page_url, domain)))
