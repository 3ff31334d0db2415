# === FILE: page_scout/parser/content_extractor.py ===
"""Main-content extraction from a fetched HTML page.

Two modes:

* selective (default): drops page chrome (nav, header, footer, sidebars, ads),
  picks the first substantial content container (``<article>``, ``<main>``,
  ``.post-content`` ...) and joins its text blocks;
* full: only scripts/styles and similar are dropped and every visible text
  node of ``<body>`` is kept, deduplicated.

The title is chosen before anything is removed: ``og:title``, then
``twitter:title``, then the first ``<h1>``, then ``<title>``.
"""
from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional
from urllib.parse import urlsplit

from bs4 import BeautifulSoup
from bs4.element import NavigableString, Tag

from page_scout.utils import strip_www

__all__: Sequence[str] = ("ExtractedContent", "extract_content", "clean_title", "UNTITLED")

UNTITLED = "Untitled"
MAX_TITLE_LENGTH = 150
# a container must hold more text than this to count as the main content
MIN_CONTAINER_TEXT = 200

ALWAYS_REMOVE_TAGS = (
    "script", "style", "noscript", "link", "meta", "template", "svg", "canvas", "iframe",
)
SELECTIVE_REMOVE_TAGS = (
    "nav", "header", "footer", "aside", "form", "button", "input", "select", "textarea", "video", "audio",
)
SELECTIVE_REMOVE_SELECTORS = (
    '[role="navigation"]', '[role="banner"]', '[role="contentinfo"]', '[role="complementary"]',
    ".nav", ".navbar", ".sidebar", ".advertisement", ".ad", ".ads", ".social-share",
    ".comments", ".related-posts", ".footer", ".header",
    "#nav", "#header", "#footer", "#sidebar", "#comments",
)
CONTENT_SELECTORS = (
    "article", '[role="main"]', "main", ".post-content", ".article-content", ".entry-content",
    ".content", ".post", ".article", "#content", "#main",
)
HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")
BLOCK_TAGS = HEADING_TAGS + ("p", "li", "blockquote", "pre", "td", "th", "div")

_WS_RE = re.compile(r"\s+")
_BLANK_LINES_RE = re.compile(r"\n{3,}")
# "Post title | Site", "Post title - Site"; a bare hyphen inside a word is kept
_TITLE_SUFFIX_RE = re.compile(r"\s*\|\s*|\s+[-\u2013\u2014]\s+")


@dataclass(slots=True, frozen=True)
class ExtractedContent:
    """Readable text of one page."""

    title: str
    domain: str
    content: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _collapse(text: str) -> str:
    return _WS_RE.sub(" ", text).strip()


def _meta_content(soup: BeautifulSoup, **attrs: str) -> Optional[str]:
    tag = soup.find("meta", attrs=attrs)
    if not isinstance(tag, Tag):
        return None
    value = tag.get("content")
    return value.strip() if isinstance(value, str) and value.strip() else None


def _tag_text(soup: BeautifulSoup, name: str) -> Optional[str]:
    tag = soup.find(name)
    if not isinstance(tag, Tag):
        return None
    return _collapse(tag.get_text()) or None


def clean_title(title: Optional[str]) -> str:
    """Cut a trailing site name (``Post | Site``), collapse whitespace, limit to 150 chars."""
    if not title:
        return UNTITLED
    cleaned = _collapse(_TITLE_SUFFIX_RE.split(title.strip())[0])
    if not cleaned:
        return UNTITLED
    if len(cleaned) > MAX_TITLE_LENGTH:
        return cleaned[: MAX_TITLE_LENGTH - 3] + "..."
    return cleaned


def _pick_title(soup: BeautifulSoup) -> Optional[str]:
    return (
        _meta_content(soup, property="og:title")
        or _meta_content(soup, name="twitter:title")
        or _tag_text(soup, "h1")
        or _tag_text(soup, "title")
    )


def _strip_chrome(soup: BeautifulSoup, full_extraction: bool) -> None:
    # extract() rather than decompose(): nested matches may already be detached
    for tag in soup.find_all(ALWAYS_REMOVE_TAGS):
        tag.extract()
    if full_extraction:
        return
    for tag in soup.find_all(SELECTIVE_REMOVE_TAGS):
        tag.extract()
    for tag in soup.select(", ".join(SELECTIVE_REMOVE_SELECTORS)):
        tag.extract()


def _content_container(soup: BeautifulSoup) -> Tag:
    for selector in CONTENT_SELECTORS:
        candidate = soup.select_one(selector)
        if candidate is not None and len(candidate.get_text().strip()) > MIN_CONTAINER_TEXT:
            return candidate
    return soup.body or soup


def _selective_text(container: Tag) -> str:
    blocks: List[str] = []
    for el in container.find_all(BLOCK_TAGS):
        # only innermost blocks, so nested div/li/p text is not repeated
        if el.find(BLOCK_TAGS) is not None:
            continue
        text = _collapse(el.get_text())
        if not text:
            continue
        blocks.append(f"\n{text}\n" if el.name in HEADING_TAGS else text)
    if not blocks:
        return _collapse(container.get_text())
    return _BLANK_LINES_RE.sub("\n\n", "\n\n".join(blocks)).strip()


def _is_hidden(el: Tag) -> bool:
    if el.has_attr("hidden"):
        return True
    style = el.get("style")
    return isinstance(style, str) and "display:none" in style.replace(" ", "").lower()


def _full_text(container: Tag) -> str:
    for el in container.find_all(_is_hidden):
        el.extract()
    blocks: List[str] = []
    seen = set()
    for el in [container, *container.find_all(True)]:
        # own text nodes only; comments/doctype are NavigableString subclasses
        direct = "".join(str(s) for s in el.children if type(s) is NavigableString).strip()
        if not direct:
            continue
        normalized = _collapse(direct)
        if normalized in seen:
            continue
        seen.add(normalized)
        blocks.append(normalized)
    if not blocks:
        return _collapse(container.get_text())
    return " ".join(blocks)


def extract_content(html: str, url: str, *, full_extraction: bool = False) -> ExtractedContent:
    """Extract title, domain (without ``www.``) and readable text from *html*.

    Args:
        html: page markup.
        url: final URL of the page; only its host is used.
        full_extraction: keep navigation and other chrome, walk every text node.
    """
    soup = BeautifulSoup(html, "html.parser")
    domain = strip_www(urlsplit(url).hostname or "")
    title = clean_title(_pick_title(soup))

    _strip_chrome(soup, full_extraction)
    container = (soup.body or soup) if full_extraction else _content_container(soup)
    content = _full_text(container) if full_extraction else _selective_text(container)
    return ExtractedContent(title=title, domain=domain, content=content.strip())
