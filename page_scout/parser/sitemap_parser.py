# File: page_scout/parser/sitemap_parser.py
"""page_scout.parser.sitemap_parser: Модуль для парсинга sitemap.xml и sitemap index."""

from __future__ import annotations

import gzip
from dataclasses import dataclass, field
from typing import List, Literal, Union

from lxml import etree

from page_scout.exceptions import SitemapParseError

__all__ = ("SitemapDocument", "parse_sitemap", "maybe_decompress")

SitemapKind = Literal["sitemapindex", "urlset", "unknown"]

_GZIP_MAGIC = b"\x1f\x8b"


@dataclass(slots=True)
class SitemapDocument:
    """Разобранный sitemap: тип корневого элемента и значения ``<loc>`` его записей.

    Для ``sitemapindex`` ``locs`` - адреса вложенных sitemap, для ``urlset`` - адреса страниц.
    """

    kind: SitemapKind
    locs: List[str] = field(default_factory=list)


def maybe_decompress(content: bytes) -> bytes:
    """Распаковывает gzip-содержимое (``sitemap.xml.gz``); остальное возвращает как есть."""
    if content[:2] != _GZIP_MAGIC:
        return content
    try:
        return gzip.decompress(content)
    except (OSError, EOFError) as exc:
        raise SitemapParseError(f"broken gzip sitemap: {exc}") from exc


def _entry_locs(root: etree._Element, entry_tag: str) -> List[str]:
    locs: List[str] = []
    for entry in root.iterfind(f"{{*}}{entry_tag}"):
        loc = entry.find("{*}loc")
        # <loc/> без текста или с вложенной разметкой вместо строки отбрасываем
        if loc is None or len(loc) or not isinstance(loc.text, str):
            continue
        text = loc.text.strip()
        if text:
            locs.append(text)
    return locs


def parse_sitemap(xml_content: Union[bytes, str]) -> SitemapDocument:
    """Разбирает XML sitemap и возвращает :class:`SitemapDocument`.

    Префиксы пространств имён игнорируются (``<sm:urlset>`` == ``<urlset>``).

    Args:
        xml_content: байты или строка с содержимым sitemap.xml.

    Raises:
        SitemapParseError: содержимое не удалось разобрать как XML.

    Пример:
    ```python
    from page_scout.parser.sitemap_parser import parse_sitemap

    doc = parse_sitemap(open('sitemap.xml', 'rb').read())
    print(doc.kind, doc.locs)
    ```
    """
    if isinstance(xml_content, str):
        xml_content = xml_content.encode("utf-8")
    content = maybe_decompress(xml_content).strip()
    if not content:
        raise SitemapParseError("empty sitemap document")

    parser = etree.XMLParser(
        ns_clean=True,
        recover=True,
        resolve_entities=False,
        no_network=True,
        remove_comments=True,
    )
    try:
        root = etree.fromstring(content, parser=parser)
    except (etree.XMLSyntaxError, ValueError) as exc:
        raise SitemapParseError(f"invalid sitemap XML: {exc}") from exc
    if root is None:
        raise SitemapParseError("invalid sitemap XML: no root element")

    tag = etree.QName(root).localname
    if tag == "sitemapindex":
        return SitemapDocument("sitemapindex", _entry_locs(root, "sitemap"))
    if tag == "urlset":
        return SitemapDocument("urlset", _entry_locs(root, "url"))
    return SitemapDocument("unknown")
