# File: page_scout/filters.py
"""page_scout.filters: Отбор и ранжирование URL, похожих на страницы с контентом.

Все функции чистые и детерминированные: никакого I/O и случайности.
"""

from __future__ import annotations

import re
from typing import Iterable, List, Pattern, Sequence
from urllib.parse import unquote, urlsplit

from page_scout.logger import logger
from page_scout.utils import is_same_domain

__all__: Sequence[str] = (
    "EXCLUDED_PATH_PATTERNS",
    "EXCLUDED_EXTENSIONS",
    "compile_patterns",
    "is_content_page",
    "filter_content_pages",
    "content_likelihood",
    "sort_by_content_likelihood",
)

# Служебные, навигационные и листинговые страницы
EXCLUDED_PATH_PATTERNS: tuple[Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"^/about/?$",
        r"^/contact/?$",
        r"^/terms/?$",
        r"^/privacy/?$",
        r"^/cookie",
        r"^/legal",
        r"^/login/?$",
        r"^/register/?$",
        r"^/signup/?$",
        r"^/search/?$",
        r"^/cart/?$",
        r"^/checkout/?$",
        r"^/account/?$",
        r"/tag/",
        r"/category/",
        r"/author/",
        r"/page/\d+",
        r"/feed/?$",
        r"/rss/?$",
        r"/sitemap",
        r"/wp-admin",
        r"/wp-login",
        r"/wp-json",
        r"/api/",
        r"/cdn-cgi/",
    )
)

EXCLUDED_EXTENSIONS: tuple[str, ...] = (
    ".pdf", ".jpg", ".jpeg", ".png", ".gif", ".svg", ".webp",
    ".mp3", ".mp4", ".avi", ".mov", ".zip", ".rar", ".gz",
    ".css", ".js", ".xml", ".json", ".ico", ".woff", ".woff2",
    ".ttf", ".eot",
)

_DATE_RE = re.compile(r"/(?:19|20)\d{2}/(?:0?[1-9]|1[0-2])(?:/|$)|(?:19|20)\d{2}-\d{2}-\d{2}")
_SLUG_RE = re.compile(r"^[^\W_]+(?:[-_][^\W_]+){2,}$")
_NUMERIC_ID_RE = re.compile(r"(?:^|[-_])\d{3,}$")
_PAGE_EXT_RE = re.compile(r"\.(?:html?|php|aspx?)$", re.IGNORECASE)

# Родительские разделы, под которыми обычно лежат статьи
CONTENT_SECTIONS = frozenset({
    "blog", "blogs", "news", "article", "articles", "post", "posts", "story", "stories",
    "insights", "guides", "guide", "tutorials", "tutorial", "publications", "press",
    "resources", "stati", "novosti",
})
# Последний сегмент пути, характерный для листингов
LISTING_LEAVES = frozenset({
    "blog", "blogs", "news", "articles", "posts", "stories", "archive", "archives",
    "categories", "tags", "topics", "sections", "index", "all", "latest", "home", "page",
})


def compile_patterns(patterns: Iterable[str]) -> List[Pattern[str]]:
    """Компилирует пользовательские regex без учёта регистра; пустые и некорректные пропускает."""
    compiled: List[Pattern[str]] = []
    for pattern in patterns:
        if not pattern or not pattern.strip():
            continue
        try:
            compiled.append(re.compile(pattern, re.IGNORECASE))
        except re.error as exc:
            logger.warning("Ignoring invalid filter pattern %r: %s", pattern, exc)
    return compiled


def is_content_page(url: str, domain: str, custom: Sequence[Pattern[str]] = ()) -> bool:
    """True, если URL того же домена и похож на страницу с контентом."""
    if not is_same_domain(url, domain):
        return False
    parts = urlsplit(url)
    path = parts.path
    if path in ("", "/"):
        return False
    lower = path.lower()
    if lower.endswith(EXCLUDED_EXTENSIONS):
        return False
    # параметры обычно означают пагинацию или фильтры
    if parts.query:
        return False
    if any(p.search(path) for p in EXCLUDED_PATH_PATTERNS):
        return False
    if any(p.search(url) or p.search(path) for p in custom):
        return False
    return True


def filter_content_pages(
    urls: Iterable[str],
    domain: str,
    custom_patterns: Iterable[str] = (),
) -> List[str]:
    """Оставляет только URL, похожие на контентные страницы, сохраняя порядок.

    Args:
        urls: кандидаты.
        domain: домен сайта (``www.`` игнорируется).
        custom_patterns: дополнительные regex-исключения, проверяются по URL и по пути.
    """
    custom = compile_patterns(custom_patterns)
    return [u for u in urls if is_content_page(u, domain, custom)]


def _segments(url: str) -> List[str]:
    path = unquote(urlsplit(url).path)
    return [s for s in path.split("/") if s]


def content_likelihood(url: str) -> float:
    """Эвристическая оценка того, что URL - отдельная статья, а не листинг."""
    segments = _segments(url)
    if not segments:
        return -5.0
    path = "/" + "/".join(segments)
    leaf = segments[-1].lower()
    stem = _PAGE_EXT_RE.sub("", leaf)
    score = 0.0

    if _DATE_RE.search(path + "/"):
        score += 3.0
    if _SLUG_RE.match(stem):
        score += 2.0
    if _NUMERIC_ID_RE.search(stem):
        score += 1.0
    if _PAGE_EXT_RE.search(leaf):
        score += 0.5
    if any(s.lower() in CONTENT_SECTIONS for s in segments[:-1]):
        score += 1.5
    if stem in LISTING_LEAVES or (stem.isdigit() and len(stem) <= 2):
        score -= 3.0
    # глубже - вероятнее статья, но без перекоса в пользу очень длинных путей
    score += min(len(segments), 4) * 0.5
    return score


def sort_by_content_likelihood(urls: Iterable[str]) -> List[str]:
    """Сортирует URL по убыванию :func:`content_likelihood`; при равенстве сохраняет исходный порядок."""
    items = list(urls)
    return sorted(items, key=content_likelihood, reverse=True)
