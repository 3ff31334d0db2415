# File: page_scout/utils.py
"""page_scout.utils: Утилитарные функции для обработки URL, дедупликации и хеширования контента."""

from __future__ import annotations

import hashlib
import re
from typing import Collection, Iterable, List, Optional, Sequence
from urllib.parse import urlsplit, urlunsplit

from page_scout.exceptions import InvalidUrlError
from page_scout.logger import logger

__all__: Sequence[str] = (
    "ALLOWED_SCHEMES",
    "strip_www",
    "root_domain",
    "origin_of",
    "validate_root_url",
    "is_http_url",
    "is_same_domain",
    "normalize_url",
    "remove_duplicates",
    "normalized_set",
    "hash_content",
)

ALLOWED_SCHEMES = ("http", "https")

_WS_RE = re.compile(r"\s+")


def strip_www(host: str) -> str:
    """Убирает ведущий ``www.`` и приводит хост к нижнему регистру."""
    host = host.lower()
    return host[4:] if host.startswith("www.") else host


def _hostname(url: str) -> Optional[str]:
    try:
        return urlsplit(url).hostname
    except ValueError:
        return None


def validate_root_url(url: str) -> str:
    """Проверяет корневой URL и возвращает его без пробелов по краям.

    Raises:
        InvalidUrlError: URL не разбирается, не http(s) или без хоста.
    """
    if not isinstance(url, str) or not url.strip():
        raise InvalidUrlError(str(url), "empty URL")
    url = url.strip()
    try:
        parts = urlsplit(url)
        host = parts.hostname
        parts.port  # noqa: B018 - raises ValueError on a malformed port
    except ValueError as exc:
        raise InvalidUrlError(url, f"invalid URL ({exc})") from exc
    if parts.scheme.lower() not in ALLOWED_SCHEMES:
        raise InvalidUrlError(url, f"invalid protocol {parts.scheme or '<none>'}")
    if not host:
        raise InvalidUrlError(url, "URL has no host")
    return url


def root_domain(url: str) -> str:
    """Домен корневого URL без ``www.``; бросает InvalidUrlError для некорректного URL."""
    return strip_www(urlsplit(validate_root_url(url)).hostname or "")


def origin_of(url: str) -> str:
    """``scheme://host[:port]`` для корректного URL."""
    parts = urlsplit(validate_root_url(url))
    return f"{parts.scheme.lower()}://{parts.netloc.lower()}"


def is_http_url(url: str) -> bool:
    """True, если URL абсолютный, с хостом и схемой http/https."""
    try:
        parts = urlsplit(url)
        return parts.scheme.lower() in ALLOWED_SCHEMES and bool(parts.hostname)
    except ValueError:
        return False


def is_same_domain(url: str, domain: str) -> bool:
    """Проверяет, что URL - http(s) и его хост без ``www.`` совпадает с *domain*."""
    if not is_http_url(url):
        return False
    host = _hostname(url)
    return host is not None and strip_www(host) == strip_www(domain)


def normalize_url(url: str) -> str:
    """Нормализует URL для дедупликации: убирает фрагмент и завершающие слеши.

    Query-строка сохраняется, регистр пути не меняется.
    ``https://example.com/blog/#top`` → ``https://example.com/blog``
    """
    parts = urlsplit(url)
    normalized = urlunsplit((parts.scheme, parts.netloc, parts.path, parts.query, ""))
    return normalized.rstrip("/")


def remove_duplicates(urls: Iterable[str], *, normalize: bool = True) -> List[str]:
    """Удаляет дубликаты из списка URL, сохраняя порядок первого вхождения."""
    items = list(urls)
    keys = [normalize_url(u) for u in items] if normalize else items
    unique = list(dict.fromkeys(keys))
    removed = len(items) - len(unique)
    if removed:
        logger.debug("Removed %d duplicate URLs", removed)
    return unique


def normalized_set(urls: Collection[str]) -> set[str]:
    """Множество URL в нормализованной форме (для сравнения с уже известными)."""
    return {normalize_url(u) for u in urls}


def hash_content(text: str) -> str:
    """SHA-256 от текста со схлопнутыми пробелами в нижнем регистре.

    Используется вызывающим кодом, чтобы понять, изменилась ли страница с прошлого скрапинга.
    """
    normalized = _WS_RE.sub(" ", text).strip().lower()
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()
