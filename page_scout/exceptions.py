"""Исключения PageScout.

Transient errors (``FetchError`` and subclasses, ``SitemapParseError``,
``LLMError``) are caught close to where they happen and degrade results.
``InvalidUrlError`` signals misuse and is always propagated.
When scraping a single page, ``FetchError`` and ``ContentTooShortError`` reach
the caller.
"""
from __future__ import annotations

from typing import Optional

__all__ = (
    "PageScoutError",
    "InvalidUrlError",
    "FetchError",
    "FetchTimeoutError",
    "HttpStatusError",
    "UnsupportedContentTypeError",
    "SitemapParseError",
    "ContentTooShortError",
    "LLMError",
)


class PageScoutError(Exception):
    """Базовое исключение пакета."""


class InvalidUrlError(PageScoutError, ValueError):
    """URL не разбирается или использует схему, отличную от http/https."""

    def __init__(self, url: str, reason: str = "invalid URL") -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"{reason}: {url!r}")


class FetchError(PageScoutError):
    """Сетевая ошибка при загрузке одного URL."""

    def __init__(self, url: str, message: str) -> None:
        self.url = url
        super().__init__(f"{url}: {message}")


class FetchTimeoutError(FetchError):
    """Запрос не уложился в таймаут."""

    def __init__(self, url: str, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(url, f"request timed out after {timeout:g}s")


class HttpStatusError(FetchError):
    """Сервер ответил не-2xx статусом."""

    def __init__(self, url: str, status: int, reason: Optional[str] = None) -> None:
        self.status = status
        super().__init__(url, f"HTTP {status}" + (f": {reason}" if reason else ""))


class UnsupportedContentTypeError(FetchError):
    """Content-Type ответа не подходит для данного вызова."""

    def __init__(self, url: str, content_type: str) -> None:
        self.content_type = content_type
        super().__init__(url, f"unsupported content type: {content_type or '<none>'}")


class SitemapParseError(PageScoutError):
    """Содержимое sitemap не является разбираемым XML."""


class ContentTooShortError(PageScoutError):
    """После извлечения на странице почти нет текста."""

    def __init__(self, url: str, length: int, minimum: int) -> None:
        self.url = url
        self.length = length
        self.minimum = minimum
        super().__init__(f"{url}: content too short ({length} < {minimum} chars)")


class LLMError(PageScoutError):
    """Ошибка обращения к chat completion API."""
