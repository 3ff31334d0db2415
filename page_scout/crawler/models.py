# page_scout/crawler/models.py
"""
Data models shared by the discovery pipeline and the relevance scorer.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional


@dataclass(slots=True, frozen=True)
class CrawlTarget:
    """A queued unit of crawler work: URL plus its link distance from the root."""

    url: str
    depth: int


@dataclass(slots=True)
class FetchedPage:
    """HTML page returned by the fetcher; ``url`` is the final URL after redirects."""

    url: str
    html: str
    title: Optional[str] = None


@dataclass(slots=True, frozen=True)
class DiscoveredPage:
    """Final discovery result for one URL."""

    url: str
    title: Optional[str] = None
    is_new: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(slots=True, frozen=True)
class PageInfo:
    """Scoring input."""

    url: str
    title: Optional[str] = None


@dataclass(slots=True, frozen=True)
class ChannelContext:
    """Channel description used to bias relevance scoring."""

    niche: Optional[str] = None
    description: Optional[str] = None
    language: Optional[str] = None

    def summary(self) -> str:
        """``Niche: x, Description: y, Language: z`` with absent fields omitted."""
        parts = []
        if self.niche:
            parts.append(f"Niche: {self.niche}")
        if self.description:
            parts.append(f"Description: {self.description}")
        if self.language:
            parts.append(f"Language: {self.language}")
        return ", ".join(parts)


@dataclass(slots=True, frozen=True)
class ScoredPage:
    """Relevance score in ``[0, 1]`` for one page."""

    url: str
    score: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(slots=True, frozen=True)
class ScrapedPage:
    """Extracted text of one page with its fingerprint.

    ``changed`` is False only when a previous hash was given and matches.
    """

    url: str
    title: str
    domain: str
    content: str
    content_hash: str
    changed: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
