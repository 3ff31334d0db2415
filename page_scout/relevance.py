# File: page_scout/relevance.py
"""page_scout.relevance: Оценка релевантности страниц каналу одним батч-запросом к LLM.

Ответ модели разбирается в размеченный результат: :class:`ParsedScores`
(индекс → оценка) или :class:`ParseFailure`, после чего каждой странице
назначается оценка в ``[0, 1]``. Любая неудача даёт нейтральные ``0.5``.
"""

from __future__ import annotations

import json
import math
import re
from dataclasses import dataclass, field
from typing import Any, Awaitable, Dict, List, Mapping, Optional, Protocol, Sequence, Union

from page_scout.crawler.models import ChannelContext, PageInfo, ScoredPage
from page_scout.logger import logger

__all__: Sequence[str] = (
    "RELEVANCE_THRESHOLD",
    "FALLBACK_SCORE",
    "ChatFunction",
    "ParsedScores",
    "ParseFailure",
    "strip_code_fences",
    "parse_scores",
    "build_messages",
    "RelevanceScorer",
    "score_page_relevance",
    "filter_relevant",
)

RELEVANCE_THRESHOLD = 0.3
FALLBACK_SCORE = 0.5

_FENCE_OPEN_RE = re.compile(r"^```(?:json)?\s*\n?", re.IGNORECASE)
_FENCE_CLOSE_RE = re.compile(r"\n?```\s*$")

SYSTEM_PROMPT = """You are a content relevance scoring assistant. Score how relevant each web page is for a specific content channel.

Channel context: {context}

Score each page from 0.0 (completely irrelevant) to 1.0 (highly relevant).
Consider the URL path, page title, and how well it matches the channel's niche.

Return ONLY a valid JSON array of objects with "index" (1-based) and "score" fields.
Example: [{{"index": 1, "score": 0.8}}, {{"index": 2, "score": 0.1}}]"""


class ChatFunction(Protocol):
    """``chat(messages, temperature=..., max_tokens=...) -> str`` (например, :class:`page_scout.llm.ChatClient`)."""

    def __call__(
        self,
        messages: List[Dict[str, str]],
        *,
        temperature: float,
        max_tokens: int,
    ) -> Awaitable[str]: ...


@dataclass(frozen=True, slots=True)
class ParsedScores:
    """Успешно разобранный ответ: 1-based индекс страницы → оценка (ещё не ограниченная)."""

    scores: Mapping[int, float] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ParseFailure:
    """Ответ не удалось разобрать; все страницы получают нейтральную оценку."""

    reason: str


ScoreParseResult = Union[ParsedScores, ParseFailure]


def strip_code_fences(text: str) -> str:
    """Снимает обёртку ```json ... ``` вокруг ответа модели, если она есть."""
    cleaned = _FENCE_OPEN_RE.sub("", text.strip())
    return _FENCE_CLOSE_RE.sub("", cleaned).strip()


def _as_index(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _as_score(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    score = float(value)
    return score if math.isfinite(score) else None


def parse_scores(raw: Any) -> ScoreParseResult:
    """Разбирает ответ модели вида ``[{"index": 1, "score": 0.8}, ...]``.

    Записи без целого ``index`` или числового ``score`` пропускаются; при
    повторе индекса побеждает первая запись.
    """
    if not isinstance(raw, str):
        return ParseFailure(f"expected text reply, got {type(raw).__name__}")
    try:
        data = json.loads(strip_code_fences(raw))
    except (ValueError, RecursionError) as exc:  # RecursionError: deeply nested arrays
        return ParseFailure(f"invalid JSON: {exc}")
    if not isinstance(data, list):
        return ParseFailure(f"expected a JSON array, got {type(data).__name__}")

    scores: Dict[int, float] = {}
    for entry in data:
        if not isinstance(entry, dict):
            continue
        index = _as_index(entry.get("index"))
        score = _as_score(entry.get("score"))
        if index is None or score is None or index in scores:
            continue
        scores[index] = score
    return ParsedScores(scores)


def _clamp(score: float) -> float:
    return min(1.0, max(0.0, score))


def build_messages(pages: Sequence[PageInfo], context: ChannelContext) -> List[Dict[str, str]]:
    """System + user сообщения для батч-оценки *pages*."""
    page_list = "\n".join(
        f"{i}. URL: {page.url}" + (f" | Title: {page.title}" if page.title else "")
        for i, page in enumerate(pages, start=1)
    )
    summary = context.summary() or "General content channel"
    return [
        {"role": "system", "content": SYSTEM_PROMPT.format(context=summary)},
        {"role": "user", "content": f"Score these {len(pages)} pages for relevance:\n\n{page_list}"},
    ]


class RelevanceScorer:
    """Оценивает релевантность страниц одним запросом к переданной chat-функции."""

    def __init__(self, chat: ChatFunction, *, temperature: float = 0.1, max_tokens: int = 4000) -> None:
        self.chat = chat
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def score(
        self, pages: Sequence[PageInfo], context: Optional[ChannelContext] = None
    ) -> List[ScoredPage]:
        """Одна оценка на каждую страницу, в том же порядке. Никогда не бросает исключений."""
        if not pages:
            return []
        context = context or ChannelContext()
        messages = build_messages(pages, context)
        try:
            raw = await self.chat(messages, temperature=self.temperature, max_tokens=self.max_tokens)
        except Exception as exc:
            logger.error("AI relevance scoring failed: %s", exc)
            return _fallback(pages)

        result = parse_scores(raw)
        if isinstance(result, ParseFailure):
            logger.error("AI relevance scoring failed: %s", result.reason)
            return _fallback(pages)

        scored = []
        missing = 0
        for i, page in enumerate(pages, start=1):
            score = result.scores.get(i)
            if score is None:
                missing += 1
                scored.append(ScoredPage(page.url, FALLBACK_SCORE))
            else:
                scored.append(ScoredPage(page.url, _clamp(score)))
        if missing:
            logger.warning("Model omitted %d of %d pages; using %.1f", missing, len(pages), FALLBACK_SCORE)
        return scored


def _fallback(pages: Sequence[PageInfo]) -> List[ScoredPage]:
    return [ScoredPage(page.url, FALLBACK_SCORE) for page in pages]


async def score_page_relevance(
    pages: Sequence[PageInfo],
    channel_context: Optional[ChannelContext],
    chat: ChatFunction,
    *,
    temperature: float = 0.1,
    max_tokens: int = 4000,
) -> List[ScoredPage]:
    """Функциональная обёртка над :class:`RelevanceScorer`."""
    scorer = RelevanceScorer(chat, temperature=temperature, max_tokens=max_tokens)
    return await scorer.score(pages, channel_context)


def filter_relevant(scored: Sequence[ScoredPage], threshold: float = RELEVANCE_THRESHOLD) -> List[ScoredPage]:
    """Страницы с оценкой не ниже *threshold*."""
    return [page for page in scored if page.score >= threshold]
