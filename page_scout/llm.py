# page_scout/llm.py
"""
Chat completion client for OpenAI-compatible ``/chat/completions`` endpoints.

Instances are callable with the :class:`page_scout.relevance.ChatFunction`
signature, so they can be handed straight to :class:`RelevanceScorer`::

    async with ChatClient(config.llm) as chat:
        scored = await score_page_relevance(pages, context, chat)
"""
from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional

from aiohttp import ClientError, ClientSession, ClientTimeout

from page_scout.config import LLMConfig
from page_scout.exceptions import LLMError
from page_scout.logger import get_logger

__all__ = ("ChatClient",)

logger = get_logger("llm")


class ChatClient:
    """Async chat client; owns its aiohttp session unless one is injected."""

    def __init__(self, config: LLMConfig, session: Optional[ClientSession] = None) -> None:
        self.config = config
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> ChatClient:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_session and self._session is not None:
            if not self._session.closed:
                await self._session.close()
            self._session = None

    def _get_session(self) -> ClientSession:
        if self._session is None:
            self._session = ClientSession(timeout=ClientTimeout(total=self.config.timeout))
        return self._session

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.config.api_key is not None:
            headers["Authorization"] = f"Bearer {self.config.api_key.get_secret_value()}"
        return headers

    async def __call__(
        self,
        messages: List[Dict[str, str]],
        *,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        return await self.chat(messages, temperature=temperature, max_tokens=max_tokens)

    async def chat(
        self,
        messages: List[Dict[str, str]],
        *,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        """
        Send *messages* and return the assistant's raw text.

        Raises:
            LLMError: on network failure, non-2xx status or an unexpected payload.
        """
        payload: Dict[str, Any] = {
            "model": self.config.model,
            "messages": messages,
            "temperature": self.config.temperature if temperature is None else temperature,
            "max_tokens": self.config.max_tokens if max_tokens is None else max_tokens,
        }
        url = f"{self.config.base_url}/chat/completions"
        session = self._get_session()
        try:
            async with session.post(
                url,
                json=payload,
                headers=self._headers(),
                timeout=ClientTimeout(total=self.config.timeout),
            ) as resp:
                if resp.status >= 400:
                    body = await resp.text()
                    raise LLMError(f"chat completion failed: HTTP {resp.status}: {body[:200]}")
                data = await resp.json(content_type=None)
        except asyncio.TimeoutError as exc:
            raise LLMError(f"chat completion timed out after {self.config.timeout:g}s") from exc
        except (ClientError, ValueError) as exc:
            raise LLMError(f"chat completion failed: {exc}") from exc

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise LLMError(f"unexpected chat completion payload: {str(data)[:200]}") from exc
        if not isinstance(content, str):
            raise LLMError("chat completion returned no text content")
        logger.debug("Chat completion: %d chars", len(content))
        return content
