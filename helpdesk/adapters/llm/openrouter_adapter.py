"""OpenRouter adapter — implements LLMPort with the OpenAI SDK.

OpenRouter exposes an OpenAI-compatible API, so the stock AsyncOpenAI client
is pointed at its base URL with the attribution headers it expects.
"""

from __future__ import annotations

import logging

from openai import AsyncOpenAI

from helpdesk.application.ports.llm_port import ChatMessage, LLMPort, LLMReply
from helpdesk.config import settings

logger = logging.getLogger(__name__)

OFFLINE_MODEL = "offline-fallback"
APP_TITLE = "Rental Helpdesk Support AI"


def _as_messages(prompt: str | list[ChatMessage]) -> list[ChatMessage]:
    if isinstance(prompt, str):
        return [{"role": "user", "content": prompt}]
    return list(prompt)


def _has_usable_key(api_key: str | None) -> bool:
    key = (api_key or "").strip()
    return bool(key) and "your-openrouter-api-key" not in key


class OpenRouterAdapter(LLMPort):
    """OpenRouter implementation of LLMPort."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        temperature: float | None = None,
        base_url: str | None = None,
        max_retries: int | None = None,
    ):
        self._api_key = api_key if api_key is not None else settings.openrouter_api_key
        self._model = model or settings.openrouter_model
        self._temperature = (
            temperature if temperature is not None else settings.llm_temperature
        )
        self._client: AsyncOpenAI | None = None
        if _has_usable_key(self._api_key):
            self._client = AsyncOpenAI(
                api_key=self._api_key,
                base_url=base_url or settings.openrouter_base_url,
                max_retries=max_retries if max_retries is not None else settings.llm_max_retries,
                default_headers={
                    "HTTP-Referer": settings.app_url,
                    "X-Title": APP_TITLE,
                },
            )

    @property
    def model(self) -> str:
        return self._model if self._client is not None else OFFLINE_MODEL

    async def invoke(self, prompt: str | list[ChatMessage]) -> LLMReply:
        """Send chat messages to the model and return its text reply."""
        messages = _as_messages(prompt)

        # Without a key, do not attempt network calls.
        if self._client is None:
            logger.warning("OPENROUTER_API_KEY is not set (or placeholder). Using offline reply.")
            return self._offline_reply(messages)

        response = await self._client.chat.completions.create(
            model=self._model,
            messages=messages,
            temperature=self._temperature,
        )
        content = response.choices[0].message.content or ""
        logger.debug("LLM reply from %s: %d chars", self._model, len(content))
        return LLMReply(content=content.strip(), model=self._model)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.close()

    @staticmethod
    def _offline_reply(messages: list[ChatMessage]) -> LLMReply:
        """Deterministic stand-in reply built from the last user message."""
        user_text = next(
            (m["content"] for m in reversed(messages) if m.get("role") == "user"), ""
        )
        headline = user_text.strip().splitlines()[0] if user_text.strip() else "the request"
        return LLMReply(
            content=f"(offline) Reviewed {headline[:120]}. No live model is configured.",
            model=OFFLINE_MODEL,
        )
