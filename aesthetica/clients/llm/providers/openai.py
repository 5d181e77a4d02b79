"""OpenAI chat-completions provider."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI

from aesthetica.clients.llm.base import BaseLLMClient, LLMMessage

DEFAULT_MODEL = "gpt-4o-mini"


class OpenAILLMClient(BaseLLMClient):
    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        *,
        temperature: float = 0.3,
        max_tokens: Optional[int] = None,
        base_url: Optional[str] = None,
    ) -> None:
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens
        # Single attempt; the brain layer applies the timeout.
        self._client = AsyncOpenAI(api_key=api_key, base_url=base_url, max_retries=0)

    @property
    def provider(self) -> str:
        return "openai"

    @property
    def model(self) -> str:
        return self._model

    async def chat(self, messages: List[LLMMessage]) -> str:
        kwargs: Dict[str, Any] = {
            "model": self._model,
            "messages": list(messages),
            "temperature": self._temperature,
        }
        if self._max_tokens is not None:
            kwargs["max_tokens"] = self._max_tokens
        response = await self._client.chat.completions.create(**kwargs)
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""


def openai_builder(config: Dict[str, Any]) -> OpenAILLMClient:
    return OpenAILLMClient(
        config["api_key"],
        config.get("model") or DEFAULT_MODEL,
        temperature=float(config.get("temperature", 0.3)),
        max_tokens=config.get("max_tokens"),
        base_url=config.get("base_url"),
    )
