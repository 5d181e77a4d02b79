"""Client used when no provider credential is configured."""
from __future__ import annotations

from typing import List

from aesthetica.clients.llm.base import BaseLLMClient, LLMMessage

NOOP_PROVIDER = "noop"


class NoOpLLMClient(BaseLLMClient):
    """The brain layer recognises this provider and answers without calling it."""

    @property
    def provider(self) -> str:
        return NOOP_PROVIDER

    async def chat(self, messages: List[LLMMessage]) -> str:
        return ""
