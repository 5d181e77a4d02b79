"""Provider-neutral interface the brain layer talks to."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Literal, Optional, TypedDict


class LLMMessage(TypedDict):
    role: Literal["system", "user", "assistant"]
    content: str


class BaseLLMClient(ABC):
    @property
    @abstractmethod
    def provider(self) -> str:
        ...

    @property
    def model(self) -> Optional[str]:
        return None

    @abstractmethod
    async def chat(self, messages: List[LLMMessage]) -> str:
        """One completion for a system prompt plus user turn(s). Returns raw text ("" when the model says nothing)."""


def split_system(messages: List[LLMMessage]) -> tuple[str, List[LLMMessage]]:
    """Pull system messages out for providers that take them as a separate field."""
    system = [m["content"].strip() for m in messages if m["role"] == "system" and m["content"].strip()]
    turns = [m for m in messages if m["role"] != "system" and m["content"].strip()]
    return "\n\n".join(system), turns
