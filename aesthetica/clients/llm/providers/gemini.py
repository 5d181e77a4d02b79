"""Google Gemini provider (google-genai SDK)."""
from __future__ import annotations

from typing import Any, Dict, List

from google import genai
from google.genai import types as genai_types

from aesthetica.clients.llm.base import BaseLLMClient, LLMMessage, split_system

DEFAULT_MODEL = "gemini-2.0-flash"


class GeminiLLMClient(BaseLLMClient):
    def __init__(self, api_key: str, model: str = DEFAULT_MODEL, *, temperature: float = 0.3) -> None:
        self._model = model
        self._temperature = temperature
        self._client = genai.Client(api_key=api_key)

    @property
    def provider(self) -> str:
        return "gemini"

    @property
    def model(self) -> str:
        return self._model

    async def chat(self, messages: List[LLMMessage]) -> str:
        system, turns = split_system(messages)
        contents = [
            genai_types.Content(
                role="model" if m["role"] == "assistant" else "user",
                parts=[genai_types.Part(text=m["content"])],
            )
            for m in turns
        ]
        response = await self._client.aio.models.generate_content(
            model=self._model,
            contents=contents,
            config=genai_types.GenerateContentConfig(
                temperature=self._temperature,
                system_instruction=system or None,
            ),
        )
        return response.text or ""


def gemini_builder(config: Dict[str, Any]) -> GeminiLLMClient:
    return GeminiLLMClient(
        config["api_key"],
        config.get("model") or DEFAULT_MODEL,
        temperature=float(config.get("temperature", 0.3)),
    )
