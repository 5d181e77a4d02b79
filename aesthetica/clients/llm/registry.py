"""
LLM provider registry: map provider name -> build client from config dict.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict

from aesthetica.clients.llm.base import BaseLLMClient
from aesthetica.config.brain import BrainConfig

logger = logging.getLogger(__name__)


class LLMRegistry:
    """Maps provider id to a builder that takes config dict and returns BaseLLMClient."""

    def __init__(self) -> None:
        self._builders: Dict[str, Callable[[Dict[str, Any]], BaseLLMClient]] = {}

    def register(self, provider: str, builder: Callable[[Dict[str, Any]], BaseLLMClient]) -> None:
        self._builders[provider] = builder

    def get(self, provider: str) -> Callable[[Dict[str, Any]], BaseLLMClient] | None:
        return self._builders.get(provider)

    def build(self, provider: str, config: Dict[str, Any]) -> BaseLLMClient:
        """Build a client for this provider. Raises KeyError if unknown provider."""
        builder = self._builders.get(provider)
        if builder is None:
            raise KeyError(f"Unknown LLM provider: {provider!r}. Registered: {list(self._builders)}")
        return builder(config)

    def build_from_config(self, config: BrainConfig) -> BaseLLMClient:
        """Client for the configured provider, or the no-op client when no key is set."""
        provider = config.resolved_provider()
        if provider is None:
            logger.info("LLM: no provider credential configured, using no-op client")
            return NoOpLLMClient()
        api_key = config.openai_api_key if provider == "openai" else config.gemini_api_key
        model = config.resolved_model()
        logger.info("LLM: using %s (%s)", provider, model)
        return self.build(
            provider,
            {"model": model, "api_key": api_key, "temperature": config.temperature},
        )


# Default registry with all built-in providers pre-registered.
default_registry = LLMRegistry()

from aesthetica.clients.llm.providers.gemini import gemini_builder  # noqa: E402
from aesthetica.clients.llm.providers.noop import NoOpLLMClient  # noqa: E402
from aesthetica.clients.llm.providers.openai import openai_builder  # noqa: E402

default_registry.register("openai", openai_builder)
default_registry.register("gemini", gemini_builder)
