"""
LLM clients for the generative fallback: base, registry, providers.

Build from env: default_registry.build_from_config(load_brain_config()).
"""
from aesthetica.clients.llm.base import BaseLLMClient, LLMMessage
from aesthetica.clients.llm.registry import LLMRegistry, default_registry

__all__ = [
    "BaseLLMClient",
    "LLMMessage",
    "LLMRegistry",
    "default_registry",
]
