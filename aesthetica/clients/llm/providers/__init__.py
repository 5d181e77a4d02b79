"""LLM provider implementations."""
from aesthetica.clients.llm.providers.gemini import GeminiLLMClient, gemini_builder
from aesthetica.clients.llm.providers.noop import NoOpLLMClient
from aesthetica.clients.llm.providers.openai import OpenAILLMClient, openai_builder

__all__ = [
    "GeminiLLMClient",
    "gemini_builder",
    "NoOpLLMClient",
    "OpenAILLMClient",
    "openai_builder",
]
