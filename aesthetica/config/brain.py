"""
aesthetica.config.brain – generative provider ("brain") config.

Env vars: LLM_PROVIDER, LLM_MODEL, OPENAI_API_KEY, GEMINI_API_KEY / GOOGLE_API_KEY,
BRAIN_TIMEOUT_SECONDS, BRAIN_TEMPERATURE.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

_VALID_PROVIDERS = frozenset({"auto", "openai", "gemini"})

_DEFAULT_MODELS = {
    "openai": "gpt-4o-mini",
    "gemini": "gemini-2.0-flash",
}


@dataclass(frozen=True)
class BrainConfig:
    """Which provider answers open questions, and how long the pipeline waits for it."""

    provider: str = "auto"
    model: Optional[str] = None
    openai_api_key: Optional[str] = None
    gemini_api_key: Optional[str] = None
    timeout_seconds: float = 45.0
    temperature: float = 0.3

    def __post_init__(self) -> None:
        if self.provider not in _VALID_PROVIDERS:
            raise ValueError(
                f"provider must be one of {sorted(_VALID_PROVIDERS)}, got {self.provider!r}"
            )
        if not isinstance(self.timeout_seconds, (int, float)) or self.timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be positive, got {self.timeout_seconds!r}")
        if not 0.0 <= float(self.temperature) <= 2.0:
            raise ValueError(f"temperature must be in [0, 2], got {self.temperature!r}")

    def resolved_provider(self) -> Optional[str]:
        """Provider that will actually be used, or None when no credential is available."""
        if self.provider == "openai":
            return "openai" if self.openai_api_key else None
        if self.provider == "gemini":
            return "gemini" if self.gemini_api_key else None
        if self.openai_api_key:
            return "openai"
        if self.gemini_api_key:
            return "gemini"
        return None

    def resolved_model(self) -> Optional[str]:
        provider = self.resolved_provider()
        if provider is None:
            return None
        return self.model or _DEFAULT_MODELS[provider]

    @classmethod
    def from_env(cls, **overrides: object) -> BrainConfig:
        """Build config from environment variables. Overrides take precedence over env."""

        def _get(attr: str, env: str, default: Optional[str] = None) -> Optional[str]:
            v = overrides.get(attr)
            if v is not None:
                return str(v)
            raw = os.environ.get(env, "").strip()
            return raw or default

        gemini_key = _get("gemini_api_key", "GEMINI_API_KEY") or _get("gemini_api_key", "GOOGLE_API_KEY")
        return cls(
            provider=(_get("provider", "LLM_PROVIDER", "auto") or "auto").lower(),
            model=_get("model", "LLM_MODEL"),
            openai_api_key=_get("openai_api_key", "OPENAI_API_KEY"),
            gemini_api_key=gemini_key,
            timeout_seconds=float(_get("timeout_seconds", "BRAIN_TIMEOUT_SECONDS", "45")),
            temperature=float(_get("temperature", "BRAIN_TEMPERATURE", "0.3")),
        )


def load_brain_config(**overrides: object) -> BrainConfig:
    """Load and validate brain config from environment (with optional overrides)."""
    return BrainConfig.from_env(**overrides)
