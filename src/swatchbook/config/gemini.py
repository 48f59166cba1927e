"""Gemini (generative model) configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, require_env_var
from .http_resilience import RateLimit, ResilienceConfig

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/"
DEFAULT_GEMINI_MODEL = "gemini-2.5-flash-lite"
DEFAULT_TEMPERATURE = 0.2


@dataclass(frozen=True, slots=True)
class GeminiConfig:
    api_key: str
    resilience: ResilienceConfig
    model: str = DEFAULT_GEMINI_MODEL
    temperature: float = DEFAULT_TEMPERATURE


def get_gemini_config(*, resilience: ResilienceConfig | None = None) -> GeminiConfig:
    return GeminiConfig(
        api_key=require_env_var("GEMINI_API_KEY"),
        model=optional_env_var("GEMINI_MODEL") or DEFAULT_GEMINI_MODEL,
        # retries are owned by the matcher/inferencer policy, not the transport
        resilience=resilience
        or ResilienceConfig(
            name="gemini",
            base_url=GEMINI_BASE_URL,
            retry=None,
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
        ),
    )
