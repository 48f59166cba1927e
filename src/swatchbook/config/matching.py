"""Texture matching thresholds and model call policy."""

from __future__ import annotations

from dataclasses import dataclass, field

from .env import env_float, env_int
from .errors import ConfigurationError

DEFAULT_CONFIDENCE_THRESHOLD = 0.75
DEFAULT_MAX_RETRIES = 1
DEFAULT_RETRY_BACKOFF_SECONDS = 0.5
DEFAULT_MODEL_TIMEOUT_SECONDS = 30.0
DEFAULT_BATCH_SIZE = 10
SUPPORTED_LANGUAGES = ("he", "en")


@dataclass(frozen=True, slots=True)
class MatchingConfig:
    """Knobs for the semantic matcher and category inferencer.

    ``max_retries`` counts retries after the first attempt, so the default of one
    means at most two model calls per candidate.
    """

    confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_backoff_seconds: float = DEFAULT_RETRY_BACKOFF_SECONDS
    model_timeout_seconds: float = DEFAULT_MODEL_TIMEOUT_SECONDS
    languages: tuple[str, ...] = field(default_factory=lambda: SUPPORTED_LANGUAGES)
    batch_size: int = DEFAULT_BATCH_SIZE

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence_threshold <= 1.0:
            raise ConfigurationError(
                f"confidence_threshold must be within [0, 1], got {self.confidence_threshold}"
            )
        if self.max_retries < 0:
            raise ConfigurationError("max_retries must be non-negative")
        if self.retry_backoff_seconds < 0:
            raise ConfigurationError("retry_backoff_seconds must be non-negative")
        if self.model_timeout_seconds <= 0:
            raise ConfigurationError("model_timeout_seconds must be positive")
        if self.batch_size < 1:
            raise ConfigurationError("batch_size must be at least 1")

    def backoff_for(self, attempt: int) -> float:
        """Delay before retry number ``attempt`` (1-based), doubling each time."""

        return self.retry_backoff_seconds * (2 ** (attempt - 1))


def get_matching_config() -> MatchingConfig:
    return MatchingConfig(
        confidence_threshold=env_float(
            "SWATCHBOOK_MATCH_THRESHOLD", DEFAULT_CONFIDENCE_THRESHOLD
        ),
        max_retries=env_int("SWATCHBOOK_MODEL_RETRIES", DEFAULT_MAX_RETRIES),
        retry_backoff_seconds=env_float(
            "SWATCHBOOK_MODEL_BACKOFF_SECONDS", DEFAULT_RETRY_BACKOFF_SECONDS
        ),
        model_timeout_seconds=env_float(
            "SWATCHBOOK_MODEL_TIMEOUT_SECONDS", DEFAULT_MODEL_TIMEOUT_SECONDS
        ),
        batch_size=env_int("SWATCHBOOK_MATCH_BATCH_SIZE", DEFAULT_BATCH_SIZE),
    )
