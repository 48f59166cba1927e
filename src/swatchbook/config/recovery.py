"""Orphan recovery defaults."""

from __future__ import annotations

from dataclasses import dataclass, field

from .env import env_int, optional_env_var
from .errors import ConfigurationError

DEFAULT_RECOVERY_PREFIXES = ("styles/", "materials/")
DEFAULT_MAX_CONCURRENCY = 8


@dataclass(frozen=True, slots=True)
class RecoveryConfig:
    prefixes: tuple[str, ...] = field(default_factory=lambda: DEFAULT_RECOVERY_PREFIXES)
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY

    def __post_init__(self) -> None:
        if not self.prefixes:
            raise ConfigurationError("At least one storage prefix is required")
        if self.max_concurrency < 1:
            raise ConfigurationError("max_concurrency must be at least 1")

    def scoped_prefixes(self, entity_id: str | None) -> tuple[str, ...]:
        """Listing prefixes for a run, narrowed to one entity folder when scoped."""

        if entity_id is None:
            return self.prefixes
        return tuple(f"{_with_slash(prefix)}{entity_id}/" for prefix in self.prefixes)


def _with_slash(prefix: str) -> str:
    return prefix if prefix.endswith("/") else f"{prefix}/"


def get_recovery_config() -> RecoveryConfig:
    raw_prefixes = optional_env_var("SWATCHBOOK_RECOVERY_PREFIXES")
    prefixes = (
        tuple(part.strip() for part in raw_prefixes.split(",") if part.strip())
        if raw_prefixes
        else DEFAULT_RECOVERY_PREFIXES
    )
    return RecoveryConfig(
        prefixes=prefixes,
        max_concurrency=env_int("SWATCHBOOK_RECOVERY_CONCURRENCY", DEFAULT_MAX_CONCURRENCY),
    )
