"""Telemetry records for external model and queue calls."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

    from .enums import TelemetryKind, TelemetryOutcome


@dataclass(frozen=True, slots=True)
class TokenUsage:
    prompt_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.output_tokens


@dataclass(frozen=True, slots=True, kw_only=True)
class TelemetryRecord:
    operation_id: str
    kind: TelemetryKind
    started_at: datetime
    duration_millis: float
    outcome: TelemetryOutcome
    error_kind: str | None = None
    usage: TokenUsage | None = None
