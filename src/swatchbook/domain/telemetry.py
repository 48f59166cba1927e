"""Process-wide, append-only telemetry for external model and queue calls.

The recorder is created once by the application layer and handed to every
component that talks to the model or the image queue. Recording must never
break the primary operation, so ``record`` swallows (and logs) its own errors.
"""

from __future__ import annotations

import threading
import time
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime
from logging import getLogger

from swatchbook.domain.errors import error_kind_of
from swatchbook.domain.model import (
    TelemetryKind,
    TelemetryOutcome,
    TelemetryRecord,
    TokenUsage,
)

log = getLogger(__name__)


def new_operation_id() -> str:
    return uuid.uuid4().hex


@dataclass(slots=True)
class TrackedCall:
    """Handle yielded by ``TelemetryRecorder.track`` to attach usage to a call."""

    operation_id: str
    usage: TokenUsage | None = None


@dataclass(frozen=True, slots=True)
class KindSummary:
    calls: int
    failures: int
    mean_duration_millis: float
    prompt_tokens: int
    output_tokens: int


@dataclass(slots=True)
class TelemetryRecorder:
    _records: list[TelemetryRecord] = field(default_factory=list["TelemetryRecord"])
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def record(self, entry: TelemetryRecord) -> None:
        try:
            with self._lock:
                self._records.append(entry)
            log.debug(
                "telemetry %s %s %s in %.1fms",
                entry.kind,
                entry.operation_id,
                entry.outcome,
                entry.duration_millis,
            )
        except Exception:
            log.exception("Failed to record telemetry for %s", getattr(entry, "operation_id", "?"))

    @asynccontextmanager
    async def track(self, kind: TelemetryKind) -> AsyncIterator[TrackedCall]:
        """Time the wrapped call and record its outcome, whatever that is.

        Exceptions (timeouts and cancellation included) are recorded as failures
        and then re-raised unchanged.
        """

        tracked = TrackedCall(operation_id=new_operation_id())
        started_at = datetime.now(UTC)
        started = time.perf_counter()
        try:
            yield tracked
        except BaseException as exc:
            self.record(
                TelemetryRecord(
                    operation_id=tracked.operation_id,
                    kind=kind,
                    started_at=started_at,
                    duration_millis=_elapsed_millis(started),
                    outcome=TelemetryOutcome.FAILURE,
                    error_kind=error_kind_of(exc),
                    usage=tracked.usage,
                )
            )
            raise
        self.record(
            TelemetryRecord(
                operation_id=tracked.operation_id,
                kind=kind,
                started_at=started_at,
                duration_millis=_elapsed_millis(started),
                outcome=TelemetryOutcome.SUCCESS,
                usage=tracked.usage,
            )
        )

    def records(self) -> tuple[TelemetryRecord, ...]:
        with self._lock:
            return tuple(self._records)

    def summary(self) -> dict[TelemetryKind, KindSummary]:
        grouped: dict[TelemetryKind, list[TelemetryRecord]] = {}
        for entry in self.records():
            grouped.setdefault(entry.kind, []).append(entry)
        return {kind: _summarize(entries) for kind, entries in grouped.items()}


def _summarize(entries: list[TelemetryRecord]) -> KindSummary:
    usages = [entry.usage for entry in entries if entry.usage is not None]
    return KindSummary(
        calls=len(entries),
        failures=sum(1 for entry in entries if entry.outcome is TelemetryOutcome.FAILURE),
        mean_duration_millis=sum(entry.duration_millis for entry in entries) / len(entries),
        prompt_tokens=sum(usage.prompt_tokens for usage in usages),
        output_tokens=sum(usage.output_tokens for usage in usages),
    )


def _elapsed_millis(started: float) -> float:
    return (time.perf_counter() - started) * 1000.0
