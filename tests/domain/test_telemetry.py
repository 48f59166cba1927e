from __future__ import annotations

import asyncio

import pytest

from swatchbook.domain.errors import (
    InvalidInference,
    ModelUnavailable,
    NoCategoriesConfigured,
    error_kind_of,
)
from swatchbook.domain.model import TelemetryKind, TelemetryOutcome, TokenUsage
from swatchbook.domain.telemetry import TelemetryRecorder


def test_track_records_success_with_usage(telemetry: TelemetryRecorder) -> None:
    async def call() -> None:
        async with telemetry.track(TelemetryKind.MATCH) as tracked:
            tracked.usage = TokenUsage(prompt_tokens=10, output_tokens=4)

    asyncio.run(call())

    [record] = telemetry.records()
    assert record.kind is TelemetryKind.MATCH
    assert record.outcome is TelemetryOutcome.SUCCESS
    assert record.error_kind is None
    assert record.usage == TokenUsage(prompt_tokens=10, output_tokens=4)
    assert record.duration_millis >= 0
    assert record.started_at.tzinfo is not None


def test_track_records_failure_and_reraises(telemetry: TelemetryRecorder) -> None:
    async def call() -> None:
        async with telemetry.track(TelemetryKind.INFER):
            raise ModelUnavailable("quota exhausted")

    with pytest.raises(ModelUnavailable):
        asyncio.run(call())

    [record] = telemetry.records()
    assert record.outcome is TelemetryOutcome.FAILURE
    assert record.error_kind == "model_unavailable"


def test_cancellation_is_recorded(telemetry: TelemetryRecorder) -> None:
    async def call() -> None:
        async with telemetry.track(TelemetryKind.GENERATE):
            await asyncio.sleep(10)

    async def cancel_soon() -> None:
        task = asyncio.create_task(call())
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(cancel_soon())

    [record] = telemetry.records()
    assert record.error_kind == "CancelledError"


def test_operation_ids_are_unique(telemetry: TelemetryRecorder) -> None:
    async def calls() -> None:
        for _ in range(3):
            async with telemetry.track(TelemetryKind.MATCH):
                pass

    asyncio.run(calls())

    assert len({record.operation_id for record in telemetry.records()}) == 3


def test_summary_groups_by_kind(telemetry: TelemetryRecorder) -> None:
    async def calls() -> None:
        async with telemetry.track(TelemetryKind.MATCH) as tracked:
            tracked.usage = TokenUsage(prompt_tokens=100, output_tokens=20)
        with pytest.raises(ModelUnavailable):
            async with telemetry.track(TelemetryKind.MATCH):
                raise ModelUnavailable("503")
        async with telemetry.track(TelemetryKind.GENERATE):
            pass

    asyncio.run(calls())

    summary = telemetry.summary()
    assert summary[TelemetryKind.MATCH].calls == 2
    assert summary[TelemetryKind.MATCH].failures == 1
    assert summary[TelemetryKind.MATCH].prompt_tokens == 100
    assert summary[TelemetryKind.GENERATE].failures == 0
    assert TelemetryKind.INFER not in summary


def test_recording_errors_never_escape(telemetry: TelemetryRecorder) -> None:
    telemetry._records = None  # type: ignore[assignment]  # noqa: SLF001

    async def call() -> str:
        async with telemetry.track(TelemetryKind.MATCH):
            return "answer"

    assert asyncio.run(call()) == "answer"


@pytest.mark.parametrize(
    ("exc", "kind"),
    [
        (NoCategoriesConfigured("none"), "no_categories"),
        (InvalidInference("plastic", frozenset({"wood"})), "invalid_inference"),
        (ModelUnavailable("down"), "model_unavailable"),
        (TimeoutError(), "timeout"),
        (KeyError("x"), "KeyError"),
    ],
)
def test_error_kind_labels(exc: BaseException, kind: str) -> None:
    assert error_kind_of(exc) == kind
