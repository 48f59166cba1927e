"""Timed, telemetry-wrapped model calls with bounded retries."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import BaseModel

from swatchbook.domain.errors import ModelError, ModelUnavailable, error_kind_of

if TYPE_CHECKING:
    from collections.abc import Callable

    from swatchbook.config.matching import MatchingConfig
    from swatchbook.domain.model import TelemetryKind
    from swatchbook.domain.ports.model import StructuredModel
    from swatchbook.domain.telemetry import TelemetryRecorder

log = getLogger(__name__)


async def call_model[TSchema: BaseModel](
    model: StructuredModel,
    prompt: str,
    schema: type[TSchema],
    *,
    kind: TelemetryKind,
    telemetry: TelemetryRecorder,
    config: MatchingConfig,
    check: Callable[[TSchema], None] | None = None,
) -> TSchema:
    """Call ``model`` with up to ``config.max_retries`` retries.

    Every attempt is recorded as its own telemetry event. ``check`` may raise a
    ``ModelError`` to reject a schema-valid answer, which also counts as a failed
    attempt. The last failure is raised as a ``ModelError``; timeouts become
    ``ModelUnavailable``.
    """

    attempts = config.max_retries + 1
    for attempt in range(1, attempts + 1):
        try:
            async with telemetry.track(kind) as tracked:
                async with asyncio.timeout(config.model_timeout_seconds):
                    response = await model.generate_structured(prompt, schema)
                tracked.usage = response.usage
                if check is not None:
                    check(response.value)
        except (ModelError, TimeoutError) as exc:
            if attempt >= attempts:
                if isinstance(exc, TimeoutError):
                    raise ModelUnavailable(
                        f"{kind} call timed out after {config.model_timeout_seconds}s"
                    ) from exc
                raise
            delay = config.backoff_for(attempt)
            log.warning(
                "%s call failed (%s, attempt %s/%s); retrying in %.2fs",
                kind,
                error_kind_of(exc),
                attempt,
                attempts,
                delay,
            )
            await asyncio.sleep(delay)
        else:
            return response.value
    raise AssertionError("unreachable: retry loop exited without result")
