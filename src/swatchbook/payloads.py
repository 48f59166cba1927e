"""JSON-ready payloads returned by the application entry points."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

if TYPE_CHECKING:
    from swatchbook.domain.matching import TextureResolution
    from swatchbook.domain.reconciliation import ObjectOutcome, RecoveryResult
    from swatchbook.domain.telemetry import KindSummary


class PayloadModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    def to_json_dict(self) -> dict[str, object]:
        return self.model_dump(mode="json", by_alias=True)


class ObjectOutcomePayload(PayloadModel):
    path: str
    status: str
    entity_id: str | None = None
    entity_kind: str | None = None
    reason: str | None = None

    @classmethod
    def from_outcome(cls, outcome: ObjectOutcome) -> ObjectOutcomePayload:
        return cls(
            path=outcome.path,
            status=str(outcome.status),
            entity_id=outcome.entity_id,
            entity_kind=str(outcome.entity_kind) if outcome.entity_kind else None,
            reason=outcome.reason,
        )


class RecoveryPayload(PayloadModel):
    success: bool
    dry_run: bool
    scanned: int
    matched: int
    relinked: int
    already_linked: int
    unparsable: int
    missing_catalog_entry: int
    failed: int
    cancelled: bool = False
    error: str | None = None
    details: list[ObjectOutcomePayload] = Field(default_factory=list["ObjectOutcomePayload"])

    @classmethod
    def from_result(cls, result: RecoveryResult) -> RecoveryPayload:
        return cls(
            success=result.succeeded,
            dry_run=result.dry_run,
            scanned=result.scanned,
            matched=result.matched,
            relinked=result.relinked,
            already_linked=result.already_linked,
            unparsable=result.unparsable,
            missing_catalog_entry=result.missing_catalog_entry,
            failed=result.failed,
            cancelled=result.cancelled,
            error=result.error,
            details=[ObjectOutcomePayload.from_outcome(outcome) for outcome in result.details],
        )


class TextureResolutionPayload(PayloadModel):
    texture_id: str
    texture_name: dict[str, str]
    category_id: str
    created: bool
    decision: str
    confidence: float
    method: str
    reasoning: str | None = None

    @classmethod
    def from_resolution(cls, resolution: TextureResolution) -> TextureResolutionPayload:
        return cls(
            texture_id=resolution.texture.id,
            texture_name=dict(resolution.texture.name),
            category_id=resolution.texture.category_id,
            created=resolution.created,
            decision=str(resolution.match.decision),
            confidence=resolution.match.confidence,
            method=str(resolution.match.method),
            reasoning=resolution.match.reasoning,
        )


class TelemetrySummaryPayload(PayloadModel):
    kind: str
    calls: int
    failures: int
    mean_duration_millis: float
    prompt_tokens: int
    output_tokens: int

    @classmethod
    def from_summary(cls, kind: str, summary: KindSummary) -> TelemetrySummaryPayload:
        return cls(
            kind=kind,
            calls=summary.calls,
            failures=summary.failures,
            mean_duration_millis=summary.mean_duration_millis,
            prompt_tokens=summary.prompt_tokens,
            output_tokens=summary.output_tokens,
        )
