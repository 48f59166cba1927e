from __future__ import annotations

import asyncio

from swatchbook.config import MatchingConfig
from swatchbook.domain.errors import MalformedModelResponse, ModelUnavailable
from swatchbook.domain.matching import SemanticMatcher, find_exact_match
from swatchbook.domain.matching.prompts import TextureMatchAnswer
from swatchbook.domain.model import (
    MatchCandidate,
    MatchDecision,
    MatchMethod,
    TelemetryKind,
    TelemetryOutcome,
)
from swatchbook.domain.telemetry import TelemetryRecorder
from tests.helpers.catalog import InMemoryCatalogStore, texture
from tests.helpers.model import ScriptedModel


def _store() -> InMemoryCatalogStore:
    store = InMemoryCatalogStore()
    store.add_texture(texture("t-oak", he="אלון", en="Oak"))
    store.add_texture(texture("t-marble", "stone", en="Carrara Marble"))
    return store


def _match(
    matcher: SemanticMatcher,
    name: str,
    lang: str = "en",
):
    return asyncio.run(matcher.match(MatchCandidate(raw_name=name, language_tag=lang)))


def test_exact_name_match_skips_the_model(
    telemetry: TelemetryRecorder,
    matching_config: MatchingConfig,
) -> None:
    model = ScriptedModel()
    matcher = SemanticMatcher(_store(), model, telemetry, matching_config)

    result = _match(matcher, "  OAK ", "en-US")

    assert result.decision is MatchDecision.MATCHED
    assert result.method is MatchMethod.EXACT
    assert result.confidence == 1.0
    assert result.matched_texture_id == "t-oak"
    assert model.calls == 0
    assert telemetry.records() == ()


def test_exact_match_is_language_independent(
    telemetry: TelemetryRecorder,
    matching_config: MatchingConfig,
) -> None:
    matcher = SemanticMatcher(_store(), ScriptedModel(), telemetry, matching_config)

    result = _match(matcher, "אלון", "en")

    assert result.matched_texture_id == "t-oak"


def test_cross_language_match_above_threshold(
    telemetry: TelemetryRecorder,
    matching_config: MatchingConfig,
) -> None:
    model = ScriptedModel(
        [TextureMatchAnswer(matched_texture_id="t-oak", confidence=0.92, reasoning="oak")]
    )
    matcher = SemanticMatcher(_store(), model, telemetry, matching_config)

    result = _match(matcher, "עץ אלון מוברש", "he")

    assert result.decision is MatchDecision.MATCHED
    assert result.method is MatchMethod.SEMANTIC
    assert result.confidence == 0.92
    assert result.matched_texture_id == "t-oak"
    assert model.calls == 1
    assert "t-oak" in model.prompts[0]
    assert "עץ אלון מוברש" in model.prompts[0]
    [record] = telemetry.records()
    assert record.kind is TelemetryKind.MATCH
    assert record.outcome is TelemetryOutcome.SUCCESS
    assert record.usage is not None
    assert record.usage.prompt_tokens == 120


def test_low_confidence_claim_is_not_a_match(
    telemetry: TelemetryRecorder,
    matching_config: MatchingConfig,
) -> None:
    model = ScriptedModel([TextureMatchAnswer(matched_texture_id="t-marble", confidence=0.6)])
    matcher = SemanticMatcher(_store(), model, telemetry, matching_config)

    result = _match(matcher, "Calacatta")

    assert result.decision is MatchDecision.NO_MATCH
    assert result.matched_texture_id is None
    assert result.confidence == 0.6


def test_threshold_is_configurable(telemetry: TelemetryRecorder) -> None:
    model = ScriptedModel([TextureMatchAnswer(matched_texture_id="t-marble", confidence=0.6)])
    config = MatchingConfig(confidence_threshold=0.5, retry_backoff_seconds=0.0)
    matcher = SemanticMatcher(_store(), model, telemetry, config)

    result = _match(matcher, "Calacatta")

    assert result.is_match


def test_unknown_texture_id_is_treated_as_no_match(
    telemetry: TelemetryRecorder,
    matching_config: MatchingConfig,
) -> None:
    model = ScriptedModel([TextureMatchAnswer(matched_texture_id="t-invented", confidence=0.99)])
    matcher = SemanticMatcher(_store(), model, telemetry, matching_config)

    result = _match(matcher, "Teak")

    assert result.decision is MatchDecision.NO_MATCH
    assert result.confidence == 0.0
    assert "t-invented" in (result.reasoning or "")


def test_model_failure_retries_then_fails_open(
    telemetry: TelemetryRecorder,
    matching_config: MatchingConfig,
) -> None:
    model = ScriptedModel([ModelUnavailable("503"), MalformedModelResponse("not json")])
    matcher = SemanticMatcher(_store(), model, telemetry, matching_config)

    result = _match(matcher, "Teak")

    assert result.decision is MatchDecision.NO_MATCH
    assert result.method is MatchMethod.FALLBACK
    assert result.confidence == 0.0
    assert model.calls == 2
    assert [record.error_kind for record in telemetry.records()] == [
        "model_unavailable",
        "malformed_response",
    ]


def test_retry_recovers_from_transient_failure(
    telemetry: TelemetryRecorder,
    matching_config: MatchingConfig,
) -> None:
    model = ScriptedModel(
        [ModelUnavailable("503"), TextureMatchAnswer(matched_texture_id="t-oak", confidence=0.8)]
    )
    matcher = SemanticMatcher(_store(), model, telemetry, matching_config)

    result = _match(matcher, "Rustic oak planks")

    assert result.is_match
    assert [record.outcome for record in telemetry.records()] == [
        TelemetryOutcome.FAILURE,
        TelemetryOutcome.SUCCESS,
    ]


def test_model_timeout_counts_as_failure(telemetry: TelemetryRecorder) -> None:
    model = ScriptedModel(
        [TextureMatchAnswer(matched_texture_id="t-oak", confidence=0.9)],
        delay=0.5,
    )
    config = MatchingConfig(max_retries=0, model_timeout_seconds=0.01)
    matcher = SemanticMatcher(_store(), model, telemetry, config)

    result = _match(matcher, "Rustic oak planks")

    assert result.method is MatchMethod.FALLBACK
    [record] = telemetry.records()
    assert record.error_kind == "timeout"


def test_empty_catalog_never_calls_the_model(
    telemetry: TelemetryRecorder,
    matching_config: MatchingConfig,
) -> None:
    model = ScriptedModel()
    matcher = SemanticMatcher(InMemoryCatalogStore(), model, telemetry, matching_config)

    result = _match(matcher, "Oak")

    assert result.decision is MatchDecision.NO_MATCH
    assert model.calls == 0


def test_find_exact_match_uses_idempotency_key() -> None:
    record = texture("t-linen", "fabric", key="natural linen|en", he="פשתן")
    candidate = MatchCandidate(raw_name="Natural  Linen", language_tag="EN")

    assert find_exact_match(candidate, [record]) is record
