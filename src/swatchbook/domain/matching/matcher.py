"""Semantic matching of texture names against the existing catalog.

Exact (normalised) name hits are answered locally at confidence 1.0 so the model
is only consulted for genuinely new spellings, translations and variants.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from swatchbook.config.matching import MatchingConfig
from swatchbook.domain.errors import ModelError
from swatchbook.domain.model import MatchDecision, MatchMethod, MatchResult, TelemetryKind

from .model_calls import call_model
from .prompts import TextureMatchAnswer, build_match_prompt

if TYPE_CHECKING:
    from collections.abc import Sequence

    from swatchbook.domain.model import MatchCandidate, TextureRecord
    from swatchbook.domain.ports.catalog import TextureStore
    from swatchbook.domain.ports.model import StructuredModel
    from swatchbook.domain.telemetry import TelemetryRecorder

log = getLogger(__name__)


def find_exact_match(
    candidate: MatchCandidate,
    textures: Sequence[TextureRecord],
) -> TextureRecord | None:
    """Return the texture whose name or idempotency key equals the candidate's."""

    normalized = candidate.normalized_name
    key = candidate.idempotency_key
    for texture in textures:
        if texture.idempotency_key == key or texture.matches_name(normalized):
            return texture
    return None


@dataclass(slots=True)
class SemanticMatcher:
    textures: TextureStore
    model: StructuredModel
    telemetry: TelemetryRecorder
    config: MatchingConfig = field(default_factory=MatchingConfig)

    async def match(self, candidate: MatchCandidate) -> MatchResult:
        known = await self.textures.list_textures()

        exact = find_exact_match(candidate, known)
        if exact is not None:
            log.debug("Exact match for %r -> %s", candidate.raw_name, exact.id)
            return MatchResult(
                candidate=candidate,
                decision=MatchDecision.MATCHED,
                confidence=1.0,
                method=MatchMethod.EXACT,
                matched_texture_id=exact.id,
            )

        if not known:
            return MatchResult.no_match(
                candidate, method=MatchMethod.EXACT, reasoning="catalog has no textures"
            )

        prompt = build_match_prompt(candidate, known, languages=self.config.languages)
        try:
            answer = await call_model(
                self.model,
                prompt,
                TextureMatchAnswer,
                kind=TelemetryKind.MATCH,
                telemetry=self.telemetry,
                config=self.config,
            )
        except ModelError as exc:
            log.warning(
                "Semantic match for %r failed, treating as new: %s", candidate.raw_name, exc
            )
            return MatchResult.no_match(candidate, method=MatchMethod.FALLBACK, reasoning=str(exc))

        return self._decide(candidate, answer, known)

    def _decide(
        self,
        candidate: MatchCandidate,
        answer: TextureMatchAnswer,
        known: Sequence[TextureRecord],
    ) -> MatchResult:
        texture_id = answer.matched_texture_id
        if texture_id is None:
            return MatchResult.no_match(
                candidate, method=MatchMethod.SEMANTIC, reasoning=answer.reasoning
            )
        if all(texture.id != texture_id for texture in known):
            log.warning(
                "Model proposed unknown texture id %r for %r", texture_id, candidate.raw_name
            )
            return MatchResult.no_match(
                candidate,
                method=MatchMethod.SEMANTIC,
                reasoning=f"model proposed unknown texture id {texture_id!r}",
            )
        if answer.confidence < self.config.confidence_threshold:
            return MatchResult.no_match(
                candidate,
                method=MatchMethod.SEMANTIC,
                confidence=answer.confidence,
                reasoning=answer.reasoning,
            )
        log.info(
            "Semantic match for %r -> %s (%.0f%%)",
            candidate.raw_name,
            texture_id,
            answer.confidence * 100,
        )
        return MatchResult(
            candidate=candidate,
            decision=MatchDecision.MATCHED,
            confidence=answer.confidence,
            method=MatchMethod.SEMANTIC,
            matched_texture_id=texture_id,
            reasoning=answer.reasoning,
        )
