"""Match-or-create flow for incoming texture names."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from itertools import batched
from logging import getLogger
from typing import TYPE_CHECKING

from swatchbook.config.matching import DEFAULT_BATCH_SIZE
from swatchbook.domain.model import MatchCandidate

if TYPE_CHECKING:
    from collections.abc import Iterable

    from swatchbook.domain.model import MatchResult, TextureRecord
    from swatchbook.domain.ports.catalog import TextureStore

    from .inference import CategoryInferencer
    from .materialize import EntryMaterializer
    from .matcher import SemanticMatcher

log = getLogger(__name__)


@dataclass(slots=True)
class TextureResolution:
    texture: TextureRecord
    match: MatchResult
    created: bool


@dataclass(slots=True)
class TextureMatchingService:
    textures: TextureStore
    matcher: SemanticMatcher
    inferencer: CategoryInferencer
    materializer: EntryMaterializer
    batch_size: int = DEFAULT_BATCH_SIZE

    async def match_or_create(self, raw_name: str, language_tag: str) -> TextureResolution:
        """Link ``raw_name`` to an existing texture or create a new one.

        Category inference failures propagate: a blocked creation is preferable
        to a mis-categorised record.
        """

        candidate = MatchCandidate(raw_name=raw_name, language_tag=language_tag)
        return await self._resolve(candidate)

    async def match_or_create_many(
        self,
        raw_names: Iterable[str],
        language_tag: str,
    ) -> list[TextureResolution]:
        """Resolve several names, returning one resolution per input in order.

        Names with the same idempotency key are resolved once. Up to
        ``batch_size`` names run concurrently; each batch starts after the
        previous one finished, so textures it created are found by exact match.
        """

        candidates = [
            MatchCandidate(raw_name=name, language_tag=language_tag) for name in raw_names
        ]
        unique: dict[str, MatchCandidate] = {}
        for candidate in candidates:
            unique.setdefault(candidate.idempotency_key, candidate)
        pending = list(unique.values())

        resolved: dict[str, TextureResolution] = {}
        for batch in batched(pending, self.batch_size):
            resolutions = await asyncio.gather(*(self._resolve(candidate) for candidate in batch))
            for candidate, resolution in zip(batch, resolutions, strict=True):
                resolved[candidate.idempotency_key] = resolution
        log.info(
            "Resolved %s texture name(s) (%s distinct, %s created)",
            len(candidates),
            len(pending),
            sum(resolution.created for resolution in resolved.values()),
        )
        return [resolved[candidate.idempotency_key] for candidate in candidates]

    async def _resolve(self, candidate: MatchCandidate) -> TextureResolution:
        match = await self.matcher.match(candidate)

        if match.is_match and match.matched_texture_id is not None:
            texture = await self.textures.get_texture(match.matched_texture_id)
            if texture is not None:
                return TextureResolution(texture=texture, match=match, created=False)
            log.warning(
                "Matched texture %s disappeared before it could be loaded; creating new",
                match.matched_texture_id,
            )

        inference = await self.inferencer.infer_with_translations(candidate)
        materialized = await self.materializer.materialize(
            candidate, inference.category_id, inference.translations
        )
        return TextureResolution(
            texture=materialized.texture,
            match=match,
            created=materialized.created,
        )
