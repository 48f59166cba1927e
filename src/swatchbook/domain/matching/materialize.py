"""Create texture records for unmatched candidates."""

from __future__ import annotations

import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from swatchbook.domain.errors import CollaboratorUnavailable, DuplicateTexture
from swatchbook.domain.model import TelemetryKind, TextureRecord
from swatchbook.domain.ports.queue import ImageJobDescriptor

if TYPE_CHECKING:
    from collections.abc import Mapping

    from swatchbook.domain.model import MatchCandidate
    from swatchbook.domain.ports.catalog import TextureStore
    from swatchbook.domain.ports.queue import ImageGenerationQueue
    from swatchbook.domain.telemetry import TelemetryRecorder

log = getLogger(__name__)


def new_texture_id() -> str:
    return uuid.uuid4().hex


@dataclass(slots=True)
class Materialization:
    texture: TextureRecord
    created: bool
    image_job_id: str | None = None


@dataclass(slots=True)
class EntryMaterializer:
    """Idempotent texture creation keyed on normalised name + language.

    The store's unique constraint on the key is what guarantees a single record
    under concurrent calls; the pre-checks only avoid needless inserts.
    """

    textures: TextureStore
    queue: ImageGenerationQueue
    telemetry: TelemetryRecorder
    id_factory: Callable[[], str] = field(default=new_texture_id)

    async def materialize(
        self,
        candidate: MatchCandidate,
        category_id: str,
        translations: Mapping[str, str] | None = None,
    ) -> Materialization:
        """Return the texture for ``candidate``, creating it on first sight.

        ``translations`` add names in other languages; the candidate's own
        language always keeps the name it was submitted with.
        """

        existing = await self._find_existing(candidate)
        if existing is not None:
            log.info("Texture for %r already exists as %s", candidate.raw_name, existing.id)
            return Materialization(texture=existing, created=False)

        record = TextureRecord(
            id=self.id_factory(),
            name={**(translations or {}), candidate.language_tag: candidate.display_name},
            category_id=category_id,
            idempotency_key=candidate.idempotency_key,
        )
        try:
            created = await self.textures.create_texture(record)
        except DuplicateTexture:
            stored = await self.textures.find_texture_by_key(candidate.idempotency_key)
            if stored is None:
                raise
            log.info("Lost creation race for %r; using %s", candidate.raw_name, stored.id)
            return Materialization(texture=stored, created=False)

        log.info("Created texture %s for %r in %s", created.id, candidate.raw_name, category_id)
        job_id = await self._enqueue_image(created, candidate)
        return Materialization(texture=created, created=True, image_job_id=job_id)

    async def _find_existing(self, candidate: MatchCandidate) -> TextureRecord | None:
        by_key = await self.textures.find_texture_by_key(candidate.idempotency_key)
        if by_key is not None:
            return by_key
        return await self.textures.find_texture_by_name(
            candidate.display_name, candidate.language_tag
        )

    async def _enqueue_image(self, texture: TextureRecord, candidate: MatchCandidate) -> str | None:
        descriptor = ImageJobDescriptor(
            texture_name=candidate.display_name,
            language=candidate.language_tag,
            category_id=texture.category_id,
        )
        try:
            async with self.telemetry.track(TelemetryKind.GENERATE):
                job_id = await self.queue.enqueue(texture.id, descriptor)
        except CollaboratorUnavailable:
            # the texture stays; its image can be requested again from the admin UI
            log.exception("Could not enqueue image generation for texture %s", texture.id)
            return None
        log.debug("Queued image job %s for texture %s", job_id, texture.id)
        return job_id
