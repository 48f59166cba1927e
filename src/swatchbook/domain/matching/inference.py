"""Material category inference for textures that matched nothing."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from swatchbook.config.matching import MatchingConfig
from swatchbook.domain.errors import InvalidInference, NoCategoriesConfigured
from swatchbook.domain.model import TelemetryKind, normalize_language

from .model_calls import call_model
from .prompts import CategoryAnswer, build_category_prompt

if TYPE_CHECKING:
    from swatchbook.domain.model import MatchCandidate
    from swatchbook.domain.ports.catalog import TextureStore
    from swatchbook.domain.ports.model import StructuredModel
    from swatchbook.domain.telemetry import TelemetryRecorder

    from .prompts import TranslatedName

log = getLogger(__name__)


@dataclass(slots=True)
class CategoryInference:
    category_id: str
    # language tag -> name, never including the candidate's own language
    translations: dict[str, str] = field(default_factory=dict)


@dataclass(slots=True)
class CategoryInferencer:
    textures: TextureStore
    model: StructuredModel
    telemetry: TelemetryRecorder
    config: MatchingConfig = field(default_factory=MatchingConfig)

    async def infer(self, candidate: MatchCandidate) -> str:
        """Return a category slug from the closed set, or raise.

        An answer outside the set is never coerced; after the last retry the
        ``InvalidInference`` (or ``ModelError``) propagates to the caller.
        """

        inference = await self.infer_with_translations(candidate)
        return inference.category_id

    async def infer_with_translations(self, candidate: MatchCandidate) -> CategoryInference:
        categories = await self.textures.list_categories()
        if not categories:
            raise NoCategoriesConfigured("No material categories are configured")

        def ensure_known(answer: CategoryAnswer) -> None:
            if answer.category_slug.strip() not in categories:
                raise InvalidInference(answer.category_slug, categories)

        answer = await call_model(
            self.model,
            build_category_prompt(candidate, categories, languages=self.config.languages),
            CategoryAnswer,
            kind=TelemetryKind.INFER,
            telemetry=self.telemetry,
            config=self.config,
            check=ensure_known,
        )
        slug = answer.category_slug.strip()
        translations = self._usable_translations(candidate, answer.translations)
        log.info("Inferred category %s for %r", slug, candidate.raw_name)
        return CategoryInference(category_id=slug, translations=translations)

    def _usable_translations(
        self,
        candidate: MatchCandidate,
        proposed: list[TranslatedName],
    ) -> dict[str, str]:
        translations: dict[str, str] = {}
        for entry in proposed:
            language = normalize_language(entry.language)
            name = " ".join(entry.name.split())
            if language == candidate.language_tag or language not in self.config.languages:
                continue
            if name and language not in translations:
                translations[language] = name
        if len(translations) < len(proposed):
            log.debug("Dropped unusable translations for %r: %s", candidate.raw_name, proposed)
        return translations
