"""Application orchestration entry points."""

from __future__ import annotations

from contextlib import AsyncExitStack, asynccontextmanager
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from swatchbook.adapters.gcs import GcsObjectLister
from swatchbook.adapters.gemini import GeminiStructuredModel
from swatchbook.adapters.http_resilience import ResilientClient
from swatchbook.adapters.sqlalchemy import (
    SqlAlchemyCatalogStore,
    SqlAlchemyImageJobQueue,
    is_started,
    startup,
)
from swatchbook.config import (
    MatchingConfig,
    RecoveryConfig,
    get_gcs_config,
    get_gemini_config,
    get_matching_config,
    get_recovery_config,
)
from swatchbook.domain.errors import CollaboratorUnavailable
from swatchbook.domain.matching import (
    CategoryInferencer,
    EntryMaterializer,
    SemanticMatcher,
    TextureMatchingService,
)
from swatchbook.domain.reconciliation import ReconciliationEngine, RecoveryResult
from swatchbook.domain.scanning import StorageScanner
from swatchbook.domain.telemetry import TelemetryRecorder
from swatchbook.payloads import RecoveryPayload, TextureResolutionPayload

if TYPE_CHECKING:
    import asyncio
    from collections.abc import AsyncIterator, Sequence

    from swatchbook.domain.ports import (
        CatalogStore,
        ImageGenerationQueue,
        ObjectLister,
        StructuredModel,
    )

log = getLogger(__name__)


class ServiceNotConfigured(RuntimeError):
    """Raised when an entry point needs a collaborator that was not built."""


@dataclass(slots=True)
class Services:
    """Collaborators shared by every entry point of one process.

    A single ``TelemetryRecorder`` lives here so that all model and queue calls
    land in the same log.
    """

    catalog: CatalogStore
    queue: ImageGenerationQueue
    lister: ObjectLister | None = None
    model: StructuredModel | None = None
    telemetry: TelemetryRecorder = field(default_factory=TelemetryRecorder)
    matching: MatchingConfig = field(default_factory=MatchingConfig)
    recovery: RecoveryConfig = field(default_factory=RecoveryConfig)

    def reconciliation_engine(self) -> ReconciliationEngine:
        if self.lister is None:
            raise ServiceNotConfigured("Orphan recovery requires an object storage lister")
        return ReconciliationEngine(
            scanner=StorageScanner(self.lister),
            catalog=self.catalog,
            config=self.recovery,
        )

    def matching_service(self) -> TextureMatchingService:
        if self.model is None:
            raise ServiceNotConfigured("Texture matching requires a generative model")
        return TextureMatchingService(
            textures=self.catalog,
            matcher=SemanticMatcher(self.catalog, self.model, self.telemetry, self.matching),
            inferencer=CategoryInferencer(self.catalog, self.model, self.telemetry, self.matching),
            materializer=EntryMaterializer(self.catalog, self.queue, self.telemetry),
            batch_size=self.matching.batch_size,
        )


@asynccontextmanager
async def open_services(
    *,
    storage: bool = False,
    model: bool = False,
    database_uri: str | None = None,
) -> AsyncIterator[Services]:
    """Build the configured adapters; HTTP clients are closed on exit."""

    if not is_started():
        await startup(database_uri=database_uri)

    async with AsyncExitStack() as stack:
        lister: ObjectLister | None = None
        structured_model: StructuredModel | None = None
        if storage:
            gcs_config = get_gcs_config()
            gcs_client = await stack.enter_async_context(ResilientClient(gcs_config.resilience))
            lister = GcsObjectLister(gcs_config, gcs_client)
        if model:
            gemini_config = get_gemini_config()
            gemini_client = await stack.enter_async_context(
                ResilientClient(gemini_config.resilience)
            )
            structured_model = GeminiStructuredModel(gemini_config, gemini_client)

        yield Services(
            catalog=SqlAlchemyCatalogStore(),
            queue=SqlAlchemyImageJobQueue(),
            lister=lister,
            model=structured_model,
            matching=get_matching_config(),
            recovery=get_recovery_config(),
        )


@asynccontextmanager
async def _services_scope(
    services: Services | None,
    *,
    storage: bool = False,
    model: bool = False,
) -> AsyncIterator[Services]:
    if services is not None:
        yield services
        return
    async with open_services(storage=storage, model=model) as built:
        yield built


async def recover(
    style_id: str | None = None,
    *,
    dry_run: bool = True,
    services: Services | None = None,
    cancel: asyncio.Event | None = None,
) -> dict[str, object]:
    """Run orphan recovery and return the result as a camelCase payload.

    A storage or data store outage ends the run early; the payload then holds
    the partial counts plus ``error``.
    """

    async with _services_scope(services, storage=True) as active:
        engine = active.reconciliation_engine()
        try:
            result = await engine.reconcile(style_id, dry_run=dry_run, cancel=cancel)
        except CollaboratorUnavailable as exc:
            result = exc.partial_result or RecoveryResult(dry_run=dry_run)
            result.error = str(exc)
    return RecoveryPayload.from_result(result).to_json_dict()


async def match_or_create_texture(
    raw_name: str,
    language_tag: str,
    *,
    services: Services | None = None,
) -> dict[str, object]:
    """Link a texture name to the catalog, creating the texture if it is new."""

    async with _services_scope(services, model=True) as active:
        resolution = await active.matching_service().match_or_create(raw_name, language_tag)
    log.info(
        "Resolved %r (%s) to texture %s: decision=%s, created=%s",
        raw_name,
        language_tag,
        resolution.texture.id,
        resolution.match.decision,
        resolution.created,
    )
    return TextureResolutionPayload.from_resolution(resolution).to_json_dict()


async def match_or_create_textures(
    raw_names: Sequence[str],
    language_tag: str,
    *,
    services: Services | None = None,
) -> list[dict[str, object]]:
    """Batch form of :func:`match_or_create_texture`; payloads follow input order."""

    async with _services_scope(services, model=True) as active:
        resolutions = await active.matching_service().match_or_create_many(
            raw_names, language_tag
        )
    return [
        TextureResolutionPayload.from_resolution(resolution).to_json_dict()
        for resolution in resolutions
    ]
