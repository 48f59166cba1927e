"""Orphan recovery: relink storage objects that no catalog entity references.

Each scanned object is parsed, resolved to its owning style or material by slug,
and either reported or relinked. Relinks for different entities run
concurrently; relinks for the same entity are serialised behind a per-entity
lock, and the duplicate-path check re-reads the entity inside that lock.
"""

from __future__ import annotations

import asyncio
from contextlib import aclosing
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from swatchbook.config.recovery import RecoveryConfig
from swatchbook.domain.errors import CollaboratorUnavailable, UpdateFailed
from swatchbook.domain.model import OutcomeStatus, ParseFailure
from swatchbook.domain.provenance import parse_provenance

from .contracts import ObjectOutcome, RecoveryResult

if TYPE_CHECKING:
    from swatchbook.domain.model import CatalogEntity, EntityKind, StorageObject
    from swatchbook.domain.ports.catalog import CatalogLookup
    from swatchbook.domain.scanning import StorageScanner

log = getLogger(__name__)

type EntityKey = tuple[EntityKind, str]


@dataclass(slots=True)
class _Run:
    """Mutable bookkeeping for a single reconcile call."""

    dry_run: bool
    max_concurrency: int
    outcomes: list[ObjectOutcome | None] = field(default_factory=list["ObjectOutcome | None"])
    locks: dict[EntityKey, asyncio.Lock] = field(default_factory=dict["EntityKey", asyncio.Lock])
    tasks: set[asyncio.Task[None]] = field(default_factory=set["asyncio.Task[None]"])
    semaphore: asyncio.Semaphore = field(init=False)

    def __post_init__(self) -> None:
        self.semaphore = asyncio.Semaphore(self.max_concurrency)

    def reserve(self) -> int:
        self.outcomes.append(None)
        return len(self.outcomes) - 1

    def put(self, slot: int, outcome: ObjectOutcome) -> None:
        self.outcomes[slot] = outcome
        log.debug("%s: %s (%s)", outcome.path, outcome.status, outcome.reason or "-")

    def lock_for(self, entity: CatalogEntity) -> asyncio.Lock:
        return self.locks.setdefault((entity.kind, entity.id), asyncio.Lock())

    def first_task_error(self) -> BaseException | None:
        for task in self.tasks:
            if task.done() and not task.cancelled() and task.exception() is not None:
                return task.exception()
        return None

    async def drain(self) -> None:
        if self.tasks:
            await asyncio.gather(*self.tasks, return_exceptions=True)

    def result(self, *, cancelled: bool = False) -> RecoveryResult:
        completed = [outcome for outcome in self.outcomes if outcome is not None]
        result = RecoveryResult.from_outcomes(completed, dry_run=self.dry_run)
        result.cancelled = cancelled
        return result


@dataclass(slots=True)
class ReconciliationEngine:
    scanner: StorageScanner
    catalog: CatalogLookup
    config: RecoveryConfig = field(default_factory=RecoveryConfig)

    async def reconcile(
        self,
        scope_entity_id: str | None = None,
        *,
        dry_run: bool = True,
        cancel: asyncio.Event | None = None,
    ) -> RecoveryResult:
        """Scan storage and relink orphaned objects.

        ``cancel`` is checked after each object's outcome is recorded; once set,
        no further objects are started and the partial result is returned with
        ``cancelled=True``. ``StorageUnavailable``/``DataStoreUnavailable`` abort
        the run and carry the partial result on ``partial_result``.
        """

        run = _Run(dry_run=dry_run, max_concurrency=self.config.max_concurrency)
        prefixes = self.config.scoped_prefixes(scope_entity_id)
        log.info(
            "%sStarting orphan recovery: scope=%s, prefixes=%s",
            "[dry run] " if dry_run else "",
            scope_entity_id or "all",
            ", ".join(prefixes),
        )

        cancelled = False
        try:
            async with aclosing(self.scanner.scan(prefixes)) as objects:
                async for storage_object in objects:
                    await self._process(run, storage_object, scope_entity_id)
                    task_error = run.first_task_error()
                    if task_error is not None:
                        raise task_error
                    if cancel is not None and cancel.is_set():
                        cancelled = True
                        log.info("Orphan recovery cancelled after %s objects", len(run.outcomes))
                        break
            await asyncio.gather(*run.tasks)
        except CollaboratorUnavailable as exc:
            await run.drain()
            exc.partial_result = run.result()
            log.error("Orphan recovery aborted: %s", exc)
            raise
        except BaseException:
            for task in run.tasks:
                task.cancel()
            await run.drain()
            raise

        result = run.result(cancelled=cancelled)
        log.info(
            "Finished orphan recovery: scanned=%s, matched=%s, relinked=%s, already_linked=%s, "
            "unparsable=%s, missing=%s, failed=%s",
            result.scanned,
            result.matched,
            result.relinked,
            result.already_linked,
            result.unparsable,
            result.missing_catalog_entry,
            result.failed,
        )
        return result

    async def _process(
        self,
        run: _Run,
        storage_object: StorageObject,
        scope_entity_id: str | None,
    ) -> None:
        path = storage_object.path
        provenance = parse_provenance(path)
        if isinstance(provenance, ParseFailure):
            run.put(
                run.reserve(),
                ObjectOutcome(path=path, status=OutcomeStatus.UNPARSABLE, reason=provenance.reason),
            )
            return

        entity = await self.catalog.find_by_slug(provenance.entity_slug)
        if entity is None:
            run.put(
                run.reserve(),
                ObjectOutcome(
                    path=path,
                    status=OutcomeStatus.MISSING_CATALOG_ENTRY,
                    reason=f"no catalog entity with slug {provenance.entity_slug!r}",
                ),
            )
            return
        if scope_entity_id is not None and entity.id != scope_entity_id:
            log.debug("%s belongs to %s, outside scope %s", path, entity.id, scope_entity_id)
            return

        slot = run.reserve()
        if entity.has_image(path):
            run.put(slot, _outcome(entity, path, OutcomeStatus.ALREADY_LINKED))
            return
        if run.dry_run:
            run.put(slot, _outcome(entity, path, OutcomeStatus.RELINKED))
            return

        await run.semaphore.acquire()
        task = asyncio.create_task(self._relink(run, slot, entity, path))
        run.tasks.add(task)

    async def _relink(self, run: _Run, slot: int, entity: CatalogEntity, path: str) -> None:
        try:
            async with run.lock_for(entity):
                current = await self.catalog.get_entity(entity.kind, entity.id)
                if current is None:
                    run.put(
                        slot,
                        _outcome(entity, path, OutcomeStatus.FAILED, "entity no longer exists"),
                    )
                    return
                if current.has_image(path):
                    run.put(slot, _outcome(entity, path, OutcomeStatus.ALREADY_LINKED))
                    return
                try:
                    await self.catalog.append_image(current, path)
                except UpdateFailed as exc:
                    log.warning("Could not relink %s to %s: %s", path, entity.id, exc.reason)
                    run.put(slot, _outcome(entity, path, OutcomeStatus.FAILED, exc.reason))
                    return
                run.put(slot, _outcome(entity, path, OutcomeStatus.RELINKED))
        finally:
            run.semaphore.release()


def _outcome(
    entity: CatalogEntity,
    path: str,
    status: OutcomeStatus,
    reason: str | None = None,
) -> ObjectOutcome:
    return ObjectOutcome(
        path=path,
        status=status,
        entity_id=entity.id,
        entity_kind=entity.kind,
        reason=reason,
    )
