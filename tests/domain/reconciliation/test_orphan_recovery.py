from __future__ import annotations

import asyncio

import pytest

from swatchbook.config import RecoveryConfig
from swatchbook.domain.errors import DataStoreUnavailable, StorageUnavailable
from swatchbook.domain.model import EntityKind, OutcomeStatus
from swatchbook.domain.reconciliation import ReconciliationEngine, RecoveryResult
from swatchbook.domain.scanning import StorageScanner
from tests.helpers.catalog import (
    FakeObjectLister,
    InMemoryCatalogStore,
    asset_path,
    material,
    style,
)


def _engine(
    store: InMemoryCatalogStore,
    lister: FakeObjectLister,
    config: RecoveryConfig | None = None,
) -> ReconciliationEngine:
    return ReconciliationEngine(
        scanner=StorageScanner(lister),
        catalog=store,
        config=config or RecoveryConfig(),
    )


def _run(engine: ReconciliationEngine, *args: object, **kwargs: object) -> RecoveryResult:
    return asyncio.run(engine.reconcile(*args, **kwargs))  # type: ignore[arg-type]


def test_relinks_orphaned_images_to_their_style() -> None:
    store = InMemoryCatalogStore.with_entities(style("s1", "oak-parquet"))
    paths = [asset_path("oak-parquet", 0), asset_path("oak-parquet", 1)]
    engine = _engine(store, FakeObjectLister.of(paths))

    result = _run(engine, dry_run=False)

    assert result.relinked == 2
    assert result.already_linked == 0
    assert result.matched == 2
    assert result.succeeded
    assert store.entity(EntityKind.STYLE, "s1").images == tuple(paths)


def test_unknown_slug_is_reported_not_created() -> None:
    store = InMemoryCatalogStore.with_entities(style("s1", "oak-parquet"))
    engine = _engine(store, FakeObjectLister.of([asset_path("ghost-slug")]))

    result = _run(engine, dry_run=False)

    assert result.missing_catalog_entry == 1
    assert result.relinked == 0
    assert result.matched == 0
    assert result.details[0].status is OutcomeStatus.MISSING_CATALOG_ENTRY
    assert "ghost-slug" in (result.details[0].reason or "")
    assert store.append_calls == []


def test_second_run_only_finds_linked_images() -> None:
    store = InMemoryCatalogStore.with_entities(
        style("s1", "oak-parquet"),
        material("m1", "travertine"),
    )
    paths = [
        asset_path("oak-parquet", 0),
        asset_path("travertine", 1, folder="materials/m1"),
        asset_path("oak-parquet", 2),
    ]
    engine = _engine(store, FakeObjectLister.of(paths))

    first = _run(engine, dry_run=False)
    second = _run(engine, dry_run=False)

    assert first.relinked == 3
    assert second.relinked == 0
    assert second.matched == second.already_linked == 3
    assert store.entity(EntityKind.MATERIAL, "m1").images == (paths[1],)


def test_dry_run_reports_without_writing() -> None:
    linked = asset_path("oak-parquet", 0)
    orphan = asset_path("oak-parquet", 1)
    store = InMemoryCatalogStore.with_entities(style("s1", "oak-parquet", linked))
    engine = _engine(store, FakeObjectLister.of([linked, orphan]))

    result = _run(engine)

    assert result.dry_run
    assert result.relinked == 1
    assert result.already_linked == 1
    assert store.append_calls == []
    assert store.entity(EntityKind.STYLE, "s1").images == (linked,)


def test_unparsable_objects_are_counted_and_skipped() -> None:
    store = InMemoryCatalogStore.with_entities(style("s1", "oak-parquet"))
    paths = ["styles/unsorted/cover.png", asset_path("oak-parquet")]
    engine = _engine(store, FakeObjectLister.of(paths))

    result = _run(engine, dry_run=False)

    assert result.scanned == 2
    assert result.unparsable == 1
    assert result.relinked == 1
    assert [detail.path for detail in result.details] == paths


def test_oversized_timestamp_does_not_abort_the_run() -> None:
    store = InMemoryCatalogStore.with_entities(style("s1", "oak-parquet"))
    oversized = "styles/unsorted/" + "9" * 5000 + "-a1b2c3-oak-parquet-0.png"
    paths = [oversized, asset_path("oak-parquet")]
    engine = _engine(store, FakeObjectLister.of(paths))

    result = _run(engine, dry_run=False)

    assert result.unparsable == 1
    assert result.relinked == 1
    assert result.details[0].status is OutcomeStatus.UNPARSABLE


def test_scoped_run_lists_only_the_entity_folder() -> None:
    store = InMemoryCatalogStore.with_entities(
        style("s1", "oak-parquet"),
        style("s2", "walnut-herringbone"),
    )
    paths = [
        asset_path("oak-parquet", 0, folder="styles/s1"),
        # misfiled object that belongs to another style
        asset_path("walnut-herringbone", 1, folder="styles/s1"),
        asset_path("walnut-herringbone", 2, folder="styles/s2"),
    ]
    lister = FakeObjectLister.of(paths)
    engine = _engine(store, lister, RecoveryConfig(prefixes=("styles/",)))

    result = _run(engine, "s1", dry_run=False)

    assert lister.listed_prefixes == ["styles/s1/"]
    assert result.scanned == 1
    assert result.relinked == 1
    assert store.entity(EntityKind.STYLE, "s2").images == ()


def test_rejected_update_fails_only_that_object() -> None:
    store = InMemoryCatalogStore.with_entities(
        style("s1", "oak-parquet"),
        style("s2", "walnut-herringbone"),
    )
    store.reject_appends_for.add("s2")
    paths = [asset_path("oak-parquet", 0), asset_path("walnut-herringbone", 1)]
    engine = _engine(store, FakeObjectLister.of(paths))

    result = _run(engine, dry_run=False)

    assert result.relinked == 1
    assert result.failed == 1
    assert result.matched == 2
    assert not result.succeeded
    failed = next(detail for detail in result.details if detail.status is OutcomeStatus.FAILED)
    assert failed.entity_id == "s2"
    assert failed.reason == "row is locked"


def test_concurrent_relinks_to_one_entity_keep_every_image() -> None:
    store = InMemoryCatalogStore.with_entities(style("s1", "oak-parquet"))
    paths = [asset_path("oak-parquet", index) for index in range(12)]
    engine = _engine(store, FakeObjectLister.of(paths), RecoveryConfig(max_concurrency=4))

    result = _run(engine, dry_run=False)

    assert result.relinked == 12
    assert set(store.entity(EntityKind.STYLE, "s1").images) == set(paths)
    assert len(store.entity(EntityKind.STYLE, "s1").images) == 12


def test_storage_outage_surfaces_partial_result() -> None:
    store = InMemoryCatalogStore.with_entities(style("s1", "oak-parquet"))
    paths = [asset_path("oak-parquet", index) for index in range(5)]
    engine = _engine(store, FakeObjectLister.of(paths, fail_after=2))

    with pytest.raises(StorageUnavailable) as excinfo:
        _run(engine, dry_run=False)

    partial = excinfo.value.partial_result
    assert partial is not None
    assert partial.scanned == 2
    assert partial.relinked == 2
    assert len(store.entity(EntityKind.STYLE, "s1").images) == 2


def test_data_store_outage_aborts_the_run() -> None:
    store = InMemoryCatalogStore.with_entities(style("s1", "oak-parquet"))
    store.unavailable = True
    engine = _engine(store, FakeObjectLister.of([asset_path("oak-parquet")]))

    with pytest.raises(DataStoreUnavailable) as excinfo:
        _run(engine, dry_run=False)

    assert excinfo.value.partial_result is not None
    assert excinfo.value.partial_result.scanned == 0


def test_cancelled_run_returns_what_was_done() -> None:
    store = InMemoryCatalogStore.with_entities(style("s1", "oak-parquet"))
    paths = [asset_path("oak-parquet", index) for index in range(4)]
    engine = _engine(store, FakeObjectLister.of(paths))
    cancel = asyncio.Event()
    cancel.set()

    result = _run(engine, dry_run=False, cancel=cancel)

    assert result.cancelled
    assert result.scanned == 1
    assert store.entity(EntityKind.STYLE, "s1").images == (paths[0],)
