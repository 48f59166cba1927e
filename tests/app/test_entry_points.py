from __future__ import annotations

import asyncio

import pytest

from swatchbook.app import (
    ServiceNotConfigured,
    Services,
    match_or_create_texture,
    match_or_create_textures,
    recover,
)
from swatchbook.config import MatchingConfig
from swatchbook.domain.matching.prompts import CategoryAnswer, TextureMatchAnswer, TranslatedName
from swatchbook.domain.model import EntityKind
from swatchbook.domain.telemetry import TelemetryRecorder
from tests.helpers.catalog import (
    FakeObjectLister,
    InMemoryCatalogStore,
    RecordingQueue,
    asset_path,
    style,
    texture,
)
from tests.helpers.model import ScriptedModel


def _services(
    catalog: InMemoryCatalogStore,
    *,
    lister: FakeObjectLister | None = None,
    model: ScriptedModel | None = None,
) -> Services:
    return Services(
        catalog=catalog,
        queue=RecordingQueue(),
        lister=lister,
        model=model,
        telemetry=TelemetryRecorder(),
        matching=MatchingConfig(retry_backoff_seconds=0.0),
    )


def test_recover_returns_camel_case_payload() -> None:
    catalog = InMemoryCatalogStore.with_entities(style("s1", "oak-parquet"))
    paths = [asset_path("oak-parquet", 0), asset_path("oak-parquet", 1), asset_path("ghost-slug")]
    services = _services(catalog, lister=FakeObjectLister.of(paths))

    payload = asyncio.run(recover(dry_run=False, services=services))

    assert payload["success"] is True
    assert payload["dryRun"] is False
    assert payload["scanned"] == 3
    assert payload["relinked"] == 2
    assert payload["alreadyLinked"] == 0
    assert payload["missingCatalogEntry"] == 1
    assert payload["error"] is None
    details = payload["details"]
    assert isinstance(details, list)
    assert details[0] == {
        "path": paths[0],
        "status": "relinked",
        "entityId": "s1",
        "entityKind": "style",
        "reason": None,
    }


def test_recover_defaults_to_dry_run() -> None:
    catalog = InMemoryCatalogStore.with_entities(style("s1", "oak-parquet"))
    services = _services(catalog, lister=FakeObjectLister.of([asset_path("oak-parquet")]))

    payload = asyncio.run(recover(services=services))

    assert payload["dryRun"] is True
    assert payload["relinked"] == 1
    assert catalog.entity(EntityKind.STYLE, "s1").images == ()


def test_recover_reports_storage_outage_as_error() -> None:
    catalog = InMemoryCatalogStore.with_entities(style("s1", "oak-parquet"))
    paths = [asset_path("oak-parquet", index) for index in range(3)]
    services = _services(catalog, lister=FakeObjectLister.of(paths, fail_after=1))

    payload = asyncio.run(recover(dry_run=False, services=services))

    assert payload["success"] is False
    assert payload["error"] == "listing connection reset"
    assert payload["scanned"] == 1
    assert payload["relinked"] == 1


def test_recover_requires_a_lister() -> None:
    services = _services(InMemoryCatalogStore())

    with pytest.raises(ServiceNotConfigured):
        asyncio.run(recover(services=services))


def test_match_or_create_texture_payload() -> None:
    catalog = InMemoryCatalogStore()
    catalog.categories.update({"wood", "stone"})
    catalog.add_texture(texture("t-oak", en="Oak"))
    model = ScriptedModel(
        [
            TextureMatchAnswer(matched_texture_id=None, confidence=0.2, reasoning="different"),
            CategoryAnswer(category_slug="stone"),
        ]
    )
    services = _services(catalog, model=model)

    payload = asyncio.run(match_or_create_texture("טרוורטין", "he-IL", services=services))

    assert payload["created"] is True
    assert payload["categoryId"] == "stone"
    assert payload["textureName"] == {"he": "טרוורטין"}
    assert payload["decision"] == "no_match"
    assert payload["method"] == "semantic"
    assert payload["confidence"] == 0.0
    assert set(services.telemetry.summary()) == {"match", "infer", "generate"}


def test_match_or_create_textures_keeps_input_order() -> None:
    catalog = InMemoryCatalogStore()
    catalog.categories.update({"wood", "stone"})
    catalog.add_texture(texture("t-oak", en="Oak"))
    model = ScriptedModel(
        [
            TextureMatchAnswer(matched_texture_id=None, confidence=0.1),
            CategoryAnswer(
                category_slug="stone",
                translations=[TranslatedName(language="he", name="טרוורטין")],
            ),
        ]
    )
    services = _services(catalog, model=model)

    payloads = asyncio.run(
        match_or_create_textures(["Travertine", "oak", "travertine "], "en", services=services)
    )

    assert [payload["created"] for payload in payloads] == [True, False, True]
    assert payloads[0]["textureId"] == payloads[2]["textureId"]
    assert payloads[1]["textureId"] == "t-oak"
    assert payloads[0]["textureName"] == {"he": "טרוורטין", "en": "Travertine"}
    assert len(catalog.textures) == 2


def test_match_or_create_texture_requires_a_model() -> None:
    with pytest.raises(ServiceNotConfigured):
        asyncio.run(
            match_or_create_texture("Oak", "en", services=_services(InMemoryCatalogStore()))
        )
