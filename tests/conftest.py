from __future__ import annotations

import asyncio
import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from swatchbook.adapters.sqlalchemy import SqlAlchemyCatalogStore, shutdown, startup
from swatchbook.config import MatchingConfig
from swatchbook.domain.telemetry import TelemetryRecorder
from tests.helpers.catalog import InMemoryCatalogStore, RecordingQueue

os.environ.setdefault("DATABASE_URI", "sqlite+aiosqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


@pytest.fixture
def telemetry() -> TelemetryRecorder:
    return TelemetryRecorder()


@pytest.fixture
def matching_config() -> MatchingConfig:
    return MatchingConfig(retry_backoff_seconds=0.0, model_timeout_seconds=1.0)


@pytest.fixture
def catalog() -> InMemoryCatalogStore:
    store = InMemoryCatalogStore()
    store.categories.update({"wood", "stone", "fabric", "metal"})
    return store


@pytest.fixture
def queue() -> RecordingQueue:
    return RecordingQueue()


@pytest.fixture
def sqlite_uri(tmp_path: Path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}"


@pytest.fixture
def sqlite_store(sqlite_uri: str) -> Iterator[SqlAlchemyCatalogStore]:
    # NullPool: every test drives its own event loop through asyncio.run
    engine = create_async_engine(sqlite_uri, poolclass=NullPool)
    asyncio.run(startup(engine=engine, force=True))
    try:
        yield SqlAlchemyCatalogStore(engine)
    finally:
        asyncio.run(shutdown())
