"""Engine lifecycle and transactional scope for the SQLAlchemy adapter."""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from swatchbook.config.storage import get_database_config
from swatchbook.domain.errors import DataStoreUnavailable

from .mappings import create_all_tables

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine


class StartupError(RuntimeError):
    """Raised when the SQLAlchemy adapter is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    engine: AsyncEngine | None = None

    def require_engine(self) -> AsyncEngine:
        if self.engine is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call swatchbook.adapters.sqlalchemy."
                "unit_of_work.startup() before using a store."
            )
        return self.engine


_STATE = _AdapterState()


def _create_engine(database_uri: str) -> AsyncEngine:
    if ":memory:" in database_uri:
        # one shared connection, otherwise every checkout sees an empty database
        return create_async_engine(database_uri, poolclass=StaticPool)
    return create_async_engine(database_uri)


async def startup(
    *,
    engine: AsyncEngine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> AsyncEngine:
    """Initialise the async engine and ensure the schema exists."""

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )
    if _STATE.engine is not None:
        await _STATE.engine.dispose()

    resolved_engine = engine or _create_engine(database_uri or get_database_config().uri)
    try:
        await create_all_tables(resolved_engine)
    except OperationalError as exc:
        raise DataStoreUnavailable(f"Could not initialise the data store: {exc}") from exc

    _STATE.engine = resolved_engine
    return resolved_engine


def configured_engine() -> AsyncEngine | None:
    """Return the engine currently managed by the adapter (if any)."""

    return _STATE.engine


def require_engine() -> AsyncEngine:
    return _STATE.require_engine()


def is_started() -> bool:
    return _STATE.engine is not None


async def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        await _STATE.engine.dispose()
    _STATE.engine = None


@asynccontextmanager
async def transaction(engine: AsyncEngine) -> AsyncIterator[AsyncConnection]:
    """Commit on success, roll back on error; lost connections become domain errors."""

    try:
        async with engine.begin() as connection:
            yield connection
    except OperationalError as exc:
        raise DataStoreUnavailable(f"Data store operation failed: {exc.orig or exc}") from exc
