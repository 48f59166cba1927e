"""SQLAlchemy adapter package for swatchbook."""

from __future__ import annotations

from .mappings import create_all_tables, metadata
from .repositories import SqlAlchemyCatalogStore, SqlAlchemyImageJobQueue
from .unit_of_work import (
    StartupError,
    configured_engine,
    is_started,
    require_engine,
    shutdown,
    startup,
    transaction,
)

__all__ = [
    "SqlAlchemyCatalogStore",
    "SqlAlchemyImageJobQueue",
    "StartupError",
    "configured_engine",
    "create_all_tables",
    "is_started",
    "metadata",
    "require_engine",
    "shutdown",
    "startup",
    "transaction",
]
