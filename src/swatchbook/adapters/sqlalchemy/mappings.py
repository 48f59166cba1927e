"""SQLAlchemy table metadata for the catalog and the image job queue."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Final

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    MetaData,
    String,
    Table,
)

from swatchbook.domain.model import EntityKind

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

log = logging.getLogger(__name__)

metadata = MetaData()


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _image_owner_table(name: str) -> Table:
    return Table(
        name,
        metadata,
        Column("id", String(64), primary_key=True),
        Column("slug", String(255), nullable=False, unique=True),
        Column("images", JSON, nullable=False, default=list),
        Column("updated_at", DateTime(timezone=True), nullable=False, default=_utcnow),
    )


style_table = _image_owner_table("style")
material_table = _image_owner_table("material")

material_category_table = Table(
    "material_category",
    metadata,
    Column("slug", String(128), primary_key=True),
    Column("name", JSON, nullable=False, default=dict),
)

texture_table = Table(
    "texture",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("name", JSON, nullable=False),
    Column(
        "category_id",
        String(128),
        ForeignKey("material_category.slug"),
        nullable=False,
    ),
    Column("idempotency_key", String(512), nullable=True, unique=True),
    Column("image_url", String(1024), nullable=True),
    Column("created_at", DateTime(timezone=True), nullable=False, default=_utcnow),
)

image_generation_job_table = Table(
    "image_generation_job",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("texture_id", String(64), ForeignKey("texture.id"), nullable=False),
    Column("payload", JSON, nullable=False),
    Column("status", String(32), nullable=False, default="pending"),
    Column("created_at", DateTime(timezone=True), nullable=False, default=_utcnow),
)

TABLE_BY_KIND: Final[dict[EntityKind, Table]] = {
    EntityKind.STYLE: style_table,
    EntityKind.MATERIAL: material_table,
}


async def create_all_tables(engine: AsyncEngine) -> None:
    async with engine.begin() as connection:
        await connection.run_sync(metadata.create_all)
    log.debug("Ensured %s tables exist", len(metadata.tables))
