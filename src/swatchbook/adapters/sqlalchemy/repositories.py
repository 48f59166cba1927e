"""Catalog store and image job queue backed by SQLAlchemy Core."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING, Any

from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError

from swatchbook.domain.errors import DuplicateTexture, UpdateFailed
from swatchbook.domain.model import CatalogEntity, EntityKind, TextureRecord, normalize_name

from .mappings import (
    TABLE_BY_KIND,
    image_generation_job_table,
    material_category_table,
    texture_table,
)
from .unit_of_work import require_engine, transaction

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from sqlalchemy import Row
    from sqlalchemy.ext.asyncio import AsyncEngine

    from swatchbook.domain.ports.catalog import CatalogStore
    from swatchbook.domain.ports.queue import ImageGenerationQueue, ImageJobDescriptor

log = getLogger(__name__)


def _entity_from_row(kind: EntityKind, row: Row[Any]) -> CatalogEntity:
    return CatalogEntity(kind=kind, id=row.id, slug=row.slug, images=tuple(row.images or ()))


def _texture_from_row(row: Row[Any]) -> TextureRecord:
    return TextureRecord(
        id=row.id,
        name=dict(row.name or {}),
        category_id=row.category_id,
        idempotency_key=row.idempotency_key,
        image_url=row.image_url,
    )


class SqlAlchemyCatalogStore:
    """Styles, materials, textures and categories in one relational store."""

    def __init__(self, engine: AsyncEngine | None = None) -> None:
        self.engine = engine or require_engine()

    # -- catalog lookup -------------------------------------------------

    async def find_by_slug(self, slug: str) -> CatalogEntity | None:
        async with transaction(self.engine) as connection:
            # styles win when a slug exists in both tables
            for kind, table in TABLE_BY_KIND.items():
                result = await connection.execute(select(table).where(table.c.slug == slug))
                row = result.first()
                if row is not None:
                    return _entity_from_row(kind, row)
        return None

    async def get_entity(self, kind: EntityKind, entity_id: str) -> CatalogEntity | None:
        table = TABLE_BY_KIND[kind]
        async with transaction(self.engine) as connection:
            result = await connection.execute(select(table).where(table.c.id == entity_id))
            row = result.first()
        return _entity_from_row(kind, row) if row is not None else None

    async def append_image(self, entity: CatalogEntity, path: str) -> CatalogEntity:
        table = TABLE_BY_KIND[entity.kind]
        async with transaction(self.engine) as connection:
            result = await connection.execute(
                select(table).where(table.c.id == entity.id).with_for_update()
            )
            row = result.first()
            if row is None:
                raise UpdateFailed(entity.id, f"{entity.kind} no longer exists")
            current = _entity_from_row(entity.kind, row)
            if current.has_image(path):
                return current
            updated = current.with_image(path)
            await connection.execute(
                update(table)
                .where(table.c.id == entity.id)
                .values(images=list(updated.images), updated_at=datetime.now(UTC))
            )
        log.debug("Appended %s to %s %s", path, entity.kind, entity.id)
        return updated

    async def add_entity(self, entity: CatalogEntity) -> None:
        table = TABLE_BY_KIND[entity.kind]
        async with transaction(self.engine) as connection:
            await connection.execute(
                insert(table).values(id=entity.id, slug=entity.slug, images=list(entity.images))
            )

    # -- textures -------------------------------------------------------

    async def list_textures(self) -> Sequence[TextureRecord]:
        async with transaction(self.engine) as connection:
            result = await connection.execute(select(texture_table).order_by(texture_table.c.id))
            rows = result.all()
        return [_texture_from_row(row) for row in rows]

    async def get_texture(self, texture_id: str) -> TextureRecord | None:
        async with transaction(self.engine) as connection:
            result = await connection.execute(
                select(texture_table).where(texture_table.c.id == texture_id)
            )
            row = result.first()
        return _texture_from_row(row) if row is not None else None

    async def find_texture_by_name(self, name: str, language: str) -> TextureRecord | None:
        normalized = normalize_name(name)
        for texture in await self.list_textures():
            value = texture.name.get(language)
            if value is not None and normalize_name(value) == normalized:
                return texture
        return None

    async def find_texture_by_key(self, key: str) -> TextureRecord | None:
        async with transaction(self.engine) as connection:
            result = await connection.execute(
                select(texture_table).where(texture_table.c.idempotency_key == key)
            )
            row = result.first()
        return _texture_from_row(row) if row is not None else None

    async def create_texture(self, record: TextureRecord) -> TextureRecord:
        try:
            async with transaction(self.engine) as connection:
                await connection.execute(
                    insert(texture_table).values(
                        id=record.id,
                        name=dict(record.name),
                        category_id=record.category_id,
                        idempotency_key=record.idempotency_key,
                        image_url=record.image_url,
                    )
                )
        except IntegrityError as exc:
            raise DuplicateTexture(record.idempotency_key or record.id) from exc
        return record

    # -- categories -----------------------------------------------------

    async def list_categories(self) -> frozenset[str]:
        async with transaction(self.engine) as connection:
            result = await connection.execute(select(material_category_table.c.slug))
            return frozenset(result.scalars().all())

    async def add_category(self, slug: str, name: Mapping[str, str] | None = None) -> None:
        async with transaction(self.engine) as connection:
            await connection.execute(
                insert(material_category_table).values(slug=slug, name=dict(name or {}))
            )


class SqlAlchemyImageJobQueue:
    """Durable job rows picked up by the out-of-process image worker."""

    def __init__(self, engine: AsyncEngine | None = None) -> None:
        self.engine = engine or require_engine()

    async def enqueue(self, texture_id: str, descriptor: ImageJobDescriptor) -> str:
        job_id = uuid.uuid4().hex
        async with transaction(self.engine) as connection:
            await connection.execute(
                insert(image_generation_job_table).values(
                    id=job_id,
                    texture_id=texture_id,
                    payload=descriptor.as_payload(),
                )
            )
        return job_id

    async def pending_jobs(self) -> list[tuple[str, str, dict[str, str]]]:
        async with transaction(self.engine) as connection:
            result = await connection.execute(
                select(
                    image_generation_job_table.c.id,
                    image_generation_job_table.c.texture_id,
                    image_generation_job_table.c.payload,
                )
                .where(image_generation_job_table.c.status == "pending")
                .order_by(image_generation_job_table.c.created_at)
            )
            return [(row.id, row.texture_id, dict(row.payload)) for row in result]


if TYPE_CHECKING:
    _store_check: type[CatalogStore] = SqlAlchemyCatalogStore
    _queue_check: type[ImageGenerationQueue] = SqlAlchemyImageJobQueue
