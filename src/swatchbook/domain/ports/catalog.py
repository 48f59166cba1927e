"""Ports for reading and writing catalog records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from swatchbook.domain.model import CatalogEntity, EntityKind, TextureRecord


@runtime_checkable
class CatalogLookup(Protocol):
    """Slug resolution and the single-entity image append used by recovery."""

    async def find_by_slug(self, slug: str) -> CatalogEntity | None: ...

    async def get_entity(self, kind: EntityKind, entity_id: str) -> CatalogEntity | None: ...

    async def append_image(self, entity: CatalogEntity, path: str) -> CatalogEntity:
        """Append ``path`` unless already present; raise ``UpdateFailed`` on rejection."""
        ...


@runtime_checkable
class TextureStore(Protocol):
    """Texture and category persistence used by matching and materialization."""

    async def list_textures(self) -> Sequence[TextureRecord]: ...

    async def get_texture(self, texture_id: str) -> TextureRecord | None: ...

    async def find_texture_by_name(self, name: str, language: str) -> TextureRecord | None: ...

    async def find_texture_by_key(self, key: str) -> TextureRecord | None: ...

    async def create_texture(self, record: TextureRecord) -> TextureRecord:
        """Insert ``record``; raise ``DuplicateTexture`` when its key is taken."""
        ...

    async def list_categories(self) -> frozenset[str]: ...


@runtime_checkable
class CatalogStore(CatalogLookup, TextureStore, Protocol):
    """Everything the subsystem needs from the data store."""


__all__ = ["CatalogLookup", "CatalogStore", "TextureStore"]
