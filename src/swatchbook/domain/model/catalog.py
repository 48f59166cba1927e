"""Catalog entities that own ordered image lists (styles and materials)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .enums import EntityKind


@runtime_checkable
class ImageListOwner(Protocol):
    """Capability shared by every reconcilable catalog entity."""

    @property
    def id(self) -> str: ...

    @property
    def slug(self) -> str: ...

    @property
    def images(self) -> tuple[str, ...]: ...


@dataclass(frozen=True, slots=True, kw_only=True)
class CatalogEntity:
    """Snapshot of a style or material as read from the catalog store.

    Styles and materials share no behaviour beyond the image-list capability, so
    they are one tagged record rather than a class hierarchy.
    """

    kind: EntityKind
    id: str
    slug: str
    images: tuple[str, ...] = ()

    def has_image(self, path: str) -> bool:
        return path in self.images

    def with_image(self, path: str) -> CatalogEntity:
        if self.has_image(path):
            return self
        return CatalogEntity(
            kind=self.kind, id=self.id, slug=self.slug, images=(*self.images, path)
        )
