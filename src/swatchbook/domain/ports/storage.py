"""Port for listing objects in asset storage."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from swatchbook.domain.model import StorageObject


@runtime_checkable
class ObjectLister(Protocol):
    """Lazy, restartable listing of storage objects under a prefix.

    Implementations own no cursor state between calls; each call starts a fresh
    listing. Transport failures surface as ``StorageUnavailable``.
    """

    def list(self, prefix: str) -> AsyncIterator[StorageObject]: ...


__all__ = ["ObjectLister"]
