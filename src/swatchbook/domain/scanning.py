"""Storage scanning across one or more listing prefixes."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterable

    from swatchbook.domain.model import StorageObject
    from swatchbook.domain.ports.storage import ObjectLister

log = getLogger(__name__)


@dataclass(slots=True)
class StorageScanner:
    """Yield storage objects prefix by prefix, in the order the lister returns them."""

    lister: ObjectLister

    async def scan(self, prefixes: Iterable[str]) -> AsyncIterator[StorageObject]:
        seen: set[str] = set()
        for prefix in prefixes:
            count = 0
            async for storage_object in self.lister.list(prefix):
                # overlapping prefixes must not produce the same object twice
                if storage_object.path in seen:
                    continue
                seen.add(storage_object.path)
                count += 1
                yield storage_object
            log.debug("Listed %s objects under %r", count, prefix)
