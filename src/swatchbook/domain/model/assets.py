"""Storage objects and the provenance encoded in their filenames."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime


@dataclass(frozen=True, slots=True)
class StorageObject:
    """One object as reported by a storage listing."""

    path: str
    size_bytes: int
    last_modified: datetime

    @property
    def filename(self) -> str:
        return self.path.rsplit("/", 1)[-1]


@dataclass(frozen=True, slots=True)
class AssetProvenance:
    """Structured metadata recovered from a generated asset's filename."""

    created_at_millis: int
    fingerprint: str
    entity_slug: str
    sequence_index: int
    extension: str

    @property
    def created_at(self) -> datetime:
        return datetime.fromtimestamp(self.created_at_millis / 1000, tz=UTC)

    @property
    def filename(self) -> str:
        return (
            f"{self.created_at_millis}-{self.fingerprint}-{self.entity_slug}"
            f"-{self.sequence_index}.{self.extension}"
        )


@dataclass(frozen=True, slots=True)
class ParseFailure:
    """A path that does not follow the generated-asset naming scheme."""

    path: str
    reason: str
