"""Domain model for asset recovery and texture matching."""

from __future__ import annotations

from .assets import AssetProvenance, ParseFailure, StorageObject
from .catalog import CatalogEntity, ImageListOwner
from .enums import (
    EntityKind,
    MatchDecision,
    MatchMethod,
    OutcomeStatus,
    TelemetryKind,
    TelemetryOutcome,
)
from .telemetry import TelemetryRecord, TokenUsage
from .textures import (
    LocalizedName,
    MatchCandidate,
    MatchResult,
    TextureRecord,
    idempotency_key,
    normalize_language,
    normalize_name,
)

__all__ = [
    "AssetProvenance",
    "CatalogEntity",
    "EntityKind",
    "ImageListOwner",
    "LocalizedName",
    "MatchCandidate",
    "MatchDecision",
    "MatchMethod",
    "MatchResult",
    "OutcomeStatus",
    "ParseFailure",
    "StorageObject",
    "TelemetryKind",
    "TelemetryOutcome",
    "TelemetryRecord",
    "TextureRecord",
    "TokenUsage",
    "idempotency_key",
    "normalize_language",
    "normalize_name",
]
