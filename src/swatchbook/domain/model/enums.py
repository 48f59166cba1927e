"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class EntityKind(StrEnum):
    """Discriminator for catalog entities that own an image list."""

    STYLE = "style"
    MATERIAL = "material"


class OutcomeStatus(StrEnum):
    """Per-object outcome of an orphan recovery run."""

    RELINKED = "relinked"
    ALREADY_LINKED = "already_linked"
    UNPARSABLE = "unparsable"
    MISSING_CATALOG_ENTRY = "missing_catalog_entry"
    FAILED = "failed"


class MatchDecision(StrEnum):
    MATCHED = "matched"
    NO_MATCH = "no_match"


class MatchMethod(StrEnum):
    """How a match decision was reached."""

    EXACT = "exact"
    SEMANTIC = "semantic"
    FALLBACK = "fallback"


class TelemetryKind(StrEnum):
    MATCH = "match"
    INFER = "infer"
    GENERATE = "generate"


class TelemetryOutcome(StrEnum):
    SUCCESS = "success"
    FAILURE = "failure"
