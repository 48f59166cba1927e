"""Result records produced by orphan recovery runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from swatchbook.domain.model import OutcomeStatus

if TYPE_CHECKING:
    from swatchbook.domain.model import EntityKind


@dataclass(frozen=True, slots=True, kw_only=True)
class ObjectOutcome:
    """What happened to one scanned storage object."""

    path: str
    status: OutcomeStatus
    entity_id: str | None = None
    entity_kind: EntityKind | None = None
    reason: str | None = None


@dataclass(slots=True, kw_only=True)
class RecoveryResult:
    """Counts plus ordered per-object details for one recovery run.

    ``matched`` counts every object whose slug resolved to a catalog entity, so
    ``matched == relinked + already_linked + failed``.
    """

    dry_run: bool
    scanned: int = 0
    matched: int = 0
    relinked: int = 0
    already_linked: int = 0
    unparsable: int = 0
    missing_catalog_entry: int = 0
    failed: int = 0
    cancelled: bool = False
    error: str | None = None
    details: list[ObjectOutcome] = field(default_factory=list["ObjectOutcome"])

    @classmethod
    def from_outcomes(cls, outcomes: list[ObjectOutcome], *, dry_run: bool) -> RecoveryResult:
        result = cls(dry_run=dry_run)
        for outcome in outcomes:
            result.add(outcome)
        return result

    def add(self, outcome: ObjectOutcome) -> None:
        self.details.append(outcome)
        self.scanned += 1
        match outcome.status:
            case OutcomeStatus.UNPARSABLE:
                self.unparsable += 1
            case OutcomeStatus.MISSING_CATALOG_ENTRY:
                self.missing_catalog_entry += 1
            case OutcomeStatus.ALREADY_LINKED:
                self.matched += 1
                self.already_linked += 1
            case OutcomeStatus.RELINKED:
                self.matched += 1
                self.relinked += 1
            case OutcomeStatus.FAILED:
                self.matched += 1
                self.failed += 1

    @property
    def succeeded(self) -> bool:
        return self.error is None and not self.failed
