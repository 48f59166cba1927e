"""Orphaned asset recovery."""

from __future__ import annotations

from .contracts import ObjectOutcome, RecoveryResult
from .engine import ReconciliationEngine

__all__ = ["ObjectOutcome", "RecoveryResult", "ReconciliationEngine"]
