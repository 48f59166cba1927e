"""Semantic texture matching, category inference and texture creation."""

from __future__ import annotations

from .inference import CategoryInference, CategoryInferencer
from .materialize import EntryMaterializer, Materialization
from .matcher import SemanticMatcher, find_exact_match
from .service import TextureMatchingService, TextureResolution

__all__ = [
    "CategoryInference",
    "CategoryInferencer",
    "EntryMaterializer",
    "Materialization",
    "SemanticMatcher",
    "TextureMatchingService",
    "TextureResolution",
    "find_exact_match",
]
