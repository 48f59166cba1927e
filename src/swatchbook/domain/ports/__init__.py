"""Domain port definitions for adapters."""

from __future__ import annotations

from .catalog import CatalogLookup, CatalogStore, TextureStore
from .model import StructuredModel, StructuredResponse
from .queue import ImageGenerationQueue, ImageJobDescriptor
from .storage import ObjectLister

__all__ = [
    "CatalogLookup",
    "CatalogStore",
    "ImageGenerationQueue",
    "ImageJobDescriptor",
    "ObjectLister",
    "StructuredModel",
    "StructuredResponse",
    "TextureStore",
]
