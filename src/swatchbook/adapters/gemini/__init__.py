"""Public interface for the Gemini adapter."""

from __future__ import annotations

from .client import GeminiStructuredModel
from .schema import GenerateContentResponse, UsageMetadata

__all__ = ["GeminiStructuredModel", "GenerateContentResponse", "UsageMetadata"]
