"""Port for the fire-and-forget image generation queue."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True, slots=True, kw_only=True)
class ImageJobDescriptor:
    """What the image worker needs to render a texture swatch."""

    texture_name: str
    language: str
    category_id: str

    def as_payload(self) -> dict[str, str]:
        return {
            "textureName": self.texture_name,
            "language": self.language,
            "categoryId": self.category_id,
        }


@runtime_checkable
class ImageGenerationQueue(Protocol):
    async def enqueue(self, texture_id: str, descriptor: ImageJobDescriptor) -> str:
        """Durably enqueue a job and return its id without waiting for the render."""
        ...


__all__ = ["ImageGenerationQueue", "ImageJobDescriptor"]
