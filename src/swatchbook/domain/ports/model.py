"""Port for structured generative-model calls."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from pydantic import BaseModel

if TYPE_CHECKING:
    from swatchbook.domain.model import TokenUsage


@dataclass(frozen=True, slots=True)
class StructuredResponse[TSchema: BaseModel]:
    """A schema-validated model answer plus what it cost."""

    value: TSchema
    usage: TokenUsage | None = None


@runtime_checkable
class StructuredModel(Protocol):
    """Generate an answer that validates against ``schema``.

    Raises ``ModelUnavailable`` for transport failures and
    ``MalformedModelResponse`` when the answer does not fit the schema.
    """

    async def generate_structured[TSchema: BaseModel](
        self,
        prompt: str,
        schema: type[TSchema],
    ) -> StructuredResponse[TSchema]: ...


__all__ = ["StructuredModel", "StructuredResponse"]
