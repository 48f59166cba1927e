"""Error taxonomy for asset recovery and texture matching.

Per-object problems during recovery (unparsable paths, unknown slugs) are
reported as outcomes, not raised. The exceptions below cover collaborator
failures; ``error_kind`` is the stable label written to telemetry.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from swatchbook.domain.reconciliation.contracts import RecoveryResult


class SwatchbookError(RuntimeError):
    """Base class for domain-level failures."""

    error_kind: ClassVar[str] = "error"


class CollaboratorUnavailable(SwatchbookError):
    """A transport-level failure that aborts the enclosing run."""

    error_kind: ClassVar[str] = "unavailable"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.partial_result: RecoveryResult | None = None


class StorageUnavailable(CollaboratorUnavailable):
    error_kind: ClassVar[str] = "storage_unavailable"


class DataStoreUnavailable(CollaboratorUnavailable):
    error_kind: ClassVar[str] = "data_store_unavailable"


class UpdateFailed(SwatchbookError):
    """A single-entity write was rejected; other entities are unaffected."""

    error_kind: ClassVar[str] = "update_failed"

    def __init__(self, entity_id: str, reason: str) -> None:
        super().__init__(f"Update of {entity_id} failed: {reason}")
        self.entity_id = entity_id
        self.reason = reason


class DuplicateTexture(SwatchbookError):
    """The store already holds a texture with the same idempotency key."""

    error_kind: ClassVar[str] = "duplicate_texture"

    def __init__(self, key: str) -> None:
        super().__init__(f"Texture with idempotency key {key!r} already exists")
        self.key = key


class ModelError(SwatchbookError):
    """The generative model could not produce a usable answer."""

    error_kind: ClassVar[str] = "model_error"


class ModelUnavailable(ModelError):
    error_kind: ClassVar[str] = "model_unavailable"


class MalformedModelResponse(ModelError):
    error_kind: ClassVar[str] = "malformed_response"


class InvalidInference(ModelError):
    """The model answered with a category outside the closed set."""

    error_kind: ClassVar[str] = "invalid_inference"

    def __init__(self, answer: str, allowed: frozenset[str]) -> None:
        super().__init__(
            f"Inferred category {answer!r} is not one of {', '.join(sorted(allowed))}"
        )
        self.answer = answer
        self.allowed = allowed


class NoCategoriesConfigured(SwatchbookError):
    """Category inference was requested but the catalog defines no categories."""

    error_kind: ClassVar[str] = "no_categories"


def error_kind_of(exc: BaseException) -> str:
    """Telemetry label for any exception raised around an external call."""

    if isinstance(exc, SwatchbookError):
        return exc.error_kind
    if isinstance(exc, TimeoutError):
        return "timeout"
    return type(exc).__name__
