"""Texture records and the match vocabulary used to find or create them."""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .enums import MatchDecision, MatchMethod

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

# language tag -> display name
type LocalizedName = Mapping[str, str]


def normalize_name(value: str) -> str:
    """Case- and whitespace-insensitive form used for exact name comparison."""

    text = unicodedata.normalize("NFKC", value).casefold()
    return " ".join(text.split())


def normalize_language(tag: str) -> str:
    """Reduce a language tag such as ``en-US`` to its lowercase primary subtag."""

    primary = tag.strip().replace("_", "-").split("-", 1)[0]
    return primary.lower()


def idempotency_key(raw_name: str, language_tag: str) -> str:
    return f"{normalize_name(raw_name)}|{normalize_language(language_tag)}"


@dataclass(frozen=True, slots=True)
class MatchCandidate:
    """A texture name awaiting a link-or-create decision."""

    raw_name: str
    language_tag: str

    def __post_init__(self) -> None:
        if not normalize_name(self.raw_name):
            raise ValueError("Texture name must not be blank")
        language = normalize_language(self.language_tag)
        if not language:
            raise ValueError("Language tag must not be blank")
        object.__setattr__(self, "language_tag", language)

    @property
    def normalized_name(self) -> str:
        return normalize_name(self.raw_name)

    @property
    def display_name(self) -> str:
        return " ".join(self.raw_name.split())

    @property
    def idempotency_key(self) -> str:
        return idempotency_key(self.raw_name, self.language_tag)


@dataclass(frozen=True, slots=True, kw_only=True)
class TextureRecord:
    id: str
    name: LocalizedName
    category_id: str
    idempotency_key: str | None = None
    image_url: str | None = None

    def localized_names(self) -> Iterator[tuple[str, str]]:
        for language, value in self.name.items():
            if value and value.strip():
                yield language, value

    def matches_name(self, normalized: str) -> bool:
        return any(normalize_name(value) == normalized for _, value in self.localized_names())


@dataclass(frozen=True, slots=True, kw_only=True)
class MatchResult:
    """Decision for one candidate.

    ``decision`` is MATCHED only with a texture id and a confidence at or above
    the configured threshold; everything else is NO_MATCH.
    """

    candidate: MatchCandidate
    decision: MatchDecision
    confidence: float
    method: MatchMethod
    matched_texture_id: str | None = None
    reasoning: str | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be within [0, 1], got {self.confidence}")
        if self.decision is MatchDecision.MATCHED and self.matched_texture_id is None:
            raise ValueError("A matched result requires a texture id")

    @property
    def is_match(self) -> bool:
        return self.decision is MatchDecision.MATCHED

    @classmethod
    def no_match(
        cls,
        candidate: MatchCandidate,
        *,
        method: MatchMethod,
        confidence: float = 0.0,
        reasoning: str | None = None,
    ) -> MatchResult:
        return cls(
            candidate=candidate,
            decision=MatchDecision.NO_MATCH,
            confidence=confidence,
            method=method,
            reasoning=reasoning,
        )
