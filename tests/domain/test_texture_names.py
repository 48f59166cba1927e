from __future__ import annotations

import pytest

from swatchbook.domain.model import (
    MatchCandidate,
    MatchDecision,
    MatchMethod,
    MatchResult,
    idempotency_key,
    normalize_language,
    normalize_name,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("  Oak   Parquet ", "oak parquet"),
        ("OAK", "oak"),
        ("Ｏａｋ", "oak"),
        ("שיש\tקררה", "שיש קררה"),
    ],
)
def test_normalize_name(raw: str, expected: str) -> None:
    assert normalize_name(raw) == expected


@pytest.mark.parametrize(
    ("tag", "expected"),
    [("en-US", "en"), ("HE", "he"), ("pt_BR", "pt"), (" fr ", "fr")],
)
def test_normalize_language(tag: str, expected: str) -> None:
    assert normalize_language(tag) == expected


def test_idempotency_key_ignores_case_spacing_and_region() -> None:
    assert idempotency_key(" Smoked  Oak", "en-GB") == idempotency_key("smoked oak", "EN")


def test_candidate_normalises_language_and_rejects_blanks() -> None:
    candidate = MatchCandidate(raw_name="Oak", language_tag="en-US")

    assert candidate.language_tag == "en"
    with pytest.raises(ValueError, match="name"):
        MatchCandidate(raw_name="   ", language_tag="en")
    with pytest.raises(ValueError, match="Language"):
        MatchCandidate(raw_name="Oak", language_tag="")


def test_match_result_requires_texture_for_a_match() -> None:
    candidate = MatchCandidate(raw_name="Oak", language_tag="en")

    with pytest.raises(ValueError, match="texture id"):
        MatchResult(
            candidate=candidate,
            decision=MatchDecision.MATCHED,
            confidence=0.9,
            method=MatchMethod.SEMANTIC,
        )
    with pytest.raises(ValueError, match="confidence"):
        MatchResult.no_match(candidate, method=MatchMethod.SEMANTIC, confidence=1.5)
