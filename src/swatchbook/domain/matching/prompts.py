"""Prompt builders and response schemas for texture matching calls."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from swatchbook.domain.model import MatchCandidate, TextureRecord

# Common interior-material vocabulary; helps the model bridge Hebrew and English
# names that share no characters.
MATERIAL_GLOSSARY: dict[str, tuple[str, ...]] = {
    "עץ": ("wood", "oak", "walnut", "pine", "teak"),
    "אלון": ("oak",),
    "אגוז": ("walnut",),
    "שיש": ("marble", "carrara", "calacatta"),
    "גרניט": ("granite",),
    "אבן": ("stone", "limestone", "travertine", "slate"),
    "בטון": ("concrete", "cement"),
    "מתכת": ("metal", "steel", "iron", "aluminum"),
    "פליז": ("brass",),
    "נחושת": ("copper",),
    "בד": ("fabric", "textile"),
    "פשתן": ("linen",),
    "קטיפה": ("velvet",),
    "עור": ("leather",),
    "קרמיקה": ("ceramic",),
    "פורצלן": ("porcelain",),
    "זכוכית": ("glass",),
    "טיח": ("plaster", "stucco"),
    "במבוק": ("bamboo",),
    "ראטן": ("rattan", "wicker"),
}


class _AnswerModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class TextureMatchAnswer(_AnswerModel):
    matched_texture_id: str | None = Field(
        default=None,
        description="Exact id of the equivalent existing texture, or null when none matches",
    )
    confidence: float = Field(ge=0.0, le=1.0, description="Certainty that the match is correct")
    reasoning: str = Field(default="", description="One short sentence explaining the decision")


class TranslatedName(_AnswerModel):
    language: str = Field(description="Language code from the requested list")
    name: str = Field(description="The texture name as written in that language")


class CategoryAnswer(_AnswerModel):
    category_slug: str = Field(description="Exactly one slug from the allowed category list")
    translations: list[TranslatedName] = Field(
        default_factory=list,
        description="The texture name in each requested language other than the input one",
    )
    reasoning: str = Field(default="", description="One short sentence explaining the choice")


def _glossary_lines() -> Iterable[str]:
    for hebrew, english in MATERIAL_GLOSSARY.items():
        yield f'  - "{hebrew}" = {", ".join(english)}'


def _texture_lines(textures: Sequence[TextureRecord]) -> Iterable[str]:
    for texture in textures:
        names = " | ".join(f'{lang}: "{value}"' for lang, value in texture.localized_names())
        yield f'  - ID: "{texture.id}" | {names}'


def build_match_prompt(
    candidate: MatchCandidate,
    textures: Sequence[TextureRecord],
    *,
    languages: Sequence[str],
) -> str:
    return "\n".join(
        (
            "You are an interior design materials specialist. Decide whether a texture name "
            "refers to the same real-world material as one of the existing catalog textures.",
            "",
            f'TEXTURE NAME: "{candidate.display_name}" (language: {candidate.language_tag})',
            "",
            f"EXISTING TEXTURES ({len(textures)}; names in {', '.join(languages)}):",
            *_texture_lines(textures),
            "",
            "CROSS-LANGUAGE GLOSSARY:",
            *_glossary_lines(),
            "",
            "RULES:",
            "1. Compare meaning, not spelling; names may be in different languages.",
            '2. Match the base material, not descriptive prefixes ("Brushed Oak" is "Oak").',
            "3. Use an id from the list verbatim; never invent ids.",
            "4. If nothing is the same material, return matched_texture_id null.",
            "5. confidence is your certainty in [0, 1] that the chosen texture is the same "
            "material.",
        )
    )


def build_category_prompt(
    candidate: MatchCandidate,
    categories: Iterable[str],
    *,
    languages: Sequence[str] = (),
) -> str:
    allowed = sorted(categories)
    lines = [
        "You are an interior design materials specialist. Classify a new texture into "
        "exactly one material category.",
        "",
        f'TEXTURE NAME: "{candidate.display_name}" (language: {candidate.language_tag})',
        "",
        "ALLOWED CATEGORY SLUGS:",
        *(f"  - {slug}" for slug in allowed),
        "",
        "Answer with one slug copied verbatim from the list. Do not create new slugs.",
    ]
    others = [language for language in languages if language != candidate.language_tag]
    if others:
        lines += [
            "",
            f"Also give the proper catalog name of this texture in: {', '.join(others)}.",
            "Translate the material, do not transliterate it.",
        ]
    return "\n".join(lines)
