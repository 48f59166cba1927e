"""Decode generated-asset filenames into provenance descriptors.

Generated assets are uploaded as::

    <timestampMillis>-<hexFingerprint>-<entitySlug>-<sequenceIndex>.<ext>

The slug may itself contain hyphens, so the name is split from the right for the
sequence index and from the left for the timestamp and fingerprint; whatever
remains in between is the slug.
"""

from __future__ import annotations

import string

from swatchbook.domain.model import AssetProvenance, ParseFailure

_HEX_DIGITS = frozenset(string.hexdigits)
# int64 milliseconds need at most 19 digits
_MAX_DIGITS = 19


def _is_ascii_digits(value: str) -> bool:
    return bool(value) and value.isascii() and value.isdigit()


def _is_hex(value: str) -> bool:
    return bool(value) and all(ch in _HEX_DIGITS for ch in value)


def parse_provenance(path: str) -> AssetProvenance | ParseFailure:
    """Parse ``path`` (directories allowed) without ever raising on bad input."""

    filename = path.rsplit("/", 1)[-1]
    stem, dot, extension = filename.rpartition(".")
    if not dot or not stem or not extension:
        return ParseFailure(path=path, reason="missing file extension")

    head, dash, index = stem.rpartition("-")
    if not dash:
        return ParseFailure(path=path, reason="missing sequence index")
    if not _is_ascii_digits(index):
        return ParseFailure(path=path, reason=f"sequence index {index!r} is not numeric")
    if len(index) > _MAX_DIGITS:
        return ParseFailure(path=path, reason=f"sequence index exceeds {_MAX_DIGITS} digits")

    timestamp, dash, rest = head.partition("-")
    if not dash:
        return ParseFailure(path=path, reason="missing fingerprint and entity slug")
    if not _is_ascii_digits(timestamp):
        return ParseFailure(path=path, reason=f"timestamp {timestamp!r} is not numeric")
    if len(timestamp) > _MAX_DIGITS:
        return ParseFailure(path=path, reason=f"timestamp exceeds {_MAX_DIGITS} digits")

    fingerprint, dash, slug = rest.partition("-")
    if not _is_hex(fingerprint):
        return ParseFailure(path=path, reason=f"fingerprint {fingerprint!r} is not valid hex")
    if not dash or not slug:
        return ParseFailure(path=path, reason="missing entity slug")

    return AssetProvenance(
        created_at_millis=int(timestamp),
        fingerprint=fingerprint,
        entity_slug=slug,
        sequence_index=int(index),
        extension=extension,
    )
