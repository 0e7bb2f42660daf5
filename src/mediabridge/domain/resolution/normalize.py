"""Title normalization and similarity scoring.

Everything here is pure and deterministic. ``similarity`` is symmetric and
bounded to ``[0, 1]``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final

_PUNCTUATION: Final = re.compile(r"[^\w\s]")
_WHITESPACE: Final = re.compile(r"\s+")

_ORDINAL: Final = re.compile(r"(\d+)(?:st|nd|rd|th)\b")
_SEASON_WORD: Final = re.compile(r"\bseason\s*(\d+)\b")
_NUMBER_SEASON: Final = re.compile(r"\b(\d+)\s+season\b")
_SEASON_SHORT: Final = re.compile(r"\bs(\d+)\b")
_PART_WORD: Final = re.compile(r"\bpart\s*(\d+)\b")
_ROMAN_NUMERALS: Final = {
    "i": 1,
    "ii": 2,
    "iii": 3,
    "iv": 4,
    "v": 5,
    "vi": 6,
    "vii": 7,
    "viii": 8,
    "ix": 9,
    "x": 10,
}

_SEASON_END: Final = re.compile(r"\s+season\s+(\d+)$")
_PART_END: Final = re.compile(r"\s+part\s+(\d+)$")
_NUMBER_END: Final = re.compile(r"\s+(\d{1,2})$")


def normalize(title: str) -> str:
    """Lower-case, strip punctuation and collapse whitespace."""

    lowered = title.lower()
    stripped = _PUNCTUATION.sub("", lowered)
    return _WHITESPACE.sub(" ", stripped).strip()


def similarity(a: str, b: str) -> float:
    """Score two titles in ``[0, 1]``.

    Identical normalized forms score 1.0. If one contains the other the score is
    the length ratio. Otherwise it is the share of shared tokens (tokens of one
    character are ignored) relative to the larger token set.
    """

    left = normalize(a)
    right = normalize(b)
    if left == right:
        return 1.0

    shorter, longer = sorted((left, right), key=len)
    if shorter and shorter in longer:
        return len(shorter) / len(longer)

    left_words = _tokens(left)
    right_words = _tokens(right)
    if not left_words or not right_words:
        return 0.0
    return len(left_words & right_words) / max(len(left_words), len(right_words))


def _tokens(normalized: str) -> frozenset[str]:
    return frozenset(word for word in normalized.split(" ") if len(word) > 1)


@dataclass(frozen=True, slots=True)
class SeasonInfo:
    base_title: str
    season: int | None = None


def extract_season_info(title: str) -> SeasonInfo:
    """Split a title into its base and a trailing season number, if any.

    Recognises "season N", "sN", "part N", ordinals ("2nd season"), roman
    numerals at the end of the title and small trailing numbers ("Title 2").
    """

    canonical = _canonical_season_title(title)

    for pattern in (_SEASON_END, _PART_END):
        match = pattern.search(canonical)
        if match:
            return SeasonInfo(canonical[: match.start()].strip(), int(match.group(1)))

    match = _NUMBER_END.search(canonical)
    if match:
        number = int(match.group(1))
        if 2 <= number <= 10:
            return SeasonInfo(canonical[: match.start()].strip(), number)

    return SeasonInfo(canonical)


def _canonical_season_title(title: str) -> str:
    text = title.lower()
    text = _ORDINAL.sub(r"\1", text)
    text = _NUMBER_SEASON.sub(r" season \1 ", text)
    text = _SEASON_WORD.sub(r" season \1 ", text)
    text = _SEASON_SHORT.sub(r" season \1 ", text)
    text = _PART_WORD.sub(r" part \1 ", text)
    for roman, number in _ROMAN_NUMERALS.items():
        trailing = re.compile(rf"\b{roman}\b(?=\s*$|\s+(?:season|part)\b)")
        if trailing.search(text):
            text = trailing.sub(f"season {number}", text, count=1)
    return normalize(text)


__all__ = ["SeasonInfo", "extract_season_info", "normalize", "similarity"]
