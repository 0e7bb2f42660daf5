"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class MediaCategory(StrEnum):
    """Media category; doubles as the media-type hint for matching."""

    ANIME = "anime"
    MOVIE = "movie"
    TV = "tv"


class ResolutionOrigin(StrEnum):
    """Which precedence step produced a resolved provider id."""

    DIRECT = "direct"
    MAPPING = "mapping"
    CACHE = "cache"
    SEARCH = "search"


class LibraryStatus(StrEnum):
    PLANNING = "planning"
    WATCHING = "watching"
    COMPLETED = "completed"
    ON_HOLD = "on_hold"
    DROPPED = "dropped"


class ConflictOutcome(StrEnum):
    MERGE = "merge"
    REPLACE = "replace"
    KEEP_BOTH = "keep_both"


class ConfirmationOutcome(StrEnum):
    ACCEPT_BEST = "accept_best"
    PICK_ALTERNATIVE = "pick_alternative"
