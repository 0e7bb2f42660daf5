"""Public domain model surface."""

from __future__ import annotations

from mediabridge.domain.model.enums import (
    ConfirmationOutcome,
    ConflictOutcome,
    LibraryStatus,
    MediaCategory,
    ResolutionOrigin,
)
from mediabridge.domain.model.errors import ResolutionError
from mediabridge.domain.model.library import LibraryEntry, LibraryTitle, NewLibraryItem
from mediabridge.domain.model.mapping import ProviderMapping
from mediabridge.domain.model.media import Candidate, Episode, MediaInfo, SearchPage
from mediabridge.domain.model.reference import InvalidReference, Reference

__all__ = [  # noqa: RUF022
    # references
    "Reference",
    "InvalidReference",
    "ResolutionError",
    # mappings
    "ProviderMapping",
    # provider media
    "Candidate",
    "SearchPage",
    "MediaInfo",
    "Episode",
    # library
    "LibraryEntry",
    "LibraryTitle",
    "NewLibraryItem",
    # enums
    "ConfirmationOutcome",
    "ConflictOutcome",
    "LibraryStatus",
    "MediaCategory",
    "ResolutionOrigin",
]
