"""Request and result types exchanged with the resolver."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mediabridge.domain.model import (
        Candidate,
        MediaCategory,
        MediaInfo,
        Reference,
        ResolutionOrigin,
    )


@dataclass(frozen=True, slots=True, kw_only=True)
class ResolutionRequest:
    """What to resolve and how.

    ``provider`` may be omitted when ``media_type`` names a category, in which
    case the category's primary provider is the target. With ``allow_fallback``
    the target provider is tried first and the rest of the category's working
    providers follow in rank order.
    """

    reference: Reference
    provider: str | None = None
    title: str | None = None
    media_type: MediaCategory | None = None
    fetch_info: bool = False
    allow_fallback: bool = False


class AttemptOutcome(StrEnum):
    RESOLVED = "resolved"
    SEARCH_FAILED = "search_failed"
    NO_ACCEPTABLE_MATCH = "no_acceptable_match"
    INFO_UNAVAILABLE = "info_unavailable"


@dataclass(frozen=True, slots=True)
class ProviderAttempt:
    provider: str
    reason: AttemptOutcome
    best_score: float | None = None
    detail: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.reason is AttemptOutcome.RESOLVED


@dataclass(frozen=True, slots=True, kw_only=True)
class Resolution:
    """A resolved provider id plus how it was obtained.

    ``alternatives`` holds the runner-up candidates of a live search, best
    first. ``close_matches`` lists every candidate (best included) whose title
    is near-identical to the query, so callers can warn that several sources
    share the name.
    """

    reference: Reference
    provider: str
    native_id: str
    title: str
    confidence: float
    verified: bool
    origin: ResolutionOrigin
    best: Candidate | None = None
    alternatives: tuple[Candidate, ...] = ()
    close_matches: tuple[Candidate, ...] = ()
    attempts: tuple[ProviderAttempt, ...] = ()
    media_info: MediaInfo | None = None

    @property
    def tried_providers(self) -> tuple[str, ...]:
        return tuple(attempt.provider for attempt in self.attempts)

    @property
    def used_fallback(self) -> bool:
        return len(self.attempts) > 1

    @property
    def has_multiple_matches(self) -> bool:
        return len(self.close_matches) > 1
