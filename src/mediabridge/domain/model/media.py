"""Provider-side media records: search candidates and full info."""

from __future__ import annotations

from dataclasses import dataclass, field, replace


@dataclass(frozen=True, slots=True, kw_only=True)
class Candidate:
    """One search result. ``score`` is similarity plus any media-type bonus."""

    native_id: str
    title: str
    provider: str
    year: int | None = None
    media_type: str | None = None
    image_url: str | None = None
    description: str | None = None
    similarity: float = 0.0
    score: float = 0.0

    def scored(self, *, similarity: float, bonus: float = 0.0) -> Candidate:
        return replace(self, similarity=similarity, score=similarity + bonus)


@dataclass(frozen=True, slots=True, kw_only=True)
class SearchPage:
    provider: str
    candidates: tuple[Candidate, ...] = ()
    current_page: int = 1
    has_next_page: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class Episode:
    native_id: str
    number: float | None = None
    title: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class MediaInfo:
    native_id: str
    title: str
    provider: str
    media_type: str | None = None
    year: int | None = None
    image_url: str | None = None
    description: str | None = None
    total_episodes: int | None = None
    episodes: tuple[Episode, ...] = field(default_factory=tuple)
