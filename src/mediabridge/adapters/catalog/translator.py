"""Translate catalog payloads into domain candidates and media info."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Final

from mediabridge.domain.model import Candidate, Episode, MediaInfo, SearchPage

if TYPE_CHECKING:
    from .schema import MediaInfoResponse, SearchResponse, SearchResultPayload

_YEAR: Final = re.compile(r"\b(\d{4})\b")


def parse_year(value: str | int | None) -> int | None:
    if value is None:
        return None
    if isinstance(value, int):
        return value
    match = _YEAR.search(value)
    return int(match.group(1)) if match else None


def translate_search_result(payload: SearchResultPayload, *, provider: str) -> Candidate:
    return Candidate(
        native_id=payload.id,
        title=payload.title,
        provider=provider,
        year=parse_year(payload.release_date),
        media_type=payload.type,
        image_url=payload.image,
        description=payload.description,
    )


def translate_search_page(response: SearchResponse, *, provider: str) -> SearchPage:
    return SearchPage(
        provider=provider,
        candidates=tuple(
            translate_search_result(result, provider=provider) for result in response.results
        ),
        current_page=response.current_page,
        has_next_page=response.has_next_page,
    )


def translate_media_info(response: MediaInfoResponse, *, provider: str) -> MediaInfo:
    return MediaInfo(
        native_id=response.id,
        title=response.title,
        provider=provider,
        media_type=response.type,
        year=parse_year(response.release_date),
        image_url=response.image,
        description=response.description,
        total_episodes=response.total_episodes
        if response.total_episodes is not None
        else (len(response.episodes) or None),
        episodes=tuple(
            Episode(native_id=episode.id, number=episode.number, title=episode.title)
            for episode in response.episodes
        ),
    )
