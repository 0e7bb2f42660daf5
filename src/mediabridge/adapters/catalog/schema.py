"""Pydantic models for the provider catalog API payloads."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import ClassVar, cast

from pydantic import BaseModel, ConfigDict, Field, field_validator

log = logging.getLogger(__name__)


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _flatten_title(value: object) -> object:
    """Some providers send ``{"english": ..., "romaji": ...}`` instead of a string."""

    if isinstance(value, Mapping):
        titles = cast(Mapping[str, object], value)
        for key in ("english", "romaji", "userPreferred", "native"):
            candidate = titles.get(key)
            if isinstance(candidate, str) and candidate.strip():
                return candidate
        return ""
    return value


class CatalogBaseModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)
    _logged_extra_keys: ClassVar[set[str]] = set()

    def model_post_init(self, _context: object, /) -> None:
        extras = self.__pydantic_extra__
        if not extras:
            return
        new_keys = set(extras).difference(self._logged_extra_keys)
        if not new_keys:
            return
        self._logged_extra_keys.update(new_keys)
        log.debug(
            "Catalog %s: unmodeled keys: %s",
            type(self).__name__,
            ", ".join(sorted(new_keys)),
        )


class SearchResultPayload(CatalogBaseModel):
    id: str
    title: str
    image: str | None = None
    type: str | None = None
    release_date: str | int | None = Field(default=None, alias="releaseDate")
    description: str | None = None

    _flatten = field_validator("title", mode="before")(_flatten_title)
    _normalize_type = field_validator("type", "image", "description", mode="before")(
        _blank_to_none
    )


class SearchResponse(CatalogBaseModel):
    current_page: int = Field(default=1, alias="currentPage")
    has_next_page: bool = Field(default=False, alias="hasNextPage")
    results: list[SearchResultPayload] = Field(default_factory=list["SearchResultPayload"])


class EpisodePayload(CatalogBaseModel):
    id: str
    number: float | None = None
    title: str | None = None

    _normalize_title = field_validator("title", mode="before")(_blank_to_none)


class MediaInfoResponse(CatalogBaseModel):
    id: str
    title: str
    image: str | None = None
    type: str | None = None
    release_date: str | int | None = Field(default=None, alias="releaseDate")
    description: str | None = None
    total_episodes: int | None = Field(default=None, alias="totalEpisodes")
    episodes: list[EpisodePayload] = Field(default_factory=list["EpisodePayload"])

    _flatten = field_validator("title", mode="before")(_flatten_title)
    _normalize_type = field_validator("type", "image", "description", mode="before")(
        _blank_to_none
    )


class ErrorResponse(CatalogBaseModel):
    message: str
