"""Static provider ranking configuration.

The ranking is data, not computed state: edit the TOML file (or the defaults
below) and redeploy when a provider starts or stops working.

TOML layout::

    [[anime]]
    name = "animepahe"
    display_name = "AnimePahe"
    working = true
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, cast

from mediabridge.domain.model.enums import MediaCategory

from .errors import ConfigurationError
from .storage import get_storage_config

if TYPE_CHECKING:
    from collections.abc import Mapping

RANKING_PATH_ENV = "MEDIABRIDGE_PROVIDER_RANKING"


@dataclass(frozen=True, slots=True)
class ProviderEntryConfig:
    name: str
    display_name: str
    working: bool = True
    notes: str | None = None


@dataclass(frozen=True, slots=True)
class ProviderRankingConfig:
    categories: Mapping[MediaCategory, tuple[ProviderEntryConfig, ...]]


_ANIME_DEFAULTS = (
    ProviderEntryConfig("hianime", "HiAnime", working=True),
    ProviderEntryConfig("animepahe", "AnimePahe", working=True),
    ProviderEntryConfig("animekai", "AnimeKai", working=True),
    ProviderEntryConfig(
        "kickassanime", "KickAssAnime", working=False, notes="404 on every request"
    ),
)

_MOVIE_DEFAULTS = (
    ProviderEntryConfig("flixhq", "FlixHQ", working=True),
    ProviderEntryConfig("goku", "Goku", working=True),
    ProviderEntryConfig("sflix", "SFlix", working=False, notes="sources return 502"),
    ProviderEntryConfig("himovies", "HiMovies", working=False, notes="shares FlixHQ backend"),
    ProviderEntryConfig("dramacool", "DramaCool", working=False, notes="asian dramas only"),
)

DEFAULT_PROVIDER_RANKING = ProviderRankingConfig(
    categories={
        MediaCategory.ANIME: _ANIME_DEFAULTS,
        MediaCategory.MOVIE: _MOVIE_DEFAULTS,
        MediaCategory.TV: _MOVIE_DEFAULTS,
    }
)


def get_provider_ranking_config(path: Path | None = None) -> ProviderRankingConfig:
    """Load the ranking, first match wins.

    ``path``, then ``$MEDIABRIDGE_PROVIDER_RANKING``, then ``providers.toml`` in
    the data directory, then the built-in defaults.
    """

    if path is None:
        env_path = os.getenv(RANKING_PATH_ENV)
        if env_path:
            path = Path(env_path)
        else:
            path = get_storage_config().ranking_path()
            if not path.is_file():
                return DEFAULT_PROVIDER_RANKING

    try:
        with path.expanduser().open("rb") as handle:
            document = tomllib.load(handle)
    except FileNotFoundError as exc:
        raise ConfigurationError(f"Provider ranking file not found: {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"Invalid provider ranking file {path}: {exc}") from exc

    return parse_provider_ranking(document)


def parse_provider_ranking(document: Mapping[str, object]) -> ProviderRankingConfig:
    categories: dict[MediaCategory, tuple[ProviderEntryConfig, ...]] = {}
    for raw_category, raw_entries in document.items():
        try:
            category = MediaCategory(raw_category)
        except ValueError as exc:
            raise ConfigurationError(f"Unknown media category: {raw_category!r}") from exc
        if not isinstance(raw_entries, list):
            raise ConfigurationError(f"Category {raw_category!r} must be an array of tables")
        entries = tuple(
            _parse_entry(raw_category, entry) for entry in cast(list[object], raw_entries)
        )
        names = [entry.name for entry in entries]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ConfigurationError(
                f"Duplicate providers in {raw_category!r}: {', '.join(duplicates)}"
            )
        categories[category] = entries
    return ProviderRankingConfig(categories=categories)


def _parse_entry(category: str, raw: object) -> ProviderEntryConfig:
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Provider entries in {category!r} must be tables")
    entry = cast(dict[str, Any], raw)
    name = entry.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ConfigurationError(f"Provider entry in {category!r} is missing a name")
    display_name = entry.get("display_name", name)
    working = entry.get("working", True)
    if not isinstance(working, bool):
        raise ConfigurationError(f"Provider {name!r}: 'working' must be a boolean")
    notes = entry.get("notes")
    return ProviderEntryConfig(
        name=name.strip(),
        display_name=str(display_name),
        working=working,
        notes=str(notes) if notes is not None else None,
    )
