"""HTTP client for a Consumet-style provider catalog API.

Endpoints::

    GET {segment}/{provider}/{query}?page=N     search
    GET {segment}/{provider}/info?id=...         media info

``segment`` is ``anime`` for anime providers and ``movies`` for movie/TV ones.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from mediabridge.adapters.http_resilience import ResilientClient
from mediabridge.config.catalog import CatalogConfig, get_catalog_config
from mediabridge.domain.model import MediaCategory
from mediabridge.domain.ports import ProviderInfo, ProviderSearch
from mediabridge.domain.resolution.errors import MediaInfoNotFound, SearchFailed

from .schema import ErrorResponse, MediaInfoResponse, SearchResponse
from .translator import translate_media_info, translate_search_page

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from mediabridge.config.http_resilience import ResilienceConfig
    from mediabridge.domain.model import MediaInfo, SearchPage
    from mediabridge.domain.resolution.ranking import ProviderRankingTable

log = getLogger(__name__)

ANIME_SEGMENT: Final = "anime"
MOVIES_SEGMENT: Final = "movies"


def _is_error_payload(payload: object) -> bool:
    # some providers answer 200 with only {"message": ...} when they fail
    if not isinstance(payload, dict) or "message" not in payload:
        return False
    return "id" not in payload and "results" not in payload


def _should_cache_payload(payload: object) -> bool:
    if _is_error_payload(payload):
        return False
    # empty pages are usually a provider hiccup; retry them next time
    return not (isinstance(payload, dict) and payload.get("results") == [])


def _default_catalog_config() -> CatalogConfig:
    return get_catalog_config(cache_predicate=_should_cache_payload)


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def segment_for(category: MediaCategory) -> str:
    return ANIME_SEGMENT if category is MediaCategory.ANIME else MOVIES_SEGMENT


def segments_from_ranking(ranking: ProviderRankingTable) -> dict[str, str]:
    segments: dict[str, str] = {}
    for category in ranking.categories:
        for provider in ranking.providers(category):
            segments.setdefault(provider.name, segment_for(category))
    return segments


class CatalogAPIError(RuntimeError):
    """Raised when the catalog API answers with an error payload."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(slots=True)
class CatalogClient:
    config: CatalogConfig = field(default_factory=_default_catalog_config)
    segments: Mapping[str, str] = field(default_factory=dict[str, str])
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    def search(self, title: str, provider: str, *, page: int = 1) -> SearchPage:
        try:
            return asyncio.run(self._search_async(title, provider, page=page))
        except (CatalogAPIError, httpx.HTTPError, ValidationError) as exc:
            log.warning(f"Catalog search on {provider} for {title!r} failed: {exc}")
            raise SearchFailed(provider, f"Search on {provider!r} failed: {exc}") from exc

    def get_info(
        self,
        provider: str,
        native_id: str,
        media_type: MediaCategory | None = None,
    ) -> MediaInfo:
        try:
            return asyncio.run(self._get_info_async(provider, native_id, media_type))
        except (CatalogAPIError, httpx.HTTPError, ValidationError) as exc:
            log.warning(f"Catalog info for {provider}:{native_id} failed: {exc}")
            raise MediaInfoNotFound(provider, native_id, str(exc)) from exc

    async def _search_async(self, title: str, provider: str, *, page: int) -> SearchPage:
        path = f"{self._segment(provider)}/{provider}/{quote(title, safe='')}"
        payload = await self._get_json(path, params={"page": page})
        response = SearchResponse.model_validate(payload)
        log.debug(f"{provider}: page {response.current_page} with {len(response.results)} results")
        return translate_search_page(response, provider=provider)

    async def _get_info_async(
        self,
        provider: str,
        native_id: str,
        media_type: MediaCategory | None,
    ) -> MediaInfo:
        params: dict[str, str] = {"id": native_id}
        if media_type in (MediaCategory.MOVIE, MediaCategory.TV):
            params["type"] = str(media_type)
        payload = await self._get_json(f"{self._segment(provider)}/{provider}/info", params=params)
        response = MediaInfoResponse.model_validate(payload)
        return translate_media_info(response, provider=provider)

    async def _get_json(self, path: str, *, params: Mapping[str, str | int]) -> object:
        async with self.client_factory(self.config.resilience) as client:
            response = await client.get(path, params=httpx.QueryParams(params))

        payload = _decode(response)
        if not response.is_error and _is_error_payload(payload):
            raise CatalogAPIError(ErrorResponse.model_validate(payload).message)
        if response.is_error:
            message = f"HTTP {response.status_code}"
            if isinstance(payload, dict) and "message" in payload:
                message = ErrorResponse.model_validate(payload).message
            raise CatalogAPIError(message, status_code=response.status_code)
        if not isinstance(payload, dict):
            raise CatalogAPIError("Unexpected catalog response payload")
        return payload

    def _segment(self, provider: str) -> str:
        segment = self.segments.get(provider)
        if segment is None:
            raise CatalogAPIError(f"Unknown provider {provider!r}")
        return segment


def _decode(response: httpx.Response) -> object:
    try:
        return response.json()
    except ValueError:
        return None


if TYPE_CHECKING:
    _search_check: ProviderSearch = CatalogClient()
    _info_check: ProviderInfo = CatalogClient()
