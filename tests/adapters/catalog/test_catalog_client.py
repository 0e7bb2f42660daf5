from __future__ import annotations

from collections.abc import Callable  # noqa: TC003

import httpx
import pytest

from mediabridge.adapters.catalog import CatalogClient, segments_from_ranking
from mediabridge.adapters.catalog.client import (
    _should_cache_payload,  # type: ignore[reportPrivateUsage]
)
from mediabridge.adapters.catalog.schema import SearchResponse
from mediabridge.adapters.catalog.translator import parse_year, translate_search_page
from mediabridge.adapters.http_resilience import (
    ResilientClient,
    _build_cache_components,  # type: ignore[reportPrivateUsage]
)
from mediabridge.config.catalog import CatalogConfig
from mediabridge.config.http_resilience import CacheConfig, ResilienceConfig
from mediabridge.domain.model import MediaCategory
from mediabridge.domain.resolution import MediaInfoNotFound, ProviderRankingTable, SearchFailed

BASE_URL = "https://catalog.test/"


def _make_client_factory(
    handler: Callable[[httpx.Request], httpx.Response],
) -> Callable[[ResilienceConfig], ResilientClient]:
    async def async_handler(request: httpx.Request) -> httpx.Response:
        return handler(request)

    def factory(resilience: ResilienceConfig) -> ResilientClient:
        client = ResilientClient(resilience)
        client._client = httpx.AsyncClient(  # noqa: SLF001  # type: ignore[reportPrivateUsage]
            base_url=BASE_URL, transport=httpx.MockTransport(async_handler)
        )
        return client

    return factory


def _client(
    handler: Callable[[httpx.Request], httpx.Response],
    ranking: ProviderRankingTable,
) -> CatalogClient:
    return CatalogClient(
        config=CatalogConfig(
            resilience=ResilienceConfig(name="catalog", base_url=BASE_URL, cache=None)
        ),
        segments=segments_from_ranking(ranking),
        client_factory=_make_client_factory(handler),
    )


SEARCH_PAYLOAD: dict[str, object] = {
    "currentPage": 1,
    "hasNextPage": True,
    "results": [
        {
            "id": "attack-on-titan-112",
            "title": "Attack on Titan",
            "image": "https://img.test/aot.jpg",
            "type": "TV",
            "releaseDate": "2013",
            "sub": 25,
        },
        {
            "id": "attack-on-titan-ova-113",
            "title": {"english": "Attack on Titan OVA", "romaji": "Shingeki no Kyojin OVA"},
            "type": "",
        },
    ],
}


def test_search_builds_segment_path_and_translates(ranking: ProviderRankingTable) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=SEARCH_PAYLOAD)

    page = _client(handler, ranking).search("Attack on Titan", "hianime", page=2)

    (request,) = seen
    assert request.url.path == "/anime/hianime/Attack on Titan"
    assert request.url.params["page"] == "2"
    assert page.has_next_page
    first, second = page.candidates
    assert first.native_id == "attack-on-titan-112"
    assert first.year == 2013
    assert first.media_type == "TV"
    assert first.provider == "hianime"
    assert second.title == "Attack on Titan OVA"
    assert second.media_type is None


def test_movie_providers_use_movies_segment(ranking: ProviderRankingTable) -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.path)
        return httpx.Response(200, json={"results": []})

    page = _client(handler, ranking).search("Dune", "flixhq")

    assert seen == ["/movies/flixhq/Dune"]
    assert page.candidates == ()


def test_search_http_error_becomes_search_failed(ranking: ProviderRankingTable) -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"message": "provider exploded"})

    with pytest.raises(SearchFailed, match="provider exploded") as excinfo:
        _client(handler, ranking).search("Dune", "flixhq")

    assert excinfo.value.provider == "flixhq"


def test_error_body_with_ok_status_becomes_search_failed(ranking: ProviderRankingTable) -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"message": "provider timed out"})

    with pytest.raises(SearchFailed, match="provider timed out"):
        _client(handler, ranking).search("Dune", "flixhq")


def test_search_on_unknown_provider_fails(ranking: ProviderRankingTable) -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    with pytest.raises(SearchFailed, match="Unknown provider"):
        _client(handler, ranking).search("Dune", "nowhere")


def test_malformed_payload_becomes_search_failed(ranking: ProviderRankingTable) -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"results": [{"title": "missing id"}]})

    with pytest.raises(SearchFailed):
        _client(handler, ranking).search("Dune", "flixhq")


def test_get_info_passes_type_for_movies(ranking: ProviderRankingTable) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "id": "movie/watch-dune-1",
                "title": "Dune",
                "releaseDate": "2021-10-22",
                "episodes": [{"id": "e1", "number": 1, "title": ""}],
            },
        )

    info = _client(handler, ranking).get_info("flixhq", "movie/watch-dune-1", MediaCategory.MOVIE)

    (request,) = seen
    assert request.url.path == "/movies/flixhq/info"
    assert request.url.params["id"] == "movie/watch-dune-1"
    assert request.url.params["type"] == "movie"
    assert info.year == 2021
    assert info.total_episodes == 1
    assert info.episodes[0].title is None


def test_get_info_omits_type_for_anime(ranking: ProviderRankingTable) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"id": "aot", "title": "Attack on Titan"})

    _client(handler, ranking).get_info("hianime", "aot", MediaCategory.ANIME)

    assert "type" not in seen[0].url.params


def test_get_info_not_found(ranking: ProviderRankingTable) -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(404, text="not found")

    with pytest.raises(MediaInfoNotFound) as excinfo:
        _client(handler, ranking).get_info("hianime", "missing")

    assert excinfo.value.native_id == "missing"


def test_translate_search_page_keeps_paging() -> None:
    response = SearchResponse.model_validate({"currentPage": 3, "results": []})

    page = translate_search_page(response, provider="goku")

    assert page.current_page == 3
    assert not page.has_next_page


@pytest.mark.parametrize(
    ("value", "expected"),
    [("2013", 2013), ("Released: 2021-10-22", 2021), (1999, 1999), ("unknown", None), (None, None)],
)
def test_parse_year(value: str | int | None, expected: int | None) -> None:
    assert parse_year(value) == expected


@pytest.mark.parametrize(
    ("payload", "expected"),
    [
        (SEARCH_PAYLOAD, True),
        ({"id": "aot", "title": "Attack on Titan"}, True),
        ({"currentPage": 1, "results": []}, False),
        ({"message": "provider timed out"}, False),
        (None, True),
    ],
)
def test_error_and_empty_payloads_are_not_cached(payload: object, expected: bool) -> None:
    assert _should_cache_payload(payload) is expected


def test_cache_predicate_installs_filter_policy() -> None:
    _, without_predicate = _build_cache_components(CacheConfig(backend="memory"))
    _, with_predicate = _build_cache_components(
        CacheConfig(backend="memory", should_cache=_should_cache_payload)
    )

    assert without_predicate is None
    assert with_predicate is not None


def test_resilient_client_sends_default_headers() -> None:
    client = ResilientClient(
        ResilienceConfig(
            name="catalog",
            base_url=BASE_URL,
            cache=None,
            default_headers={"User-Agent": "mediabridge/test"},
        )
    )

    headers = client._client.headers  # noqa: SLF001  # type: ignore[reportPrivateUsage]
    assert headers["User-Agent"] == "mediabridge/test"
