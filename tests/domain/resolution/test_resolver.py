from __future__ import annotations

import logging

import pytest

from mediabridge.domain.model import (
    MediaCategory,
    MediaInfo,
    ProviderMapping,
    Reference,
    ResolutionOrigin,
)
from mediabridge.domain.resolution import (
    AllProvidersExhausted,
    AttemptOutcome,
    InvalidReference,
    MappingWriter,
    MatchPolicy,
    MissingSearchTitle,
    ProviderRankingTable,
    ResolutionCache,
    ResolutionRequest,
    Resolver,
)
from tests.helpers.fakes import (
    FakeCatalog,
    InMemoryMappingStore,
    RecordingSink,
    make_candidate,
)

REFERENCE = Reference.of("tmdb", 1429)


def _verified(provider: str, native_id: str, title: str = "Attack on Titan") -> ProviderMapping:
    return ProviderMapping.verified(
        REFERENCE, provider, native_id=native_id, title=title, user_id="user-1"
    )


def test_direct_reference_passes_through_without_search(
    resolver: Resolver, catalog: FakeCatalog
) -> None:
    resolution = resolver.resolve_reference("hianime:attack-on-titan-112", "hianime")

    assert resolution.native_id == "attack-on-titan-112"
    assert resolution.origin is ResolutionOrigin.DIRECT
    assert resolution.confidence == 1.0
    assert resolution.verified
    assert catalog.searches == []


def test_direct_reference_passes_through_with_fallback_enabled(
    resolver: Resolver, catalog: FakeCatalog
) -> None:
    resolution = resolver.resolve_reference(
        "kickassanime:aot-1", "kickassanime", "Attack on Titan", allow_fallback=True
    )

    assert resolution.origin is ResolutionOrigin.DIRECT
    assert resolution.native_id == "aot-1"
    assert resolution.confidence == 1.0
    assert resolution.verified
    assert resolution.tried_providers == ("kickassanime",)
    assert catalog.searches == []


def test_unranked_target_is_tried_before_category_chain(
    resolver: Resolver, catalog: FakeCatalog
) -> None:
    resolution = resolver.resolve_reference(
        "gogoanime:aot-1",
        "gogoanime",
        "Attack on Titan",
        media_type=MediaCategory.ANIME,
        allow_fallback=True,
    )

    assert resolution.origin is ResolutionOrigin.DIRECT
    assert resolution.provider == "gogoanime"
    assert catalog.searches == []


def test_broken_target_falls_back_to_working_chain(
    resolver: Resolver, catalog: FakeCatalog
) -> None:
    catalog.failing.add("kickassanime")
    catalog.results["hianime"] = [make_candidate("aot", "Attack on Titan")]

    resolution = resolver.resolve_reference(
        REFERENCE, "kickassanime", "Attack on Titan", allow_fallback=True
    )

    assert resolution.provider == "hianime"
    assert resolution.tried_providers == ("kickassanime", "hianime")



def test_verified_mapping_wins_over_search(
    resolver: Resolver, catalog: FakeCatalog, mapping_store: InMemoryMappingStore
) -> None:
    mapping_store.put(_verified("hianime", "human-picked"))
    catalog.results["hianime"] = [make_candidate("search-hit", "Attack on Titan")]

    resolution = resolver.resolve_reference(REFERENCE, "hianime", "Attack on Titan")

    assert resolution.native_id == "human-picked"
    assert resolution.origin is ResolutionOrigin.MAPPING
    assert resolution.verified
    assert catalog.searches == []


def test_mapping_hit_refreshes_cache(
    resolver: Resolver, mapping_store: InMemoryMappingStore
) -> None:
    mapping_store.put(_verified("hianime", "human-picked"))

    resolver.resolve_reference(REFERENCE, "hianime")

    entry = resolver.cache.get(REFERENCE, "hianime")
    assert entry is not None
    assert entry.native_id == "human-picked"


def test_mappings_are_scoped_per_provider(
    resolver: Resolver, catalog: FakeCatalog, mapping_store: InMemoryMappingStore
) -> None:
    mapping_store.put(_verified("animepahe", "pahe-id"))
    catalog.results["hianime"] = [make_candidate("hi-id", "Attack on Titan")]

    resolution = resolver.resolve_reference(REFERENCE, "hianime", "Attack on Titan")

    assert resolution.native_id == "hi-id"
    assert resolution.origin is ResolutionOrigin.SEARCH
    assert catalog.searched_providers() == ["hianime"]


def test_cache_hit_skips_search(resolver: Resolver, catalog: FakeCatalog) -> None:
    resolver.cache.put(REFERENCE, "hianime", "cached-id", "Attack on Titan")

    resolution = resolver.resolve_reference(REFERENCE, "hianime")

    assert resolution.native_id == "cached-id"
    assert resolution.origin is ResolutionOrigin.CACHE
    assert resolution.title == "Attack on Titan"
    assert not resolution.verified
    assert catalog.searches == []


def test_live_search_picks_exact_title_and_persists(
    resolver: Resolver, catalog: FakeCatalog, sink: RecordingSink
) -> None:
    catalog.results["hianime"] = [
        make_candidate("aot-ova", "Attack no Titan OVA"),
        make_candidate("aot", "Attack on Titan"),
    ]

    resolution = resolver.resolve_reference(REFERENCE, "hianime", "Attack on Titan")

    assert resolution.native_id == "aot"
    assert resolution.confidence == 1.0
    assert resolution.origin is ResolutionOrigin.SEARCH
    assert [candidate.native_id for candidate in resolution.alternatives] == ["aot-ova"]
    assert [mapping.provider_native_id for mapping in sink.submitted] == ["aot"]
    assert not sink.submitted[0].is_verified
    assert resolution.tried_providers == ("hianime",)
    assert not resolution.used_fallback


def test_second_resolution_is_served_from_cache(
    resolver: Resolver, catalog: FakeCatalog
) -> None:
    catalog.results["hianime"] = [make_candidate("aot", "Attack on Titan")]

    resolver.resolve_reference(REFERENCE, "hianime", "Attack on Titan")
    second = resolver.resolve_reference(REFERENCE, "hianime", "Attack on Titan")

    assert second.origin is ResolutionOrigin.CACHE
    assert len(catalog.searches) == 1


def test_confidence_is_capped_at_one(resolver: Resolver, catalog: FakeCatalog) -> None:
    catalog.results["hianime"] = [
        make_candidate("aot", "Attack on Titan", media_type="Anime"),
    ]

    resolution = resolver.resolve_reference(
        REFERENCE, "hianime", "Attack on Titan", media_type=MediaCategory.ANIME
    )

    assert resolution.best is not None
    assert resolution.best.score == pytest.approx(1.1)
    assert resolution.confidence == 1.0


def test_match_below_acceptance_floor_fails(resolver: Resolver, catalog: FakeCatalog) -> None:
    # "naruto" vs "naruto shippuden hurricane chronicles": 6/37, below 0.3
    catalog.results["hianime"] = [make_candidate("n", "Naruto Shippuden Hurricane Chronicles")]

    with pytest.raises(AllProvidersExhausted) as excinfo:
        resolver.resolve_reference(REFERENCE, "hianime", "Naruto")

    (attempt,) = excinfo.value.attempts
    assert attempt.reason is AttemptOutcome.NO_ACCEPTABLE_MATCH
    assert attempt.best_score is not None
    assert attempt.best_score < 0.3


def test_match_at_acceptance_floor_is_accepted(
    catalog: FakeCatalog, ranking: ProviderRankingTable
) -> None:
    catalog.results["hianime"] = [make_candidate("n", "Naruto Season 2")]
    resolver = Resolver(
        search=catalog, ranking=ranking, policy=MatchPolicy(acceptance_floor=0.4)
    )

    resolution = resolver.resolve_reference(REFERENCE, "hianime", "Naruto")

    assert resolution.confidence == pytest.approx(0.4)


def test_empty_results_fail_the_provider(resolver: Resolver) -> None:
    with pytest.raises(AllProvidersExhausted) as excinfo:
        resolver.resolve_reference(REFERENCE, "hianime", "Attack on Titan")

    assert excinfo.value.tried_providers == ("hianime",)
    assert excinfo.value.attempts[0].best_score is None


def test_search_failure_without_fallback(resolver: Resolver, catalog: FakeCatalog) -> None:
    catalog.failing.add("hianime")
    catalog.results["animepahe"] = [make_candidate("aot", "Attack on Titan")]

    with pytest.raises(AllProvidersExhausted) as excinfo:
        resolver.resolve_reference(REFERENCE, "hianime", "Attack on Titan")

    assert excinfo.value.attempts[0].reason is AttemptOutcome.SEARCH_FAILED
    assert catalog.searched_providers() == ["hianime"]


def test_fallback_walks_chain_in_rank_order(resolver: Resolver, catalog: FakeCatalog) -> None:
    catalog.failing.add("hianime")
    catalog.results["animepahe"] = [make_candidate("x", "Something Else Entirely")]
    catalog.results["animekai"] = [make_candidate("aot", "Attack on Titan")]

    resolution = resolver.resolve(
        ResolutionRequest(
            reference=REFERENCE,
            title="Attack on Titan",
            media_type=MediaCategory.ANIME,
            allow_fallback=True,
        )
    )

    assert resolution.provider == "animekai"
    assert resolution.tried_providers == ("hianime", "animepahe", "animekai")
    assert resolution.used_fallback
    assert [attempt.reason for attempt in resolution.attempts] == [
        AttemptOutcome.SEARCH_FAILED,
        AttemptOutcome.NO_ACCEPTABLE_MATCH,
        AttemptOutcome.RESOLVED,
    ]
    # broken providers are never tried
    assert "kickassanime" not in catalog.searched_providers()


def test_fallback_tries_preferred_provider_first(
    resolver: Resolver, catalog: FakeCatalog
) -> None:
    catalog.failing.add("animekai")
    catalog.results["hianime"] = [make_candidate("aot", "Attack on Titan")]

    resolution = resolver.resolve_reference(
        REFERENCE, "animekai", "Attack on Titan", allow_fallback=True
    )

    assert resolution.provider == "hianime"
    assert resolution.tried_providers == ("animekai", "hianime")


def test_fallback_exhaustion_reports_every_provider(
    resolver: Resolver, catalog: FakeCatalog
) -> None:
    catalog.failing.update({"flixhq", "goku"})

    with pytest.raises(AllProvidersExhausted) as excinfo:
        resolver.resolve_reference(
            REFERENCE, "flixhq", "Dune", media_type=MediaCategory.MOVIE, allow_fallback=True
        )

    assert excinfo.value.tried_providers == ("flixhq", "goku")


def test_primary_provider_is_used_when_no_provider_given(
    resolver: Resolver, catalog: FakeCatalog
) -> None:
    catalog.results["flixhq"] = [make_candidate("dune", "Dune", provider="flixhq")]

    resolution = resolver.resolve(
        ResolutionRequest(reference=REFERENCE, title="Dune", media_type=MediaCategory.MOVIE)
    )

    assert resolution.provider == "flixhq"


def test_provider_or_media_type_is_required(resolver: Resolver) -> None:
    with pytest.raises(ValueError, match="provider or a media type"):
        resolver.resolve(ResolutionRequest(reference=REFERENCE, title="Dune"))


def test_search_without_title_is_fatal(resolver: Resolver, catalog: FakeCatalog) -> None:
    with pytest.raises(MissingSearchTitle):
        resolver.resolve_reference(REFERENCE, "hianime", allow_fallback=True)

    assert catalog.searches == []


def test_invalid_reference_is_rejected(resolver: Resolver) -> None:
    with pytest.raises(InvalidReference):
        resolver.resolve_reference("no-colon", "hianime", "Title")


def test_mapping_read_failure_falls_through_to_search(
    resolver: Resolver, catalog: FakeCatalog, mapping_store: InMemoryMappingStore
) -> None:
    mapping_store.fail_reads = True
    catalog.results["hianime"] = [make_candidate("aot", "Attack on Titan")]

    resolution = resolver.resolve_reference(REFERENCE, "hianime", "Attack on Titan")

    assert resolution.origin is ResolutionOrigin.SEARCH


def test_close_matches_flag_ambiguous_names(resolver: Resolver, catalog: FakeCatalog) -> None:
    catalog.results["hianime"] = [
        make_candidate("hxh-2011", "Hunter x Hunter"),
        make_candidate("hxh-1999", "Hunter x Hunter"),
        make_candidate("hxh-movie", "Hunter x Hunter: The Last Mission"),
    ]

    resolution = resolver.resolve_reference(REFERENCE, "hianime", "Hunter x Hunter")

    assert resolution.has_multiple_matches
    assert {candidate.native_id for candidate in resolution.close_matches} == {
        "hxh-2011",
        "hxh-1999",
    }


def test_alternatives_are_limited_by_policy(
    catalog: FakeCatalog, ranking: ProviderRankingTable
) -> None:
    catalog.results["hianime"] = [
        make_candidate(str(index), f"Gundam {index}") for index in range(10)
    ]
    resolver = Resolver(search=catalog, ranking=ranking, policy=MatchPolicy(max_alternatives=2))

    resolution = resolver.resolve_reference(REFERENCE, "hianime", "Gundam")

    assert len(resolution.alternatives) == 2


def test_fetch_info_attaches_media_info(resolver: Resolver, catalog: FakeCatalog) -> None:
    catalog.results["hianime"] = [make_candidate("aot", "Attack on Titan")]
    catalog.info[("hianime", "aot")] = MediaInfo(
        native_id="aot", title="Attack on Titan", provider="hianime", total_episodes=25
    )

    resolution = resolver.resolve_reference(
        REFERENCE, "hianime", "Attack on Titan", fetch_info=True
    )

    assert resolution.media_info is not None
    assert resolution.media_info.total_episodes == 25


def test_info_failure_without_fallback_keeps_resolution(
    resolver: Resolver, catalog: FakeCatalog
) -> None:
    catalog.results["hianime"] = [make_candidate("aot", "Attack on Titan")]

    resolution = resolver.resolve_reference(
        REFERENCE, "hianime", "Attack on Titan", fetch_info=True
    )

    assert resolution.native_id == "aot"
    assert resolution.media_info is None


def test_info_failure_with_fallback_moves_to_next_provider(
    resolver: Resolver, catalog: FakeCatalog
) -> None:
    catalog.results["hianime"] = [make_candidate("aot", "Attack on Titan")]
    catalog.results["animepahe"] = [make_candidate("pahe-aot", "Attack on Titan")]
    catalog.info[("animepahe", "pahe-aot")] = MediaInfo(
        native_id="pahe-aot", title="Attack on Titan", provider="animepahe"
    )

    resolution = resolver.resolve_reference(
        REFERENCE, "hianime", "Attack on Titan", fetch_info=True, allow_fallback=True
    )

    assert resolution.provider == "animepahe"
    assert resolution.attempts[0].reason is AttemptOutcome.INFO_UNAVAILABLE


def test_resolver_without_stores_still_searches(
    catalog: FakeCatalog, ranking: ProviderRankingTable
) -> None:
    catalog.results["hianime"] = [make_candidate("aot", "Attack on Titan")]
    cache = ResolutionCache()
    resolver = Resolver(search=catalog, ranking=ranking, cache=cache)

    resolution = resolver.resolve_reference(REFERENCE, "hianime", "Attack on Titan")

    assert resolution.native_id == "aot"
    assert cache.get(REFERENCE, "hianime") is not None


class _FailingSink:
    def submit(self, mapping: ProviderMapping) -> None:
        raise RuntimeError("queue unavailable")


def test_failing_auto_save_keeps_resolution(
    catalog: FakeCatalog, ranking: ProviderRankingTable, caplog: pytest.LogCaptureFixture
) -> None:
    catalog.results["hianime"] = [make_candidate("aot", "Attack on Titan")]
    resolver = Resolver(search=catalog, ranking=ranking, writer=_FailingSink())

    with caplog.at_level(logging.WARNING):
        resolution = resolver.resolve_reference(REFERENCE, "hianime", "Attack on Titan")

    assert resolution.native_id == "aot"
    assert resolution.confidence == 1.0
    assert "Could not queue mapping for tmdb:1429" in caplog.text


def test_failed_background_write_is_logged_not_raised(
    catalog: FakeCatalog, ranking: ProviderRankingTable, caplog: pytest.LogCaptureFixture
) -> None:
    catalog.results["hianime"] = [make_candidate("aot", "Attack on Titan")]
    store = InMemoryMappingStore()
    store.fail_writes = True

    with MappingWriter(store) as writer, caplog.at_level(logging.WARNING):
        resolver = Resolver(search=catalog, ranking=ranking, mappings=store, writer=writer)
        resolution = resolver.resolve_reference(REFERENCE, "hianime", "Attack on Titan")
        writer.flush()

    assert resolution.native_id == "aot"
    assert "Could not persist mapping for tmdb:1429 on hianime" in caplog.text
    assert store.get(REFERENCE, "hianime") is None
