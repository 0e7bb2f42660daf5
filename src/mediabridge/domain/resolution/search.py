"""Score provider search results against the requested title."""

from __future__ import annotations

from dataclasses import dataclass, replace
from logging import getLogger
from typing import TYPE_CHECKING, Final

from mediabridge.domain.model import MediaCategory

from .errors import SearchFailed
from .normalize import similarity
from .policy import DEFAULT_MATCH_POLICY

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable

    from mediabridge.domain.model import Candidate
    from mediabridge.domain.ports import ProviderSearch

    from .policy import MatchPolicy

log = getLogger(__name__)

_TYPE_LABELS: Final[dict[MediaCategory, frozenset[str]]] = {
    MediaCategory.ANIME: frozenset({"anime"}),
    MediaCategory.MOVIE: frozenset({"movie"}),
    MediaCategory.TV: frozenset({"tv", "tv series"}),
}


@dataclass(frozen=True, slots=True)
class RankedCandidates:
    """Scored candidates from one provider, best first."""

    provider: str
    query: str
    candidates: tuple[Candidate, ...] = ()

    @property
    def best(self) -> Candidate | None:
        return self.candidates[0] if self.candidates else None

    @property
    def runners_up(self) -> tuple[Candidate, ...]:
        return self.candidates[1:]

    def __bool__(self) -> bool:
        return bool(self.candidates)


def type_matches(declared: str | None, hint: MediaCategory | None) -> bool:
    if hint is None or not declared:
        return False
    return declared.strip().lower() in _TYPE_LABELS.get(hint, frozenset())


def strip_provider_prefix(native_id: str, known_providers: Collection[str]) -> str:
    """Turn ``"animepahe:abc"`` into ``"abc"`` when the prefix is a known provider."""

    prefix, sep, rest = native_id.partition(":")
    if sep and rest and prefix in known_providers:
        return rest
    return native_id


def rank_candidates(
    title: str,
    candidates: Iterable[Candidate],
    *,
    media_type: MediaCategory | None = None,
    type_match_bonus: float = DEFAULT_MATCH_POLICY.type_match_bonus,
) -> tuple[Candidate, ...]:
    """Score and sort ``candidates``. Ties keep the provider's original order."""

    scored = [
        candidate.scored(
            similarity=similarity(title, candidate.title),
            bonus=type_match_bonus if type_matches(candidate.media_type, media_type) else 0.0,
        )
        for candidate in candidates
    ]
    return tuple(sorted(scored, key=lambda candidate: candidate.score, reverse=True))


def find_close_matches(
    title: str,
    candidates: Iterable[Candidate],
    *,
    threshold: float = DEFAULT_MATCH_POLICY.confirmation_floor,
) -> tuple[Candidate, ...]:
    """Every candidate whose raw title similarity is at least ``threshold``."""

    return tuple(
        candidate
        for candidate in candidates
        if similarity(title, candidate.title) >= threshold
    )


class CandidateSearch:
    """Run a provider search and rank what comes back."""

    def __init__(
        self,
        search: ProviderSearch,
        *,
        known_providers: Collection[str] = (),
        policy: MatchPolicy = DEFAULT_MATCH_POLICY,
    ) -> None:
        self._search = search
        self._known_providers = frozenset(known_providers)
        self._policy = policy

    def search(
        self,
        title: str,
        provider: str,
        *,
        media_type: MediaCategory | None = None,
        page: int = 1,
    ) -> RankedCandidates:
        """Search ``provider`` for ``title``.

        Raises ``SearchFailed`` if the provider errors. Adapters are expected to
        translate their own errors, anything else that escapes is wrapped here.
        """

        try:
            result = self._search.search(title, provider, page=page)
        except SearchFailed:
            raise
        except Exception as exc:
            raise SearchFailed(provider, f"Search on {provider!r} failed: {exc}") from exc

        known = self._known_providers | {provider}
        candidates = [
            _with_native_id(candidate, strip_provider_prefix(candidate.native_id, known))
            for candidate in result.candidates
        ]
        ranked = rank_candidates(
            title,
            candidates,
            media_type=media_type,
            type_match_bonus=self._policy.type_match_bonus,
        )
        log.debug(f"{provider}: {len(ranked)} candidates for {title!r}")
        return RankedCandidates(provider=provider, query=title, candidates=ranked)


def _with_native_id(candidate: Candidate, native_id: str) -> Candidate:
    if native_id == candidate.native_id:
        return candidate
    return replace(candidate, native_id=native_id)
