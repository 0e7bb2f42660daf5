"""Resolve a canonical reference into a provider-native id.

Per provider the precedence is strict:

1. direct pass-through when the reference already belongs to the provider
2. durable mapping
3. ephemeral cache
4. live search, accepted only at or above the acceptance floor

With fallback enabled the requested provider is tried first, then the same
steps run against the rest of the category's chain until one succeeds.
"""

from __future__ import annotations

from dataclasses import replace
from logging import getLogger
from typing import TYPE_CHECKING, Protocol

from mediabridge.domain.model import ProviderMapping, Reference, ResolutionOrigin

from .cache import ResolutionCache
from .contracts import AttemptOutcome, ProviderAttempt, Resolution, ResolutionRequest
from .errors import (
    AllProvidersExhausted,
    MediaInfoNotFound,
    MissingSearchTitle,
    NoAcceptableMatch,
    SearchFailed,
)
from .policy import DEFAULT_MATCH_POLICY
from .ranking import UnknownProvider
from .search import CandidateSearch, find_close_matches

if TYPE_CHECKING:
    from mediabridge.domain.model import MediaCategory, MediaInfo
    from mediabridge.domain.ports import MappingStore, ProviderInfo, ProviderSearch

    from .policy import MatchPolicy
    from .ranking import ProviderRankingTable

log = getLogger(__name__)


class MappingSink(Protocol):
    def submit(self, mapping: ProviderMapping) -> None: ...


class _AttemptFailed(Exception):
    def __init__(self, attempt: ProviderAttempt) -> None:
        super().__init__(attempt.detail)
        self.attempt = attempt


class Resolver:
    """Orchestrates mapping store, cache, search and ranking table."""

    def __init__(
        self,
        *,
        search: ProviderSearch,
        ranking: ProviderRankingTable,
        mappings: MappingStore | None = None,
        cache: ResolutionCache | None = None,
        writer: MappingSink | None = None,
        info: ProviderInfo | None = None,
        policy: MatchPolicy = DEFAULT_MATCH_POLICY,
    ) -> None:
        known_providers = {
            entry.name for category in ranking.categories for entry in ranking.providers(category)
        }
        self._candidates = CandidateSearch(search, known_providers=known_providers, policy=policy)
        self._ranking = ranking
        self._mappings = mappings
        self._cache = cache if cache is not None else ResolutionCache()
        self._writer = writer
        self._info = info
        self._policy = policy

    @property
    def cache(self) -> ResolutionCache:
        return self._cache

    @property
    def policy(self) -> MatchPolicy:
        return self._policy

    def resolve_reference(
        self,
        reference: Reference | str,
        provider: str | None = None,
        title: str | None = None,
        *,
        media_type: MediaCategory | None = None,
        fetch_info: bool = False,
        allow_fallback: bool = False,
    ) -> Resolution:
        """Convenience wrapper building a ``ResolutionRequest``."""

        return self.resolve(
            ResolutionRequest(
                reference=Reference.parse(reference),
                provider=provider,
                title=title,
                media_type=media_type,
                fetch_info=fetch_info,
                allow_fallback=allow_fallback,
            )
        )

    def resolve(self, request: ResolutionRequest) -> Resolution:
        """Resolve ``request`` or raise ``AllProvidersExhausted``.

        ``InvalidReference`` and ``MissingSearchTitle`` abort immediately; search
        failures and below-floor matches only fail the current provider.
        """

        reference = Reference.parse(request.reference)
        targets = self._targets(request)
        attempts: list[ProviderAttempt] = []

        for provider in targets:
            try:
                resolution = self._resolve_on(provider, reference, request)
            except _AttemptFailed as failure:
                attempts.append(failure.attempt)
                log.warning(
                    f"Resolving {reference} on {provider} failed "
                    f"({failure.attempt.reason}): {failure.attempt.detail}"
                )
                continue

            attempts.append(
                ProviderAttempt(provider, AttemptOutcome.RESOLVED, best_score=resolution.confidence)
            )
            if len(attempts) > 1:
                log.info(f"Resolved {reference} via fallback provider {provider}")
            return replace(resolution, attempts=tuple(attempts))

        log.error(
            f"Could not resolve {reference}; tried {[attempt.provider for attempt in attempts]}"
        )
        raise AllProvidersExhausted(reference, attempts)

    def _targets(self, request: ResolutionRequest) -> tuple[str, ...]:
        category = request.media_type
        provider = request.provider
        if provider is None:
            if category is None:
                raise ValueError("A target provider or a media type is required")
            provider = self._ranking.primary_provider(category)
            if provider is None:
                log.error(f"No working providers for {category}")
                return ()

        if not request.allow_fallback:
            return (provider,)

        if category is None:
            try:
                category = self._ranking.category_of(provider)
            except UnknownProvider:
                log.warning(f"{provider!r} is not ranked; resolving without fallback")
                return (provider,)
        chain = self._ranking.fallback_chain(category, preferred=provider)
        # the requested provider always goes first, even when broken or unranked
        return (provider, *(name for name in chain if name != provider))

    def _resolve_on(
        self,
        provider: str,
        reference: Reference,
        request: ResolutionRequest,
    ) -> Resolution:
        resolution = (
            self._direct(provider, reference, request)
            or self._from_mapping(provider, reference, request)
            or self._from_cache(provider, reference, request)
            or self._from_search(provider, reference, request)
        )
        if request.fetch_info:
            resolution = self._with_info(resolution, request)
        return resolution

    def _direct(
        self, provider: str, reference: Reference, request: ResolutionRequest
    ) -> Resolution | None:
        if not reference.is_from(provider):
            return None
        log.debug(f"{reference} already belongs to {provider}")
        return Resolution(
            reference=reference,
            provider=provider,
            native_id=reference.native_id,
            title=request.title or "",
            confidence=1.0,
            verified=True,
            origin=ResolutionOrigin.DIRECT,
        )

    def _from_mapping(
        self, provider: str, reference: Reference, request: ResolutionRequest
    ) -> Resolution | None:
        if self._mappings is None:
            return None
        try:
            mapping = self._mappings.get(reference, provider)
        except Exception as exc:
            log.warning(f"Mapping lookup for {reference} on {provider} failed: {exc}")
            return None
        if mapping is None:
            return None

        log.debug(
            f"Mapping hit for {reference} -> {provider}:{mapping.provider_native_id} "
            f"(confidence {mapping.confidence:.2f})"
        )
        self._cache.put(
            reference, provider, mapping.provider_native_id, mapping.provider_display_title
        )
        return Resolution(
            reference=reference,
            provider=provider,
            native_id=mapping.provider_native_id,
            title=mapping.provider_display_title,
            confidence=mapping.confidence,
            verified=mapping.is_verified,
            origin=ResolutionOrigin.MAPPING,
        )

    def _from_cache(
        self, provider: str, reference: Reference, request: ResolutionRequest
    ) -> Resolution | None:
        entry = self._cache.get(reference, provider)
        if entry is None:
            return None
        log.debug(f"Cache hit for {reference} -> {provider}:{entry.native_id}")
        return Resolution(
            reference=reference,
            provider=provider,
            native_id=entry.native_id,
            title=request.title or entry.title or "",
            confidence=1.0,
            verified=False,
            origin=ResolutionOrigin.CACHE,
        )

    def _from_search(
        self, provider: str, reference: Reference, request: ResolutionRequest
    ) -> Resolution:
        title = (request.title or "").strip()
        if not title:
            raise MissingSearchTitle(reference, provider)

        log.info(f"Searching {provider} for {title!r}")
        try:
            ranked = self._candidates.search(title, provider, media_type=request.media_type)
        except SearchFailed as exc:
            raise _AttemptFailed(
                ProviderAttempt(provider, AttemptOutcome.SEARCH_FAILED, detail=str(exc))
            ) from exc

        best = ranked.best
        if best is None or best.score < self._policy.acceptance_floor:
            error = NoAcceptableMatch(provider, best.score if best else None)
            raise _AttemptFailed(
                ProviderAttempt(
                    provider,
                    AttemptOutcome.NO_ACCEPTABLE_MATCH,
                    best_score=error.best_score,
                    detail=str(error),
                )
            )

        confidence = min(1.0, best.score)
        log.info(f"Matched {title!r} to {best.title!r} ({best.native_id}) score {best.score:.2f}")
        self._cache.put(reference, provider, best.native_id, best.title)
        self._persist(
            ProviderMapping.auto(
                reference,
                provider,
                native_id=best.native_id,
                title=best.title,
                confidence=confidence,
            )
        )
        return Resolution(
            reference=reference,
            provider=provider,
            native_id=best.native_id,
            title=best.title,
            confidence=confidence,
            verified=False,
            origin=ResolutionOrigin.SEARCH,
            best=best,
            alternatives=ranked.runners_up[: self._policy.max_alternatives],
            close_matches=find_close_matches(
                title, ranked.candidates, threshold=self._policy.confirmation_floor
            ),
        )

    def _with_info(self, resolution: Resolution, request: ResolutionRequest) -> Resolution:
        if self._info is None:
            return resolution
        try:
            info: MediaInfo = self._info.get_info(
                resolution.provider, resolution.native_id, request.media_type
            )
        except MediaInfoNotFound as exc:
            if request.allow_fallback:
                raise _AttemptFailed(
                    ProviderAttempt(
                        resolution.provider, AttemptOutcome.INFO_UNAVAILABLE, detail=str(exc)
                    )
                ) from exc
            log.warning(f"Resolved {resolution.native_id} but fetching info failed: {exc}")
            return resolution

        title = resolution.title
        if resolution.origin is not ResolutionOrigin.SEARCH:
            title = info.title or title
        return replace(resolution, media_info=info, title=title)

    def _persist(self, mapping: ProviderMapping) -> None:
        if self._writer is None:
            return
        try:
            self._writer.submit(mapping)
        except Exception as exc:
            log.warning(f"Could not queue mapping for {mapping.reference}: {exc}")
