"""Error taxonomy for reference resolution and disambiguation."""

from __future__ import annotations

from typing import TYPE_CHECKING

from mediabridge.domain.model import InvalidReference, ResolutionError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from mediabridge.domain.model import Reference

    from .contracts import ProviderAttempt


class MissingSearchTitle(ResolutionError, ValueError):
    """A non-direct resolution was requested without a title to search for."""

    def __init__(self, reference: Reference, provider: str) -> None:
        super().__init__(f"Resolving {reference} on {provider} requires a search title")
        self.reference = reference
        self.provider = provider


class SearchFailed(ResolutionError):
    """One provider's search capability failed."""

    def __init__(self, provider: str, message: str | None = None) -> None:
        super().__init__(message or f"Search failed on provider {provider!r}")
        self.provider = provider


class NoAcceptableMatch(ResolutionError):
    """The best candidate on a provider scored below the acceptance floor."""

    def __init__(self, provider: str, best_score: float | None) -> None:
        if best_score is None:
            detail = "no candidates"
        else:
            detail = f"best score {best_score:.2f}"
        super().__init__(f"No acceptable match on provider {provider!r} ({detail})")
        self.provider = provider
        self.best_score = best_score


class MediaInfoNotFound(ResolutionError):
    """Full info for a provider-native id could not be loaded."""

    def __init__(self, provider: str, native_id: str, message: str | None = None) -> None:
        super().__init__(message or f"No media info for {native_id!r} on provider {provider!r}")
        self.provider = provider
        self.native_id = native_id


class AllProvidersExhausted(ResolutionError):
    """Every provider tried failed or yielded no acceptable match."""

    def __init__(self, reference: Reference, attempts: Sequence[ProviderAttempt]) -> None:
        tried = ", ".join(f"{attempt.provider} ({attempt.reason})" for attempt in attempts)
        super().__init__(f"Could not resolve {reference}; tried {tried or 'no providers'}")
        self.reference = reference
        self.attempts = tuple(attempts)

    @property
    def tried_providers(self) -> tuple[str, ...]:
        return tuple(attempt.provider for attempt in self.attempts)


class PersistenceWriteFailed(ResolutionError):
    """Saving an auto-detected mapping failed. Logged, never surfaced."""

    def __init__(self, reference: Reference, provider: str) -> None:
        super().__init__(f"Could not persist mapping for {reference} on {provider}")
        self.reference = reference
        self.provider = provider


class DecisionAlreadySettled(ResolutionError):
    """A confirmation or conflict was already resolved."""


class UnknownAlternative(ResolutionError, ValueError):
    """The picked alternative is not one of the offered candidates."""

    def __init__(self, native_id: str) -> None:
        super().__init__(f"{native_id!r} is not one of the offered alternatives")
        self.native_id = native_id


__all__ = [
    "AllProvidersExhausted",
    "DecisionAlreadySettled",
    "InvalidReference",
    "MediaInfoNotFound",
    "MissingSearchTitle",
    "NoAcceptableMatch",
    "PersistenceWriteFailed",
    "ResolutionError",
    "SearchFailed",
    "UnknownAlternative",
]
