"""Decide when the user must disambiguate, and apply what they chose.

Two triggers feed this module: a fresh resolution below the confirmation floor
(``ConfirmationPrompt``) and a library add that looks like an existing entry
(``LibraryConflict``). Every prompt and conflict settles exactly once.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from mediabridge.domain.model import (
    Candidate,
    ConfirmationOutcome,
    ConflictOutcome,
    ProviderMapping,
    ResolutionOrigin,
)

from .errors import DecisionAlreadySettled, UnknownAlternative
from .normalize import extract_season_info, similarity
from .policy import DEFAULT_MATCH_POLICY

if TYPE_CHECKING:
    from collections.abc import Iterable

    from mediabridge.domain.model import (
        LibraryEntry,
        LibraryTitle,
        MediaCategory,
        NewLibraryItem,
        Reference,
    )
    from mediabridge.domain.ports import LibraryLookup, LibraryWriter, MappingStore

    from .cache import ResolutionCache
    from .contracts import Resolution
    from .policy import MatchPolicy

log = getLogger(__name__)


def needs_confirmation(
    resolution: Resolution,
    *,
    policy: MatchPolicy = DEFAULT_MATCH_POLICY,
) -> bool:
    """True for unverified, non-direct resolutions below the confirmation floor."""

    if resolution.verified or resolution.origin is ResolutionOrigin.DIRECT:
        return False
    return resolution.confidence < policy.confirmation_floor


@dataclass(slots=True, kw_only=True)
class ConfirmationPrompt:
    """Best match plus ranked alternatives awaiting a user decision."""

    reference: Reference
    provider: str
    best: Candidate
    alternatives: tuple[Candidate, ...] = ()
    multiple_matches: bool = False
    outcome: ConfirmationOutcome | None = None

    @classmethod
    def from_resolution(cls, resolution: Resolution) -> ConfirmationPrompt:
        best = resolution.best or Candidate(
            native_id=resolution.native_id,
            title=resolution.title,
            provider=resolution.provider,
            similarity=resolution.confidence,
            score=resolution.confidence,
        )
        return cls(
            reference=resolution.reference,
            provider=resolution.provider,
            best=best,
            alternatives=resolution.alternatives,
            multiple_matches=resolution.has_multiple_matches,
        )

    @property
    def settled(self) -> bool:
        return self.outcome is not None

    def alternative(self, native_id: str) -> Candidate:
        for candidate in self.alternatives:
            if candidate.native_id == native_id:
                return candidate
        raise UnknownAlternative(native_id)


@dataclass(slots=True, kw_only=True)
class LibraryConflict:
    """An incoming library item that overlaps an existing entry."""

    user_id: str
    incoming: NewLibraryItem
    existing: LibraryTitle
    score: float
    season_mismatch: bool = False
    outcome: ConflictOutcome | None = None

    @property
    def settled(self) -> bool:
        return self.outcome is not None


def detect_library_conflicts(
    user_id: str,
    item: NewLibraryItem,
    titles: Iterable[LibraryTitle],
    *,
    policy: MatchPolicy = DEFAULT_MATCH_POLICY,
) -> tuple[LibraryConflict, ...]:
    """Existing titles similar enough to ``item`` to ask the user about, best first."""

    conflicts: list[LibraryConflict] = []
    for existing in titles:
        score = similarity(item.title, existing.title)
        if score < policy.duplicate_detection_floor:
            continue
        conflicts.append(
            LibraryConflict(
                user_id=user_id,
                incoming=item,
                existing=existing,
                score=score,
                season_mismatch=is_season_mismatch(
                    item.title,
                    existing.title,
                    score=score,
                    types_match=_types_match(item.media_type, existing.media_type),
                    policy=policy,
                ),
            )
        )
    conflicts.sort(key=lambda conflict: conflict.score, reverse=True)
    return tuple(conflicts)


def is_season_mismatch(
    incoming_title: str,
    existing_title: str,
    *,
    score: float,
    types_match: bool,
    policy: MatchPolicy = DEFAULT_MATCH_POLICY,
) -> bool:
    """Heuristic for "same show, different season/format".

    Flags titles sharing a base title with different season numbers, and
    same-type titles that are related but not near-identical.
    """

    incoming = extract_season_info(incoming_title)
    existing = extract_season_info(existing_title)
    if incoming.base_title == existing.base_title and incoming.season != existing.season:
        return True
    return types_match and score < policy.duplicate_match_floor


def _types_match(left: MediaCategory | None, right: MediaCategory | None) -> bool:
    if left is None or right is None:
        return True
    return left == right


class DisambiguationWorkflow:
    """Apply confirmation and conflict decisions to mappings and the library."""

    def __init__(
        self,
        *,
        mappings: MappingStore,
        cache: ResolutionCache | None = None,
        library: LibraryWriter | None = None,
        lookup: LibraryLookup | None = None,
        policy: MatchPolicy = DEFAULT_MATCH_POLICY,
    ) -> None:
        self._mappings = mappings
        self._cache = cache
        self._library = library
        self._lookup = lookup
        self._policy = policy

    # confirmation

    def prompt_for(self, resolution: Resolution) -> ConfirmationPrompt | None:
        if not needs_confirmation(resolution, policy=self._policy):
            return None
        return ConfirmationPrompt.from_resolution(resolution)

    def accept_best(self, prompt: ConfirmationPrompt, *, user_id: str) -> ProviderMapping:
        self._ensure_open(prompt.settled)
        mapping = self._verify(prompt.reference, prompt.provider, prompt.best, user_id)
        prompt.outcome = ConfirmationOutcome.ACCEPT_BEST
        return mapping

    def pick_alternative(
        self,
        prompt: ConfirmationPrompt,
        native_id: str,
        *,
        user_id: str,
    ) -> ProviderMapping:
        self._ensure_open(prompt.settled)
        candidate = prompt.alternative(native_id)
        mapping = self._verify(prompt.reference, prompt.provider, candidate, user_id)
        prompt.outcome = ConfirmationOutcome.PICK_ALTERNATIVE
        return mapping

    def verify(
        self,
        reference: Reference,
        provider: str,
        *,
        native_id: str,
        title: str,
        user_id: str,
    ) -> ProviderMapping:
        """Store a human-confirmed mapping outside of a prompt."""

        mapping = ProviderMapping.verified(
            reference, provider, native_id=native_id, title=title, user_id=user_id
        )
        existing = self._mappings.get(reference, provider)
        if existing is not None:
            mapping.id = existing.id
            mapping.created_at = existing.created_at
        stored = self._mappings.put(mapping)
        if self._cache is not None:
            self._cache.put(reference, provider, native_id, title)
        log.info(f"{user_id} verified {reference} -> {provider}:{native_id}")
        return stored

    def _verify(
        self,
        reference: Reference,
        provider: str,
        candidate: Candidate,
        user_id: str,
    ) -> ProviderMapping:
        return self.verify(
            reference,
            provider,
            native_id=candidate.native_id,
            title=candidate.title,
            user_id=user_id,
        )

    # library

    def detect_conflicts(self, user_id: str, item: NewLibraryItem) -> tuple[LibraryConflict, ...]:
        if self._lookup is None:
            return ()
        titles = self._lookup.list_titles(user_id)
        return detect_library_conflicts(user_id, item, titles, policy=self._policy)

    def settle(self, conflict: LibraryConflict, outcome: ConflictOutcome) -> LibraryEntry:
        """Apply ``outcome`` to ``conflict``. A conflict settles exactly once."""

        self._ensure_open(conflict.settled)
        library = self._require_library()
        match outcome:
            case ConflictOutcome.MERGE:
                entry = library.add_alias(conflict.existing.entry_id, conflict.incoming.reference)
            case ConflictOutcome.REPLACE:
                entry = library.replace_entry(conflict.existing.entry_id, conflict.incoming)
            case ConflictOutcome.KEEP_BOTH:
                entry = library.add_entry(conflict.user_id, conflict.incoming)
        conflict.outcome = outcome
        log.info(
            f"Library conflict {conflict.incoming.reference} vs {conflict.existing.entry_id}: "
            f"{outcome}"
        )
        return entry

    def merge(self, conflict: LibraryConflict) -> LibraryEntry:
        return self.settle(conflict, ConflictOutcome.MERGE)

    def replace(self, conflict: LibraryConflict) -> LibraryEntry:
        return self.settle(conflict, ConflictOutcome.REPLACE)

    def keep_both(self, conflict: LibraryConflict) -> LibraryEntry:
        return self.settle(conflict, ConflictOutcome.KEEP_BOTH)

    def add_to_library(
        self, user_id: str, item: NewLibraryItem
    ) -> LibraryEntry | tuple[LibraryConflict, ...]:
        """Add ``item`` directly, or return the conflicts the user must settle first."""

        conflicts = self.detect_conflicts(user_id, item)
        if conflicts:
            log.info(f"{len(conflicts)} possible duplicates for {item.title!r}")
            return conflicts
        return self._require_library().add_entry(user_id, item)

    def _require_library(self) -> LibraryWriter:
        if self._library is None:
            raise RuntimeError("No library writer configured")
        return self._library

    @staticmethod
    def _ensure_open(settled: bool) -> None:
        if settled:
            raise DecisionAlreadySettled("This decision has already been applied")


__all__ = [
    "ConfirmationPrompt",
    "DisambiguationWorkflow",
    "LibraryConflict",
    "detect_library_conflicts",
    "is_season_mismatch",
    "needs_confirmation",
]
