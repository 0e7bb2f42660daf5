"""Cross-provider reference resolution.

Flow, leaves first:
1) normalize titles and score similarity
2) search a provider and rank its candidates
3) consult the durable mapping store, then the ephemeral cache
4) walk the provider ranking table when fallback is allowed
5) hand low-confidence results and library duplicates to disambiguation
"""

from __future__ import annotations

from .cache import CacheEntry, ResolutionCache
from .contracts import AttemptOutcome, ProviderAttempt, Resolution, ResolutionRequest
from .disambiguation import (
    ConfirmationPrompt,
    DisambiguationWorkflow,
    LibraryConflict,
    detect_library_conflicts,
    is_season_mismatch,
    needs_confirmation,
)
from .errors import (
    AllProvidersExhausted,
    DecisionAlreadySettled,
    InvalidReference,
    MediaInfoNotFound,
    MissingSearchTitle,
    NoAcceptableMatch,
    PersistenceWriteFailed,
    ResolutionError,
    SearchFailed,
    UnknownAlternative,
)
from .normalize import SeasonInfo, extract_season_info, normalize, similarity
from .policy import DEFAULT_MATCH_POLICY, MatchPolicy
from .ranking import ProviderRankingTable, RankedProvider, UnknownProvider
from .resolver import Resolver
from .search import (
    CandidateSearch,
    RankedCandidates,
    find_close_matches,
    rank_candidates,
    strip_provider_prefix,
)
from .writer import MappingWriter, save_auto_mapping

__all__ = [
    "DEFAULT_MATCH_POLICY",
    "AllProvidersExhausted",
    "AttemptOutcome",
    "CacheEntry",
    "CandidateSearch",
    "ConfirmationPrompt",
    "DecisionAlreadySettled",
    "DisambiguationWorkflow",
    "InvalidReference",
    "LibraryConflict",
    "MappingWriter",
    "MatchPolicy",
    "MediaInfoNotFound",
    "MissingSearchTitle",
    "NoAcceptableMatch",
    "PersistenceWriteFailed",
    "ProviderAttempt",
    "ProviderRankingTable",
    "RankedCandidates",
    "RankedProvider",
    "Resolution",
    "ResolutionCache",
    "ResolutionError",
    "ResolutionRequest",
    "Resolver",
    "SearchFailed",
    "SeasonInfo",
    "UnknownAlternative",
    "UnknownProvider",
    "detect_library_conflicts",
    "extract_season_info",
    "find_close_matches",
    "is_season_mismatch",
    "needs_confirmation",
    "normalize",
    "rank_candidates",
    "save_auto_mapping",
    "similarity",
    "strip_provider_prefix",
]
