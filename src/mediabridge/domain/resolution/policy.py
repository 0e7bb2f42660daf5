"""Matching thresholds used by the resolver and disambiguation workflow."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mediabridge.config.resolution import ResolutionConfig


@dataclass(frozen=True, slots=True, kw_only=True)
class MatchPolicy:
    acceptance_floor: float = 0.3
    confirmation_floor: float = 0.9
    duplicate_match_floor: float = 0.9
    duplicate_detection_floor: float = 0.3
    type_match_bonus: float = 0.1
    max_alternatives: int = 5

    @classmethod
    def from_config(cls, config: ResolutionConfig) -> MatchPolicy:
        return cls(
            acceptance_floor=config.acceptance_floor,
            confirmation_floor=config.confirmation_floor,
            duplicate_match_floor=config.duplicate_match_floor,
            duplicate_detection_floor=config.duplicate_detection_floor,
            type_match_bonus=config.type_match_bonus,
            max_alternatives=config.max_alternatives,
        )


DEFAULT_MATCH_POLICY = MatchPolicy()
