"""Thresholds used by provider resolution and duplicate detection."""

from __future__ import annotations

from dataclasses import dataclass, fields

from .env import optional_float_env, optional_int_env
from .errors import ConfigurationError

DEFAULT_ACCEPTANCE_FLOOR = 0.3
DEFAULT_CONFIRMATION_FLOOR = 0.9
DEFAULT_DUPLICATE_MATCH_FLOOR = 0.9
DEFAULT_DUPLICATE_DETECTION_FLOOR = 0.3
DEFAULT_TYPE_MATCH_BONUS = 0.1
DEFAULT_MAX_ALTERNATIVES = 5

ENV_PREFIX = "MEDIABRIDGE_"


@dataclass(frozen=True, slots=True)
class ResolutionConfig:
    """Hand-tuned matching constants.

    ``acceptance_floor``
        Best live-search score below this fails the provider attempt.
    ``confirmation_floor``
        Fresh resolutions below this ask the user to confirm.
    ``duplicate_match_floor``
        Library titles at or above this are treated as near-identical.
    ``duplicate_detection_floor``
        Library titles at or above this surface as a conflict at all.
    """

    acceptance_floor: float = DEFAULT_ACCEPTANCE_FLOOR
    confirmation_floor: float = DEFAULT_CONFIRMATION_FLOOR
    duplicate_match_floor: float = DEFAULT_DUPLICATE_MATCH_FLOOR
    duplicate_detection_floor: float = DEFAULT_DUPLICATE_DETECTION_FLOOR
    type_match_bonus: float = DEFAULT_TYPE_MATCH_BONUS
    max_alternatives: int = DEFAULT_MAX_ALTERNATIVES

    def __post_init__(self) -> None:
        for item in fields(self):
            if item.name == "max_alternatives":
                continue
            value = getattr(self, item.name)
            if not 0.0 <= value <= 1.0:
                raise ConfigurationError(f"{item.name} must be within [0, 1], got {value}")
        if self.max_alternatives < 0:
            raise ConfigurationError("max_alternatives must be non-negative")


def get_resolution_config() -> ResolutionConfig:
    """Build the thresholds, honouring ``MEDIABRIDGE_<FIELD>`` overrides."""

    return ResolutionConfig(
        acceptance_floor=optional_float_env(
            f"{ENV_PREFIX}ACCEPTANCE_FLOOR", DEFAULT_ACCEPTANCE_FLOOR
        ),
        confirmation_floor=optional_float_env(
            f"{ENV_PREFIX}CONFIRMATION_FLOOR", DEFAULT_CONFIRMATION_FLOOR
        ),
        duplicate_match_floor=optional_float_env(
            f"{ENV_PREFIX}DUPLICATE_MATCH_FLOOR", DEFAULT_DUPLICATE_MATCH_FLOOR
        ),
        duplicate_detection_floor=optional_float_env(
            f"{ENV_PREFIX}DUPLICATE_DETECTION_FLOOR", DEFAULT_DUPLICATE_DETECTION_FLOOR
        ),
        type_match_bonus=optional_float_env(
            f"{ENV_PREFIX}TYPE_MATCH_BONUS", DEFAULT_TYPE_MATCH_BONUS
        ),
        max_alternatives=optional_int_env(
            f"{ENV_PREFIX}MAX_ALTERNATIVES", DEFAULT_MAX_ALTERNATIVES
        ),
    )
