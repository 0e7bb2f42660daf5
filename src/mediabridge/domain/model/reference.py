"""Canonical ``source:id`` references.

A reference is the key the rest of the system resolves *from*. The native id
may itself contain colons (some manga ids do), so only the first colon splits.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final

from .errors import ResolutionError

_SOURCE_PATTERN: Final = re.compile(r"^[^:]+$")


class InvalidReference(ResolutionError, ValueError):
    """Raised when a reference string is not of the form ``source:id``."""

    def __init__(self, value: object) -> None:
        super().__init__(f'Invalid reference {value!r}: expected "source:id" (e.g. "tmdb:12345")')
        self.value = value


@dataclass(frozen=True, slots=True)
class Reference:
    source: str
    native_id: str

    def __post_init__(self) -> None:
        if not _SOURCE_PATTERN.match(self.source) or not self.native_id:
            raise InvalidReference(f"{self.source}:{self.native_id}")

    @classmethod
    def parse(cls, value: str | Reference) -> Reference:
        if isinstance(value, Reference):
            return value
        if not isinstance(value, str):
            raise InvalidReference(value)
        source, sep, native_id = value.strip().partition(":")
        if not sep or not source or not native_id:
            raise InvalidReference(value)
        return cls(source=source, native_id=native_id)

    @classmethod
    def of(cls, source: str, native_id: str | int) -> Reference:
        return cls(source=source, native_id=str(native_id))

    def is_from(self, source: str) -> bool:
        return self.source == source

    def __str__(self) -> str:
        return f"{self.source}:{self.native_id}"
