"""Process-lifetime cache in front of the durable mapping store."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mediabridge.domain.model import Reference


@dataclass(frozen=True, slots=True)
class CacheEntry:
    native_id: str
    title: str | None = None


class ResolutionCache:
    """Thread-safe ``(reference, provider) -> provider id`` map.

    Never persisted. One instance is owned by each resolver (tests create a
    fresh one per case).
    """

    def __init__(self) -> None:
        self._entries: dict[tuple[Reference, str], CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, reference: Reference, provider: str) -> CacheEntry | None:
        with self._lock:
            return self._entries.get((reference, provider))

    def put(
        self,
        reference: Reference,
        provider: str,
        native_id: str,
        title: str | None = None,
    ) -> None:
        with self._lock:
            self._entries[(reference, provider)] = CacheEntry(native_id, title)

    def discard(self, reference: Reference, provider: str) -> None:
        with self._lock:
            self._entries.pop((reference, provider), None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries
