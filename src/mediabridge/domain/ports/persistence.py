"""Ports for persisting mappings and reading/writing the user library."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from mediabridge.domain.model import (
        LibraryEntry,
        LibraryTitle,
        NewLibraryItem,
        ProviderMapping,
        Reference,
    )


class MappingNotFound(LookupError):
    def __init__(self, reference: Reference, provider: str) -> None:
        super().__init__(f"No mapping for {reference} on {provider}")
        self.reference = reference
        self.provider = provider


class LibraryEntryNotFound(LookupError):
    def __init__(self, entry_id: UUID) -> None:
        super().__init__(f"No library entry {entry_id}")
        self.entry_id = entry_id


class AliasConflict(ValueError):
    """The reference is already a primary or alias reference of a library entry."""

    def __init__(self, reference: Reference, usage: str) -> None:
        super().__init__(f"{reference} is already used as {usage} reference")
        self.reference = reference
        self.usage = usage


@runtime_checkable
class MappingStore(Protocol):
    """Durable mapping store keyed by ``(reference, provider)``."""

    def get(self, reference: Reference, provider: str) -> ProviderMapping | None: ...

    def put(self, mapping: ProviderMapping) -> ProviderMapping:
        """Create or update the mapping for ``(mapping.reference, mapping.provider)``."""
        ...

    def put_auto(self, mapping: ProviderMapping) -> ProviderMapping | None:
        """Like ``put``, but keep a verified mapping; return ``None`` when one was kept.

        The check and the write must be atomic.
        """
        ...

    def delete(self, reference: Reference, provider: str) -> None:
        """Remove the mapping or raise ``MappingNotFound``."""
        ...


@runtime_checkable
class MappingCatalog(MappingStore, Protocol):
    """Mapping store with listing helpers for management surfaces."""

    def list_for_reference(self, reference: Reference) -> Sequence[ProviderMapping]: ...

    def list_for_provider(
        self,
        provider: str,
        *,
        limit: int = 100,
        offset: int = 0,
    ) -> tuple[Sequence[ProviderMapping], int]: ...


@runtime_checkable
class LibraryLookup(Protocol):
    """Read-only projection of a user's library for duplicate detection."""

    def list_titles(self, user_id: str) -> Sequence[LibraryTitle]: ...


@runtime_checkable
class LibraryWriter(Protocol):
    """Library mutations triggered by conflict outcomes."""

    def add_entry(self, user_id: str, item: NewLibraryItem) -> LibraryEntry: ...

    def add_alias(self, entry_id: UUID, reference: Reference) -> LibraryEntry: ...

    def replace_entry(self, entry_id: UUID, item: NewLibraryItem) -> LibraryEntry: ...

    def find_by_reference(self, reference: Reference) -> LibraryEntry | None:
        """Entry whose primary reference or alias is ``reference``."""
        ...


__all__ = [
    "AliasConflict",
    "LibraryEntryNotFound",
    "LibraryLookup",
    "LibraryWriter",
    "MappingCatalog",
    "MappingNotFound",
    "MappingStore",
]
