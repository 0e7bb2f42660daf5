"""Unit-of-work abstractions for coordinating repositories."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import TracebackType
    from uuid import UUID

    from mediabridge.domain.model import LibraryEntry, ProviderMapping, Reference


@runtime_checkable
class RepositoryCollection(Protocol):
    """Marker protocol for groups of repositories managed together."""


@runtime_checkable
class ProviderMappingRepository(Protocol):
    def add(self, mapping: ProviderMapping) -> None: ...

    def get(self, reference: Reference, provider: str) -> ProviderMapping | None: ...

    def remove(self, mapping: ProviderMapping) -> None: ...

    def update_unverified(self, mapping: ProviderMapping) -> bool:
        """Overwrite the row for the mapping's key unless it is verified."""
        ...

    def list_for_reference(self, reference: Reference) -> Sequence[ProviderMapping]: ...

    def list_for_provider(
        self, provider: str, *, limit: int, offset: int
    ) -> Sequence[ProviderMapping]: ...

    def count_for_provider(self, provider: str) -> int: ...


@runtime_checkable
class LibraryRepository(Protocol):
    def add(self, entry: LibraryEntry) -> None: ...

    def get(self, entry_id: UUID) -> LibraryEntry | None: ...

    def list_for_user(self, user_id: str) -> Sequence[LibraryEntry]: ...

    def find_by_reference(self, reference: Reference) -> LibraryEntry | None: ...

    def reference_in_use(self, reference: Reference) -> str | None:
        """Return ``"primary"``/``"alias"`` when ``reference`` is taken, else ``None``."""
        ...

    def add_alias(self, entry: LibraryEntry, reference: Reference) -> None: ...

    def remove_alias(self, entry: LibraryEntry, reference: Reference) -> None: ...

@runtime_checkable
class UnitOfWork[TRepositories: RepositoryCollection](Protocol):
    """Generic unit-of-work boundary around a repository collection."""

    @property
    def repositories(self) -> TRepositories: ...

    def __enter__(self) -> UnitOfWork[TRepositories]: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


@dataclass(slots=True)
class MediaRepositories(RepositoryCollection):
    """Repositories required by the mapping and library stores."""

    mappings: ProviderMappingRepository
    library: LibraryRepository


type MediaUnitOfWork = UnitOfWork[MediaRepositories]
