"""Mapping store and library store built on the unit of work.

Each call opens its own unit of work, so concurrent resolutions never share a
session.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from sqlalchemy.exc import IntegrityError

from mediabridge.domain.model import LibraryEntry
from mediabridge.domain.ports import (
    AliasConflict,
    LibraryEntryNotFound,
    LibraryLookup,
    LibraryWriter,
    MappingCatalog,
    MappingNotFound,
)

from .unit_of_work import SqlAlchemyUnitOfWork

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from mediabridge.domain.model import (
        LibraryTitle,
        NewLibraryItem,
        ProviderMapping,
        Reference,
    )
    from mediabridge.domain.ports import MediaUnitOfWork

type UnitOfWorkFactory = Callable[[], MediaUnitOfWork]

log = getLogger(__name__)


class SqlAlchemyMappingStore:
    def __init__(self, unit_of_work_factory: UnitOfWorkFactory = SqlAlchemyUnitOfWork) -> None:
        self._uow_factory = unit_of_work_factory

    def get(self, reference: Reference, provider: str) -> ProviderMapping | None:
        with self._uow_factory() as uow:
            return uow.repositories.mappings.get(reference, provider)

    def put(self, mapping: ProviderMapping) -> ProviderMapping:
        """Create or update by ``(reference, provider)``; the later write wins."""

        try:
            return self._put_once(mapping)
        except IntegrityError:
            # a concurrent writer inserted the same key first
            log.debug(f"Retrying mapping write for {mapping.reference} on {mapping.provider}")
            return self._put_once(mapping)

    def _put_once(self, mapping: ProviderMapping) -> ProviderMapping:
        with self._uow_factory() as uow:
            repository = uow.repositories.mappings
            existing = repository.get(mapping.reference, mapping.provider)
            if existing is None:
                repository.add(mapping)
                stored = mapping
            else:
                existing.provider_native_id = mapping.provider_native_id
                existing.provider_display_title = mapping.provider_display_title
                existing.confidence = mapping.confidence
                existing.verified_by = mapping.verified_by
                existing.updated_at = datetime.now(tz=UTC)
                stored = existing
            uow.commit()
            return stored

    def put_auto(self, mapping: ProviderMapping) -> ProviderMapping | None:
        """Create or update unless a verified mapping holds the key.

        The update is conditional on ``verified_by IS NULL``, so a verification
        committed by another session is never overwritten.
        """

        try:
            return self._put_auto_once(mapping)
        except IntegrityError:
            log.debug(f"Retrying mapping write for {mapping.reference} on {mapping.provider}")
            return self._put_auto_once(mapping)

    def _put_auto_once(self, mapping: ProviderMapping) -> ProviderMapping | None:
        with self._uow_factory() as uow:
            repository = uow.repositories.mappings
            if repository.update_unverified(mapping):
                stored = repository.get(mapping.reference, mapping.provider)
                uow.commit()
                return stored
            if repository.get(mapping.reference, mapping.provider) is not None:
                return None
            repository.add(mapping)
            uow.commit()
            return mapping

    def delete(self, reference: Reference, provider: str) -> None:
        with self._uow_factory() as uow:
            repository = uow.repositories.mappings
            existing = repository.get(reference, provider)
            if existing is None:
                raise MappingNotFound(reference, provider)
            repository.remove(existing)
            uow.commit()
        log.info(f"Deleted mapping for {reference} on {provider}")

    def list_for_reference(self, reference: Reference) -> Sequence[ProviderMapping]:
        with self._uow_factory() as uow:
            return list(uow.repositories.mappings.list_for_reference(reference))

    def list_for_provider(
        self,
        provider: str,
        *,
        limit: int = 100,
        offset: int = 0,
    ) -> tuple[Sequence[ProviderMapping], int]:
        with self._uow_factory() as uow:
            repository = uow.repositories.mappings
            mappings = list(repository.list_for_provider(provider, limit=limit, offset=offset))
            return mappings, repository.count_for_provider(provider)


class SqlAlchemyLibraryStore:
    def __init__(self, unit_of_work_factory: UnitOfWorkFactory = SqlAlchemyUnitOfWork) -> None:
        self._uow_factory = unit_of_work_factory

    def list_titles(self, user_id: str) -> Sequence[LibraryTitle]:
        with self._uow_factory() as uow:
            return [entry.as_title() for entry in uow.repositories.library.list_for_user(user_id)]

    def list_entries(self, user_id: str) -> Sequence[LibraryEntry]:
        with self._uow_factory() as uow:
            return list(uow.repositories.library.list_for_user(user_id))

    def get_entry(self, entry_id: UUID) -> LibraryEntry:
        with self._uow_factory() as uow:
            entry = uow.repositories.library.get(entry_id)
            if entry is None:
                raise LibraryEntryNotFound(entry_id)
            return entry

    def find_by_reference(self, reference: Reference) -> LibraryEntry | None:
        with self._uow_factory() as uow:
            return uow.repositories.library.find_by_reference(reference)

    def add_entry(self, user_id: str, item: NewLibraryItem) -> LibraryEntry:
        with self._uow_factory() as uow:
            repository = uow.repositories.library
            usage = repository.reference_in_use(item.reference)
            if usage is not None:
                raise AliasConflict(item.reference, usage)
            entry = LibraryEntry.from_item(user_id, item)
            repository.add(entry)
            uow.commit()
        log.info(f"Added {item.title!r} ({item.reference}) to {user_id}'s library")
        return entry

    def add_alias(self, entry_id: UUID, reference: Reference) -> LibraryEntry:
        """Link ``reference`` to an existing entry instead of creating a new one."""

        with self._uow_factory() as uow:
            repository = uow.repositories.library
            entry = repository.get(entry_id)
            if entry is None:
                raise LibraryEntryNotFound(entry_id)
            usage = repository.reference_in_use(reference)
            if usage is not None:
                raise AliasConflict(reference, usage)
            repository.add_alias(entry, reference)
            uow.commit()
            return entry

    def replace_entry(self, entry_id: UUID, item: NewLibraryItem) -> LibraryEntry:
        """Substitute the entry's identity with ``item``; tracking state is kept."""

        with self._uow_factory() as uow:
            repository = uow.repositories.library
            entry = repository.get(entry_id)
            if entry is None:
                raise LibraryEntryNotFound(entry_id)
            if item.reference in entry.aliases:
                repository.remove_alias(entry, item.reference)
            elif item.reference != entry.reference:
                usage = repository.reference_in_use(item.reference)
                if usage is not None:
                    raise AliasConflict(item.reference, usage)
            entry.replace_identity(item)
            uow.commit()
            return entry


if TYPE_CHECKING:
    _mapping_store_check: MappingCatalog = SqlAlchemyMappingStore()
    _library_lookup_check: LibraryLookup = SqlAlchemyLibraryStore()
    _library_writer_check: LibraryWriter = SqlAlchemyLibraryStore()
