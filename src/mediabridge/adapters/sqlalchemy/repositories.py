"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, cast

from sqlalchemy import delete, func, insert, select, update

from mediabridge.adapters.sqlalchemy.mappings import (
    library_alias_table,
    library_entry_table,
    provider_mapping_table,
)
from mediabridge.domain.model import LibraryEntry, ProviderMapping

if TYPE_CHECKING:
    import uuid
    from collections.abc import Sequence

    from sqlalchemy.engine import CursorResult
    from sqlalchemy.orm import Session

    from mediabridge.domain.model import Reference


class SqlAlchemyProviderMappingRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, mapping: ProviderMapping) -> None:
        self.session.add(mapping)

    def get(self, reference: Reference, provider: str) -> ProviderMapping | None:
        stmt = (
            select(ProviderMapping)
            .where(provider_mapping_table.c.reference == reference)
            .where(provider_mapping_table.c.provider == provider)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def remove(self, mapping: ProviderMapping) -> None:
        self.session.delete(mapping)

    def update_unverified(self, mapping: ProviderMapping) -> bool:
        stmt = (
            update(provider_mapping_table)
            .where(provider_mapping_table.c.reference == mapping.reference)
            .where(provider_mapping_table.c.provider == mapping.provider)
            .where(provider_mapping_table.c.verified_by.is_(None))
            .values(
                provider_native_id=mapping.provider_native_id,
                provider_display_title=mapping.provider_display_title,
                confidence=mapping.confidence,
                updated_at=datetime.now(tz=UTC),
            )
        )
        result = cast("CursorResult[object]", self.session.execute(stmt))
        return result.rowcount > 0

    def list_for_reference(self, reference: Reference) -> Sequence[ProviderMapping]:
        stmt = (
            select(ProviderMapping)
            .where(provider_mapping_table.c.reference == reference)
            .order_by(provider_mapping_table.c.confidence.desc(), provider_mapping_table.c.provider)
        )
        return self.session.execute(stmt).scalars().all()

    def list_for_provider(
        self, provider: str, *, limit: int, offset: int
    ) -> Sequence[ProviderMapping]:
        stmt = (
            select(ProviderMapping)
            .where(provider_mapping_table.c.provider == provider)
            .order_by(provider_mapping_table.c.updated_at.desc())
            .limit(limit)
            .offset(offset)
        )
        return self.session.execute(stmt).scalars().all()

    def count_for_provider(self, provider: str) -> int:
        stmt = (
            select(func.count())
            .select_from(provider_mapping_table)
            .where(provider_mapping_table.c.provider == provider)
        )
        return cast(int, self.session.execute(stmt).scalar_one())


class SqlAlchemyLibraryRepository:
    """Library entries plus their alias references.

    Aliases live in their own table and are attached to ``LibraryEntry.aliases``
    whenever an entry is loaded.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entry: LibraryEntry) -> None:
        self.session.add(entry)

    def get(self, entry_id: uuid.UUID) -> LibraryEntry | None:
        entry = self.session.get(LibraryEntry, entry_id)
        return self._with_aliases(entry) if entry is not None else None

    def list_for_user(self, user_id: str) -> Sequence[LibraryEntry]:
        stmt = (
            select(LibraryEntry)
            .where(library_entry_table.c.user_id == user_id)
            .order_by(library_entry_table.c.created_at)
        )
        return [self._with_aliases(entry) for entry in self.session.execute(stmt).scalars()]

    def find_by_reference(self, reference: Reference) -> LibraryEntry | None:
        stmt = select(LibraryEntry).where(library_entry_table.c.reference == reference).limit(1)
        entry = self.session.execute(stmt).scalar_one_or_none()
        if entry is None:
            alias_stmt = select(library_alias_table.c.entry_id).where(
                library_alias_table.c.reference == reference
            )
            entry_id = self.session.execute(alias_stmt).scalar_one_or_none()
            if entry_id is None:
                return None
            entry = self.session.get(LibraryEntry, entry_id)
        return self._with_aliases(entry) if entry is not None else None

    def reference_in_use(self, reference: Reference) -> str | None:
        primary = select(library_entry_table.c.id).where(
            library_entry_table.c.reference == reference
        )
        if self.session.execute(primary.limit(1)).first() is not None:
            return "primary"
        alias = select(library_alias_table.c.id).where(library_alias_table.c.reference == reference)
        if self.session.execute(alias).first() is not None:
            return "alias"
        return None

    def add_alias(self, entry: LibraryEntry, reference: Reference) -> None:
        self.session.execute(
            insert(library_alias_table).values(
                entry_id=entry.id,
                reference=reference,
                created_at=datetime.now(tz=UTC),
            )
        )
        entry.aliases = (*entry.aliases, reference)
        entry.updated_at = datetime.now(tz=UTC)

    def remove_alias(self, entry: LibraryEntry, reference: Reference) -> None:
        self.session.execute(
            delete(library_alias_table)
            .where(library_alias_table.c.entry_id == entry.id)
            .where(library_alias_table.c.reference == reference)
        )
        entry.aliases = tuple(alias for alias in entry.aliases if alias != reference)

    def _with_aliases(self, entry: LibraryEntry) -> LibraryEntry:
        stmt = (
            select(library_alias_table.c.reference)
            .where(library_alias_table.c.entry_id == entry.id)
            .order_by(library_alias_table.c.id)
        )
        entry.aliases = tuple(self.session.execute(stmt).scalars())
        return entry
