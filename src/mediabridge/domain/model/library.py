"""Library-side records used by duplicate detection."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from mediabridge.domain.model.enums import LibraryStatus

if TYPE_CHECKING:
    from mediabridge.domain.model.enums import MediaCategory
    from mediabridge.domain.model.reference import Reference


@dataclass(frozen=True, slots=True)
class LibraryTitle:
    """Projection returned by the library lookup: ``(entry_id, title, type, status)``."""

    entry_id: UUID
    title: str
    media_type: MediaCategory | None
    status: LibraryStatus


@dataclass(frozen=True, slots=True, kw_only=True)
class NewLibraryItem:
    """An item the user is about to add."""

    reference: Reference
    title: str
    media_type: MediaCategory | None = None
    status: LibraryStatus = LibraryStatus.PLANNING
    image_url: str | None = None
    total: int | None = None


@dataclass(eq=False, kw_only=True)
class LibraryEntry:
    user_id: str
    reference: Reference
    title: str
    media_type: MediaCategory | None = None
    status: LibraryStatus = LibraryStatus.PLANNING
    image_url: str | None = None
    total: int | None = None
    progress: int = 0
    rating: float | None = None
    aliases: tuple[Reference, ...] = ()
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))

    def as_title(self) -> LibraryTitle:
        return LibraryTitle(
            entry_id=self.id,
            title=self.title,
            media_type=self.media_type,
            status=self.status,
        )

    def replace_identity(self, item: NewLibraryItem) -> None:
        """Take over ``item``'s identity, keeping status, progress and rating."""

        self.reference = item.reference
        self.title = item.title
        self.media_type = item.media_type
        self.image_url = item.image_url
        self.total = item.total
        self.updated_at = datetime.now(tz=UTC)

    @classmethod
    def from_item(cls, user_id: str, item: NewLibraryItem) -> LibraryEntry:
        return cls(
            user_id=user_id,
            reference=item.reference,
            title=item.title,
            media_type=item.media_type,
            status=item.status,
            image_url=item.image_url,
            total=item.total,
        )
