"""SQLAlchemy mapping metadata for provider mappings and the library."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from typing import Final

from sqlalchemy import (
    Column,
    DateTime,
    Dialect,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)

from mediabridge.domain.model import (
    LibraryEntry,
    LibraryStatus,
    MediaCategory,
    ProviderMapping,
    Reference,
)

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]
REFERENCE_LENGTH: Final = 255


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class ReferenceType(TypeDecorator[Reference]):
    """Stores a ``Reference`` as its ``source:id`` string."""

    impl = String(REFERENCE_LENGTH)
    cache_ok = True

    def process_bind_param(self, value: Reference | str | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return str(Reference.parse(value))

    def process_result_value(self, value: str | None, dialect: Dialect) -> Reference | None:
        _ = dialect
        if value is None:
            return None
        return Reference.parse(value)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

provider_mapping_table = Table(
    "provider_mapping",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True),
    Column("reference", ReferenceType(), nullable=False),
    Column("provider", String(64), nullable=False),
    Column("provider_native_id", String(REFERENCE_LENGTH), nullable=False),
    Column("provider_display_title", String(512), nullable=False),
    Column("confidence", Float, nullable=False),
    Column("verified_by", String(128), nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=False),
    UniqueConstraint("reference", "provider"),
    Index(None, "provider", "confidence"),
)

library_entry_table = Table(
    "library_entry",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True),
    Column("user_id", String(128), nullable=False, index=True),
    Column("reference", ReferenceType(), nullable=False, index=True),
    Column("title", String(512), nullable=False),
    Column("media_type", Enum(MediaCategory, native_enum=False), nullable=True),
    Column("status", Enum(LibraryStatus, native_enum=False), nullable=False),
    Column("image_url", String(1024), nullable=True),
    Column("total", Integer, nullable=True),
    Column("progress", Integer, nullable=False, default=0),
    Column("rating", Float, nullable=True),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime(), nullable=False),
)

library_alias_table = Table(
    "library_alias",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "entry_id",
        UUIDColumnType,
        ForeignKey("library_entry.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("reference", ReferenceType(), nullable=False, unique=True),
    Column("created_at", UTCDateTime(), nullable=False),
)


def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    if mapper_registry.mappers:
        return mapper_registry

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(ProviderMapping, provider_mapping_table)
    mapper_registry.map_imperatively(LibraryEntry, library_entry_table)

    return mapper_registry
