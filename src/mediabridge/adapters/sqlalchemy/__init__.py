"""SQLAlchemy adapter package for mediabridge."""

from __future__ import annotations

from .mappings import mapper_registry, start_mappers
from .migrations import upgrade_head
from .repositories import SqlAlchemyLibraryRepository, SqlAlchemyProviderMappingRepository
from .stores import SqlAlchemyLibraryStore, SqlAlchemyMappingStore
from .unit_of_work import SqlAlchemyUnitOfWork, StartupError, shutdown, startup

__all__ = [
    "SqlAlchemyLibraryRepository",
    "SqlAlchemyLibraryStore",
    "SqlAlchemyMappingStore",
    "SqlAlchemyProviderMappingRepository",
    "SqlAlchemyUnitOfWork",
    "StartupError",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
    "upgrade_head",
]
