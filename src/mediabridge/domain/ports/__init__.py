"""Domain port definitions for adapters."""

from __future__ import annotations

from .catalog import ProviderInfo, ProviderSearch
from .persistence import (
    AliasConflict,
    LibraryEntryNotFound,
    LibraryLookup,
    LibraryWriter,
    MappingCatalog,
    MappingNotFound,
    MappingStore,
)
from .unit_of_work import (
    LibraryRepository,
    MediaRepositories,
    MediaUnitOfWork,
    ProviderMappingRepository,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "AliasConflict",
    "LibraryEntryNotFound",
    "LibraryLookup",
    "LibraryRepository",
    "LibraryWriter",
    "MappingCatalog",
    "MappingNotFound",
    "MappingStore",
    "MediaRepositories",
    "MediaUnitOfWork",
    "ProviderInfo",
    "ProviderMappingRepository",
    "ProviderSearch",
    "RepositoryCollection",
    "UnitOfWork",
]
