"""Where mediabridge keeps its files.

Everything lives under one data directory: the mapping/library database, the
optional on-disk HTTP cache and an optional ``providers.toml`` that overrides
the built-in provider ranking.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

APP_DIR_NAME: Final[str] = "mediabridge"
DATA_DIR_ENV: Final[str] = "MEDIABRIDGE_DATA_DIR"
DATABASE_URI_ENV: Final[str] = "DATABASE_URI"

DEFAULT_DB_FILENAME: Final[str] = "mediabridge.db"
HTTP_CACHE_FILENAME: Final[str] = "http_cache.db"
RANKING_FILENAME: Final[str] = "providers.toml"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path
    database_filename: str = DEFAULT_DB_FILENAME
    http_cache_filename: str = HTTP_CACHE_FILENAME
    ranking_filename: str = RANKING_FILENAME

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def database_path(self, *, ensure: bool = True) -> Path:
        return self._path(self.database_filename, ensure=ensure)

    def http_cache_path(self, *, ensure: bool = True) -> Path:
        return self._path(self.http_cache_filename, ensure=ensure)

    def ranking_path(self) -> Path:
        """Location of the user's ranking override; the file need not exist."""

        return self._path(self.ranking_filename, ensure=False)

    def database_uri(self) -> str:
        return f"sqlite+pysqlite:///{self.database_path()}"

    def _path(self, filename: str, *, ensure: bool) -> Path:
        base = self.resolve_data_dir()
        if ensure:
            base.mkdir(parents=True, exist_ok=True)
        return base / filename


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def _default_data_dir() -> Path:
    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA")
        base_path = Path(base) if base else (Path.home() / "AppData" / "Local")
    else:
        base = os.getenv("XDG_DATA_HOME")
        base_path = Path(base) if base else (Path.home() / ".local" / "share")
    return (base_path / APP_DIR_NAME).expanduser().resolve()


def get_storage_config() -> StorageConfig:
    env_dir = os.getenv(DATA_DIR_ENV)
    return StorageConfig(data_dir=Path(env_dir) if env_dir else _default_data_dir())


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    env_uri = os.getenv(DATABASE_URI_ENV)
    if env_uri:
        return DatabaseConfig(uri=env_uri)
    return DatabaseConfig(uri=(storage or get_storage_config()).database_uri())
