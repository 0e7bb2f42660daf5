from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.pool import StaticPool

from mediabridge.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, shutdown, startup
from mediabridge.domain.model import MediaCategory
from mediabridge.domain.resolution import (
    MatchPolicy,
    ProviderRankingTable,
    RankedProvider,
    ResolutionCache,
    Resolver,
)
from tests.helpers.fakes import FakeCatalog, InMemoryLibrary, InMemoryMappingStore, RecordingSink

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path


@pytest.fixture(autouse=True)
def isolated_data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    data_dir = tmp_path / "data"
    monkeypatch.setenv("MEDIABRIDGE_DATA_DIR", str(data_dir))
    return data_dir


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    # one shared connection so the mapping writer thread sees the same database
    engine = create_engine(
        "sqlite+pysqlite://",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyUnitOfWork:
        return SqlAlchemyUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()


@pytest.fixture
def ranking() -> ProviderRankingTable:
    return ProviderRankingTable(
        {
            MediaCategory.ANIME: [
                RankedProvider("hianime", "HiAnime"),
                RankedProvider("animepahe", "AnimePahe"),
                RankedProvider("kickassanime", "KickAssAnime", working=False),
                RankedProvider("animekai", "AnimeKai"),
            ],
            MediaCategory.MOVIE: [
                RankedProvider("flixhq", "FlixHQ"),
                RankedProvider("sflix", "SFlix", working=False),
                RankedProvider("goku", "Goku"),
            ],
        }
    )


@pytest.fixture
def policy() -> MatchPolicy:
    return MatchPolicy()


@pytest.fixture
def catalog() -> FakeCatalog:
    return FakeCatalog()


@pytest.fixture
def mapping_store() -> InMemoryMappingStore:
    return InMemoryMappingStore()


@pytest.fixture
def library() -> InMemoryLibrary:
    return InMemoryLibrary()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def resolver(
    catalog: FakeCatalog,
    ranking: ProviderRankingTable,
    mapping_store: InMemoryMappingStore,
    sink: RecordingSink,
    policy: MatchPolicy,
) -> Resolver:
    return Resolver(
        search=catalog,
        info=catalog,
        ranking=ranking,
        mappings=mapping_store,
        cache=ResolutionCache(),
        writer=sink,
        policy=policy,
    )
