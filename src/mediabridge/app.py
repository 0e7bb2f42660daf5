"""Application orchestration entry points."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from mediabridge.adapters.catalog import CatalogClient, segments_from_ranking
from mediabridge.adapters.sqlalchemy import (
    SqlAlchemyLibraryStore,
    SqlAlchemyMappingStore,
    startup,
)
from mediabridge.adapters.sqlalchemy.unit_of_work import is_started
from mediabridge.config import (
    get_catalog_config,
    get_provider_ranking_config,
    get_resolution_config,
)
from mediabridge.domain.model import Reference
from mediabridge.domain.resolution import (
    DisambiguationWorkflow,
    MappingWriter,
    MatchPolicy,
    ProviderRankingTable,
    ResolutionCache,
    ResolutionRequest,
    Resolver,
)

if TYPE_CHECKING:
    from types import TracebackType

    from mediabridge.config import ProviderRankingConfig, ResolutionConfig
    from mediabridge.domain.model import (
        LibraryEntry,
        MediaCategory,
        NewLibraryItem,
        ProviderMapping,
    )
    from mediabridge.domain.ports import (
        LibraryLookup,
        LibraryWriter,
        MappingCatalog,
        ProviderInfo,
        ProviderSearch,
    )
    from mediabridge.domain.resolution import ConfirmationPrompt, LibraryConflict, Resolution

log = getLogger(__name__)


@dataclass(slots=True)
class MediaBridge:
    """Wired-up resolver, disambiguation workflow and stores."""

    ranking: ProviderRankingTable
    resolver: Resolver
    workflow: DisambiguationWorkflow
    mappings: MappingCatalog
    writer: MappingWriter

    def close(self) -> None:
        self.writer.close()

    def __enter__(self) -> MediaBridge:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()


def build_media_bridge(
    *,
    catalog: ProviderSearch | None = None,
    info: ProviderInfo | None = None,
    mappings: MappingCatalog | None = None,
    library: LibraryWriter | None = None,
    lookup: LibraryLookup | None = None,
    ranking_config: ProviderRankingConfig | None = None,
    resolution_config: ResolutionConfig | None = None,
) -> MediaBridge:
    """Build the application from configuration, filling in default adapters."""

    ranking = ProviderRankingTable.from_config(ranking_config or get_provider_ranking_config())
    policy = MatchPolicy.from_config(resolution_config or get_resolution_config())

    if mappings is None:
        mappings = open_mapping_store()
    if library is None or lookup is None:
        if not is_started():
            startup()
        store = SqlAlchemyLibraryStore()
        library = library or store
        lookup = lookup or store

    if catalog is None:
        client = CatalogClient(
            config=get_catalog_config(),
            segments=segments_from_ranking(ranking),
        )
        catalog = client
        info = info or client

    cache = ResolutionCache()
    writer = MappingWriter(mappings)
    resolver = Resolver(
        search=catalog,
        info=info,
        ranking=ranking,
        mappings=mappings,
        cache=cache,
        writer=writer,
        policy=policy,
    )
    workflow = DisambiguationWorkflow(
        mappings=mappings,
        cache=cache,
        library=library,
        lookup=lookup,
        policy=policy,
    )
    return MediaBridge(
        ranking=ranking,
        resolver=resolver,
        workflow=workflow,
        mappings=mappings,
        writer=writer,
    )


def resolve_reference(
    bridge: MediaBridge,
    reference: str | Reference,
    *,
    provider: str | None = None,
    title: str | None = None,
    media_type: MediaCategory | None = None,
    fetch_info: bool = False,
    allow_fallback: bool = False,
) -> tuple[Resolution, ConfirmationPrompt | None]:
    """Resolve ``reference`` and return the confirmation prompt it needs, if any."""

    resolution = bridge.resolver.resolve(
        ResolutionRequest(
            reference=Reference.parse(reference),
            provider=provider,
            title=title,
            media_type=media_type,
            fetch_info=fetch_info,
            allow_fallback=allow_fallback,
        )
    )
    prompt = bridge.workflow.prompt_for(resolution)
    if prompt is not None:
        log.info(
            f"{resolution.reference} -> {resolution.provider}:{resolution.native_id} "
            f"needs confirmation (confidence {resolution.confidence:.2f})"
        )
    return resolution, prompt


def open_mapping_store() -> SqlAlchemyMappingStore:
    """Mapping store on the configured database, starting the adapter if needed."""

    if not is_started():
        startup()
    return SqlAlchemyMappingStore()


def verify_mapping(
    reference: str | Reference,
    provider: str,
    *,
    native_id: str,
    title: str,
    user_id: str,
    bridge: MediaBridge | None = None,
) -> ProviderMapping:
    """Store a human-confirmed mapping, refreshing the bridge cache when given."""

    workflow = (
        bridge.workflow
        if bridge is not None
        else DisambiguationWorkflow(mappings=open_mapping_store())
    )
    return workflow.verify(
        Reference.parse(reference),
        provider,
        native_id=native_id,
        title=title,
        user_id=user_id,
    )


def add_to_library(
    bridge: MediaBridge,
    user_id: str,
    item: NewLibraryItem,
) -> LibraryEntry | tuple[LibraryConflict, ...]:
    return bridge.workflow.add_to_library(user_id, item)
