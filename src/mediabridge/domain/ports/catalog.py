"""Ports for the per-provider search and info capabilities."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from mediabridge.domain.model import MediaCategory, MediaInfo, SearchPage


@runtime_checkable
class ProviderSearch(Protocol):
    """Search a provider by free-text title.

    Implementations raise ``SearchFailed`` on network/provider errors.
    """

    def search(self, title: str, provider: str, *, page: int = 1) -> SearchPage: ...


@runtime_checkable
class ProviderInfo(Protocol):
    """Fetch full media info for a provider-native id.

    Implementations raise ``MediaInfoNotFound`` when the id cannot be loaded.
    """

    def get_info(
        self,
        provider: str,
        native_id: str,
        media_type: MediaCategory | None = None,
    ) -> MediaInfo: ...


__all__ = ["ProviderInfo", "ProviderSearch"]
