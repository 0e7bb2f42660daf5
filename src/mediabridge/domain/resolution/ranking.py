"""Per-category provider ranking with working/broken flags."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from mediabridge.domain.model import MediaCategory

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from mediabridge.config.providers import ProviderRankingConfig

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RankedProvider:
    name: str
    display_name: str
    working: bool = True


class UnknownProvider(LookupError):
    def __init__(self, provider: str) -> None:
        super().__init__(f"Provider {provider!r} is not in the ranking table")
        self.provider = provider


class ProviderRankingTable:
    """Ordered providers per media category.

    The table is fixed once built. Broken providers stay listed (so they can be
    shown) but never appear in ``primary_provider`` or ``fallback_chain``.
    """

    def __init__(self, categories: Mapping[MediaCategory, Iterable[RankedProvider]]) -> None:
        self._categories: dict[MediaCategory, tuple[RankedProvider, ...]] = {
            category: tuple(providers) for category, providers in categories.items()
        }

    @classmethod
    def from_config(cls, config: ProviderRankingConfig) -> ProviderRankingTable:
        return cls(
            {
                category: [
                    RankedProvider(entry.name, entry.display_name, working=entry.working)
                    for entry in entries
                ]
                for category, entries in config.categories.items()
            }
        )

    @property
    def categories(self) -> tuple[MediaCategory, ...]:
        return tuple(self._categories)

    def providers(self, category: MediaCategory) -> tuple[RankedProvider, ...]:
        return self._categories.get(category, ())

    def working_providers(self, category: MediaCategory) -> tuple[str, ...]:
        return tuple(provider.name for provider in self.providers(category) if provider.working)

    def primary_provider(self, category: MediaCategory) -> str | None:
        """First working provider for ``category``, or ``None``."""

        working = self.working_providers(category)
        return working[0] if working else None

    def fallback_chain(
        self,
        category: MediaCategory,
        *,
        preferred: str | None = None,
    ) -> tuple[str, ...]:
        """Working providers in rank order, with ``preferred`` moved to the front.

        A preferred provider that is broken or not ranked for ``category`` is
        ignored.
        """

        working = self.working_providers(category)
        if preferred is None or preferred not in working:
            if preferred is not None:
                log.debug(f"Not promoting {preferred!r}: not a working {category} provider")
            return working
        return (preferred, *(name for name in working if name != preferred))

    def category_of(self, provider: str) -> MediaCategory:
        for category, providers in self._categories.items():
            if any(entry.name == provider for entry in providers):
                return category
        raise UnknownProvider(provider)

    def is_working(self, provider: str) -> bool:
        return any(
            entry.name == provider and entry.working
            for providers in self._categories.values()
            for entry in providers
        )

    def is_known(self, provider: str) -> bool:
        return any(
            entry.name == provider
            for providers in self._categories.values()
            for entry in providers
        )

    def display_name(self, provider: str) -> str:
        for providers in self._categories.values():
            for entry in providers:
                if entry.name == provider:
                    return entry.display_name
        return provider
