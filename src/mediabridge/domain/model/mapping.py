"""Durable reference -> provider id mappings."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

if TYPE_CHECKING:
    from mediabridge.domain.model.reference import Reference


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(eq=False, kw_only=True)
class ProviderMapping:
    """Records that ``reference`` resolves to ``provider_native_id`` on ``provider``.

    At most one mapping exists per ``(reference, provider)``; writes for the same
    pair overwrite. ``verified_by`` is ``None`` for auto-detected mappings and
    holds the confirming user's id otherwise.
    """

    reference: Reference
    provider: str
    provider_native_id: str
    provider_display_title: str
    confidence: float
    verified_by: str | None = None
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be within [0, 1], got {self.confidence}")

    @property
    def is_verified(self) -> bool:
        return self.verified_by is not None

    @property
    def key(self) -> tuple[str, str]:
        return str(self.reference), self.provider

    @classmethod
    def auto(
        cls,
        reference: Reference,
        provider: str,
        *,
        native_id: str,
        title: str,
        confidence: float,
    ) -> ProviderMapping:
        return cls(
            reference=reference,
            provider=provider,
            provider_native_id=native_id,
            provider_display_title=title,
            confidence=confidence,
        )

    @classmethod
    def verified(
        cls,
        reference: Reference,
        provider: str,
        *,
        native_id: str,
        title: str,
        user_id: str,
    ) -> ProviderMapping:
        return cls(
            reference=reference,
            provider=provider,
            provider_native_id=native_id,
            provider_display_title=title,
            confidence=1.0,
            verified_by=user_id,
        )
