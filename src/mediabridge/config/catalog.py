"""Provider catalog API configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from mediabridge import __version__

from .env import require_env_vars
from .http_resilience import (
    CacheConfig,
    RateLimit,
    ResilienceConfig,
    RetryPolicy,
    ShouldCacheHook,
)

CATALOG_TIMEOUT_SECONDS = 15.0
CATALOG_USER_AGENT = f"mediabridge/{__version__}"


@dataclass(frozen=True, slots=True)
class CatalogConfig:
    """Holds the provider catalog (search/info) API configuration."""

    resilience: ResilienceConfig


def get_catalog_config(
    *,
    resilience: ResilienceConfig | None = None,
    cache_predicate: ShouldCacheHook | None = None,
) -> CatalogConfig:
    values = require_env_vars(("CATALOG_BASE_URL",))
    base_url = values["CATALOG_BASE_URL"].rstrip("/") + "/"
    return CatalogConfig(
        resilience=resilience
        or ResilienceConfig(
            name="catalog",
            base_url=base_url,
            timeout_seconds=CATALOG_TIMEOUT_SECONDS,
            retry=RetryPolicy(total=2),
            ratelimit=RateLimit(max_calls=5, per_seconds=1.0),
            cache=CacheConfig(backend="memory", should_cache=cache_predicate),
            default_headers={"User-Agent": CATALOG_USER_AGENT},
        ),
    )
