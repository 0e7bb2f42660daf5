"""Application configuration helpers."""

from __future__ import annotations

from .catalog import CatalogConfig, get_catalog_config
from .env import require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .providers import (
    DEFAULT_PROVIDER_RANKING,
    ProviderEntryConfig,
    ProviderRankingConfig,
    get_provider_ranking_config,
)
from .resolution import ResolutionConfig, get_resolution_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "DEFAULT_PROVIDER_RANKING",
    "CacheConfig",
    "CatalogConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "MissingConfigurationError",
    "ProviderEntryConfig",
    "ProviderRankingConfig",
    "RateLimit",
    "ResilienceConfig",
    "ResolutionConfig",
    "RetryPolicy",
    "StorageConfig",
    "configure_logging",
    "get_catalog_config",
    "get_database_config",
    "get_provider_ranking_config",
    "get_resolution_config",
    "get_storage_config",
    "require_env_var",
    "require_env_vars",
]
