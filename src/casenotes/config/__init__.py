"""Application configuration helpers."""

from __future__ import annotations

from .apis import (
    ApiConfig,
    get_alerts_api_config,
    get_manage_users_api_config,
    get_prison_api_config,
    get_prisoner_search_api_config,
)
from .env import env_flag, require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .events import EventBusConfig, get_event_bus_config
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .service import ServiceConfig, get_service_config
from .storage import (
    DatabaseConfig,
    StorageConfig,
    get_database_config,
    get_database_uri,
    get_storage_config,
)

__all__ = [
    "ApiConfig",
    "CacheConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "EventBusConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "ServiceConfig",
    "StorageConfig",
    "configure_logging",
    "env_flag",
    "get_alerts_api_config",
    "get_database_config",
    "get_database_uri",
    "get_event_bus_config",
    "get_manage_users_api_config",
    "get_prison_api_config",
    "get_prisoner_search_api_config",
    "get_service_config",
    "get_storage_config",
    "require_env_var",
    "require_env_vars",
]
