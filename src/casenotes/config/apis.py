"""Upstream API configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import require_env_var
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy

API_TIMEOUT_SECONDS = 20.0
AGENCY_SWITCH_CACHE_TTL_SECONDS = 300.0


@dataclass(frozen=True, slots=True)
class ApiConfig:
    """Holds the resilience settings for one upstream API."""

    resilience: ResilienceConfig


def _api_config(
    name: str,
    env_var: str,
    *,
    cache: CacheConfig | None = None,
    ratelimit: RateLimit | None = None,
) -> ApiConfig:
    return ApiConfig(
        resilience=ResilienceConfig(
            name=name,
            base_url=require_env_var(env_var),
            timeout_seconds=API_TIMEOUT_SECONDS,
            retry=RetryPolicy(),
            ratelimit=ratelimit,
            cache=cache,
            default_headers={"Accept": "application/json"},
        )
    )


def get_alerts_api_config() -> ApiConfig:
    return _api_config("alerts", "ALERTS_API_URL", ratelimit=RateLimit(10, 1.0))


def get_manage_users_api_config() -> ApiConfig:
    return _api_config("manage-users", "MANAGE_USERS_API_URL")


def get_prisoner_search_api_config() -> ApiConfig:
    return _api_config("prisoner-search", "PRISONER_SEARCH_API_URL")


def _is_switch_list(payload: object) -> bool:
    return isinstance(payload, list)


def get_prison_api_config() -> ApiConfig:
    # agency switches change rarely; the sqlite cache outlives each short-lived client
    return _api_config(
        "prison-api",
        "PRISON_API_URL",
        cache=CacheConfig(
            backend="sqlite",
            default_ttl_seconds=AGENCY_SWITCH_CACHE_TTL_SECONDS,
            should_cache=_is_switch_list,
        ),
    )
