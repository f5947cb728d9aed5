"""Service-level settings and feature flags."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .env import env_flag

DEFAULT_SERVICE_BASE_URL = "http://localhost:8080"


@dataclass(frozen=True, slots=True)
class ServiceConfig:
    """Feature flags controlling side effects of the reconciliation subsystem."""

    base_url: str = DEFAULT_SERVICE_BASE_URL
    # when off, reconciliation/verification only report missing notes
    action_missing_case_notes: bool = False
    # when off, outbound person events are recorded as telemetry instead of published
    publish_person_events: bool = False


def get_service_config() -> ServiceConfig:
    return ServiceConfig(
        base_url=os.getenv("SERVICE_BASE_URL") or DEFAULT_SERVICE_BASE_URL,
        action_missing_case_notes=env_flag("ACTION_MISSING_CASE_NOTES"),
        publish_person_events=env_flag("PUBLISH_PERSON_EVENTS"),
    )
