"""Event bus configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import require_env_vars
from .http_resilience import ResilienceConfig, RetryPolicy

DEFAULT_TRIGGER_BATCH_SIZE = 10


@dataclass(frozen=True, slots=True)
class EventBusConfig:
    """Endpoints for outbound domain events and the reconciliation work queue."""

    topic_url: str
    queue_url: str
    resilience: ResilienceConfig
    batch_size: int = DEFAULT_TRIGGER_BATCH_SIZE


def get_event_bus_config() -> EventBusConfig:
    values = require_env_vars(("EVENT_TOPIC_URL", "EVENT_QUEUE_URL"))
    return EventBusConfig(
        topic_url=values["EVENT_TOPIC_URL"],
        queue_url=values["EVENT_QUEUE_URL"],
        resilience=ResilienceConfig(
            name="event-bus",
            retry=RetryPolicy(total=5, backoff_factor=0.5),
            default_headers={"Content-Type": "application/json"},
        ),
    )
