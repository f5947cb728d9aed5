"""HTTP event bus: topic publication and the reconciliation work queue."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from casenotes.adapters.http_resilience import ResilientClient
from casenotes.config.events import get_event_bus_config

from .translator import to_notification

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from casenotes.config.events import EventBusConfig
    from casenotes.domain.events import DomainEvent
    from casenotes.domain.ports.events import DomainEventPublisher, WorkQueue

log = getLogger(__name__)


def _notification_body(event: DomainEvent) -> dict[str, object]:
    return to_notification(event).model_dump(mode="json", by_alias=True)


@dataclass(slots=True)
class HttpTopicPublisher:
    """POSTs each domain event to the outbound topic endpoint."""

    config: EventBusConfig = field(default_factory=get_event_bus_config)
    client_factory: Callable[..., ResilientClient] = field(default=ResilientClient)

    def publish(self, event: DomainEvent) -> None:
        asyncio.run(self._publish_async(event))

    async def _publish_async(self, event: DomainEvent) -> None:
        async with self.client_factory(self.config.resilience) as client:
            response = await client.post(self.config.topic_url, json=_notification_body(event))
        response.raise_for_status()
        log.debug("Published %s", event.event_type)


@dataclass(slots=True)
class HttpWorkQueue:
    """Sends events to the inbound queue endpoint, at most ``batch_size`` per request.

    Retries come from the resilience policy; once exhausted the error propagates.
    """

    config: EventBusConfig = field(default_factory=get_event_bus_config)
    client_factory: Callable[..., ResilientClient] = field(default=ResilientClient)

    def send_batch(self, events: Sequence[DomainEvent]) -> None:
        if not events:
            return
        if len(events) > self.config.batch_size:
            msg = f"Batch of {len(events)} exceeds limit of {self.config.batch_size}"
            raise ValueError(msg)
        asyncio.run(self._send_batch_async(events))

    async def _send_batch_async(self, events: Sequence[DomainEvent]) -> None:
        body = [_notification_body(event) for event in events]
        async with self.client_factory(self.config.resilience) as client:
            response = await client.post(self.config.queue_url, json=body)
        response.raise_for_status()
        log.debug("Queued batch of %s events", len(events))


if TYPE_CHECKING:
    _publisher_check: DomainEventPublisher = HttpTopicPublisher()
    _queue_check: WorkQueue = HttpWorkQueue()
