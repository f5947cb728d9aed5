"""Ports for outbound events and telemetry."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from casenotes.domain.events import DomainEvent


@runtime_checkable
class DomainEventPublisher(Protocol):
    """Publishes one domain event to the outbound topic."""

    def publish(self, event: DomainEvent) -> None: ...


@runtime_checkable
class WorkQueue(Protocol):
    """Sends batches of domain events to the inbound work queue."""

    def send_batch(self, events: Sequence[DomainEvent]) -> None: ...


@runtime_checkable
class Telemetry(Protocol):
    def track_event(self, name: str, properties: Mapping[str, str]) -> None: ...
