"""Public interface for the event bus adapter."""

from __future__ import annotations

from .publisher import HttpTopicPublisher, HttpWorkQueue
from .schema import DomainEventPayload, Notification
from .telemetry import LoggingTelemetry
from .translator import from_payload, parse_notification, to_notification, to_payload

__all__ = [
    "DomainEventPayload",
    "HttpTopicPublisher",
    "HttpWorkQueue",
    "LoggingTelemetry",
    "Notification",
    "from_payload",
    "parse_notification",
    "to_notification",
    "to_payload",
]
