from __future__ import annotations

import json
from datetime import UTC, datetime

import httpx
import pytest

from casenotes.adapters.events import HttpTopicPublisher, HttpWorkQueue, LoggingTelemetry
from casenotes.config.events import EventBusConfig
from casenotes.domain.events import DomainEvent
from tests.helpers.http import make_client_factory, resilience_config

TOPIC_URL = "http://bus.test/topic"
QUEUE_URL = "http://bus.test/queue"


def _config(batch_size: int = 10) -> EventBusConfig:
    return EventBusConfig(
        topic_url=TOPIC_URL,
        queue_url=QUEUE_URL,
        resilience=resilience_config("event-bus"),
        batch_size=batch_size,
    )


def _event(index: int = 0) -> DomainEvent:
    return DomainEvent(
        occurred_at=datetime(2024, 6, 1, 12, 0, tzinfo=UTC),
        event_type="case-notes.alerts.reconciliation",
        description="Reconcile Alert Case Notes",
        additional_information={"personIdentifier": f"A{index:04d}AA"},
    )


def test_topic_publisher_posts_notification() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(202)

    HttpTopicPublisher(config=_config(), client_factory=make_client_factory(handler)).publish(
        _event()
    )

    (request,) = requests
    assert str(request.url) == TOPIC_URL
    body = json.loads(request.content)
    assert body["MessageAttributes"]["eventType"]["Value"] == "case-notes.alerts.reconciliation"


def test_topic_publisher_raises_on_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        del request
        return httpx.Response(500)

    publisher = HttpTopicPublisher(config=_config(), client_factory=make_client_factory(handler))

    with pytest.raises(httpx.HTTPStatusError):
        publisher.publish(_event())


def test_work_queue_sends_one_request_per_batch() -> None:
    bodies: list[list[dict[str, object]]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(200)

    queue = HttpWorkQueue(config=_config(), client_factory=make_client_factory(handler))
    queue.send_batch([_event(index) for index in range(3)])
    queue.send_batch([])

    (body,) = bodies
    assert len(body) == 3


def test_work_queue_rejects_oversized_batches() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError(f"unexpected request {request.url}")

    queue = HttpWorkQueue(config=_config(batch_size=2), client_factory=make_client_factory(handler))

    with pytest.raises(ValueError, match="exceeds limit"):
        queue.send_batch([_event(index) for index in range(3)])


def test_logging_telemetry_writes_structured_line(caplog: pytest.LogCaptureFixture) -> None:
    telemetry = LoggingTelemetry()

    with caplog.at_level("INFO", logger="casenotes.telemetry"):
        telemetry.track_event("CaseNoteSynced", {"personIdentifier": "A1234AA", "id": "abc"})

    (record,) = caplog.records
    assert record.name == "casenotes.telemetry"
    assert record.getMessage() == 'CaseNoteSynced {"id": "abc", "personIdentifier": "A1234AA"}'
