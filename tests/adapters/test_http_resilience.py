from __future__ import annotations

import asyncio
from datetime import UTC, datetime

import httpx
import pytest

from casenotes.adapters.events import HttpWorkQueue
from casenotes.adapters.http_resilience import raise_unless_found
from casenotes.config.events import EventBusConfig
from casenotes.domain.events import DomainEvent
from tests.helpers.http import Handler, make_client_factory, resilience_config


class CountingHandler:
    """Replays the scripted outcomes in order, repeating the last one."""

    def __init__(self, *outcomes: int | Exception) -> None:
        self.outcomes = list(outcomes)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        index = min(len(self.requests), len(self.outcomes)) - 1
        outcome = self.outcomes[index]
        if isinstance(outcome, Exception):
            raise outcome
        return httpx.Response(outcome, json={"status": outcome})


def _get(handler: Handler, *, retries: int = 3) -> httpx.Response:
    async def run() -> httpx.Response:
        factory = make_client_factory(handler)
        async with factory(resilience_config("retry", retries=retries)) as client:
            return await client.get("/resource")

    return asyncio.run(run())


def test_server_errors_are_retried_until_success() -> None:
    handler = CountingHandler(503, 503, 200)

    response = _get(handler)

    assert response.status_code == 200
    assert len(handler.requests) == 3


def test_client_errors_are_not_retried() -> None:
    handler = CountingHandler(400, 200)

    response = _get(handler)

    assert response.status_code == 400
    assert len(handler.requests) == 1
    with pytest.raises(httpx.HTTPStatusError):
        raise_unless_found(response)


def test_not_found_is_final_and_not_an_error() -> None:
    handler = CountingHandler(404)

    response = _get(handler)

    assert len(handler.requests) == 1
    assert raise_unless_found(response) is False


def test_transport_errors_are_retried() -> None:
    handler = CountingHandler(httpx.ConnectError("connection refused"), 200)

    response = _get(handler)

    assert response.status_code == 200
    assert len(handler.requests) == 2


def test_persistent_transport_errors_surface_after_retries() -> None:
    handler = CountingHandler(httpx.ConnectError("connection refused"))

    with pytest.raises(httpx.ConnectError):
        _get(handler, retries=2)

    assert len(handler.requests) == 3


def test_exhausted_server_errors_return_the_last_response() -> None:
    handler = CountingHandler(503)

    response = _get(handler, retries=2)

    assert response.status_code == 503
    assert len(handler.requests) == 3


def test_work_queue_raises_once_retries_are_exhausted() -> None:
    handler = CountingHandler(503)
    config = EventBusConfig(
        topic_url="http://bus.test/topic",
        queue_url="http://bus.test/queue",
        resilience=resilience_config("event-bus", retries=2),
    )
    queue = HttpWorkQueue(config=config, client_factory=make_client_factory(handler))
    event = DomainEvent(
        occurred_at=datetime(2024, 6, 1, tzinfo=UTC),
        event_type="case-notes.alerts.reconciliation",
        description="Reconcile Alert Case Notes",
        additional_information={"personIdentifier": "A1234AA"},
    )

    with pytest.raises(httpx.HTTPStatusError):
        queue.send_batch([event])

    assert len(handler.requests) == 3
    assert {str(request.url) for request in handler.requests} == {"http://bus.test/queue"}

