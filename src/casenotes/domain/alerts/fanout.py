"""Fan out per-person reconciliation triggers onto the work queue."""

from __future__ import annotations

from datetime import datetime
from itertools import batched
from logging import getLogger
from typing import TYPE_CHECKING, Final

from casenotes.domain.events import RECONCILE_ALERTS, DomainEvent, PersonReference

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import date

    from casenotes.domain.ports.clients import AlertClient
    from casenotes.domain.ports.events import WorkQueue

log = getLogger(__name__)

BATCH_SIZE: Final[int] = 10


def reconciliation_event(
    person_identifier: str, from_date: date, to_date: date, *, occurred_at: datetime
) -> DomainEvent:
    return DomainEvent(
        occurred_at=occurred_at,
        event_type=RECONCILE_ALERTS,
        description="Reconcile Alert Case Notes",
        additional_information={
            "personIdentifier": person_identifier,
            "from": from_date.isoformat(),
            "to": to_date.isoformat(),
        },
        person_reference=PersonReference.with_identifier(person_identifier),
    )


class ReconciliationEventGenerator:
    def __init__(
        self,
        *,
        alerts: AlertClient,
        queue: WorkQueue,
        batch_size: int = BATCH_SIZE,
        clock: Callable[[], datetime] = lambda: datetime.now().astimezone(),
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be positive")
        self._alerts = alerts
        self._queue = queue
        self._batch_size = batch_size
        self._clock = clock

    def generate(self, from_date: date, to_date: date) -> int:
        """Queue one trigger per person with alert activity; returns how many were sent."""

        identifiers = self._alerts.person_identifiers_of_interest(from_date, to_date)
        occurred_at = self._clock()
        events = [
            reconciliation_event(identifier, from_date, to_date, occurred_at=occurred_at)
            for identifier in identifiers
        ]
        for batch in batched(events, self._batch_size):
            self._queue.send_batch(batch)
        log.info("Queued %s alert reconciliation events", len(events))
        return len(events)
