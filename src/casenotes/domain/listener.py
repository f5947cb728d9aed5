"""Dispatch inbound domain events to the workflow that handles them."""

from __future__ import annotations

from datetime import date
from logging import getLogger
from typing import TYPE_CHECKING

from casenotes.domain.errors import CaseNoteValidationError
from casenotes.domain.events import (
    ALERT_CREATED,
    ALERT_INACTIVE,
    PRISONER_MERGED,
    RECONCILE_ALERTS,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from casenotes.domain.alerts import AlertCaseNoteHandler, AlertCaseNoteReconciliation
    from casenotes.domain.events import DomainEvent
    from casenotes.domain.merge import CaseNoteMerge

log = getLogger(__name__)


def _required(event: DomainEvent, key: str) -> str:
    value = event.additional_information.get(key)
    if value is None or value == "":
        raise CaseNoteValidationError(f"{event.event_type} event is missing {key}")
    return str(value)


def _date(event: DomainEvent, key: str) -> date:
    value = event.additional_information.get(key)
    if isinstance(value, date):
        return value
    return date.fromisoformat(_required(event, key))


class DomainEventListener:
    """Routes events by type; unknown types are logged and ignored."""

    def __init__(
        self,
        *,
        merge: CaseNoteMerge,
        reconciliation: AlertCaseNoteReconciliation,
        alert_handler: AlertCaseNoteHandler,
    ) -> None:
        self._merge = merge
        self._reconciliation = reconciliation
        self._alert_handler = alert_handler

    def handle(self, event: DomainEvent) -> bool:
        """Returns whether the event type was recognised."""

        handlers: dict[str, Callable[[DomainEvent], object]] = {
            PRISONER_MERGED: self._on_merge,
            RECONCILE_ALERTS: self._on_reconcile,
            ALERT_CREATED: self._alert_handler.handle_alert_created,
            ALERT_INACTIVE: self._alert_handler.handle_alert_inactive,
        }
        handler = handlers.get(event.event_type)
        if handler is None:
            log.debug("Ignoring event %s", event.event_type)
            return False
        handler(event)
        return True

    def _on_merge(self, event: DomainEvent) -> None:
        self._merge.merge(_required(event, "nomsNumber"), _required(event, "removedNomsNumber"))

    def _on_reconcile(self, event: DomainEvent) -> None:
        self._reconciliation.reconcile(
            _required(event, "personIdentifier"),
            _date(event, "from"),
            _date(event, "to"),
        )
