"""HTTP client for the alerts API."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from casenotes.adapters.http_resilience import ResilientClient, raise_unless_found
from casenotes.config.apis import get_alerts_api_config

from .schema import AlertPayload, CaseNoteAlertResponse, PersonIdentifiersResponse
from .translator import parse_alert, parse_case_note_alert

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import date
    from uuid import UUID

    from casenotes.config.http_resilience import ResilienceConfig
    from casenotes.domain.model import Alert, CaseNoteAlert
    from casenotes.domain.ports.clients import AlertClient

log = getLogger(__name__)


def _default_resilience_config() -> ResilienceConfig:
    return get_alerts_api_config().resilience


def _date_params(from_date: date, to_date: date) -> dict[str, str]:
    return {"from": from_date.isoformat(), "to": to_date.isoformat()}


@dataclass(slots=True)
class AlertsApiClient:
    """Alerts lookups; a 404 means no data rather than an error."""

    resilience: ResilienceConfig = field(default_factory=_default_resilience_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(default=ResilientClient)

    def alerts_of_interest(
        self, person_identifier: str, from_date: date, to_date: date
    ) -> list[CaseNoteAlert]:
        return asyncio.run(self._alerts_of_interest_async(person_identifier, from_date, to_date))

    def get_alert(self, alert_uuid: UUID) -> Alert | None:
        return asyncio.run(self._get_alert_async(alert_uuid))

    def person_identifiers_of_interest(self, from_date: date, to_date: date) -> list[str]:
        return asyncio.run(self._person_identifiers_async(from_date, to_date))

    async def _alerts_of_interest_async(
        self, person_identifier: str, from_date: date, to_date: date
    ) -> list[CaseNoteAlert]:
        async with self.client_factory(self.resilience) as client:
            response = await client.get(
                f"/alerts/case-notes/{person_identifier}",
                params=_date_params(from_date, to_date),
            )
        if not raise_unless_found(response):
            return []
        payload = CaseNoteAlertResponse.model_validate(response.json())
        alerts = [parse_case_note_alert(item) for item in payload.content]
        log.debug("Fetched %s alerts of interest for %s", len(alerts), person_identifier)
        return alerts

    async def _get_alert_async(self, alert_uuid: UUID) -> Alert | None:
        async with self.client_factory(self.resilience) as client:
            response = await client.get(f"/alerts/{alert_uuid}")
        if not raise_unless_found(response):
            return None
        return parse_alert(AlertPayload.model_validate(response.json()))

    async def _person_identifiers_async(self, from_date: date, to_date: date) -> list[str]:
        async with self.client_factory(self.resilience) as client:
            response = await client.get(
                "/alerts/case-notes/prison-numbers",
                params=_date_params(from_date, to_date),
            )
        if not raise_unless_found(response):
            return []
        return PersonIdentifiersResponse.model_validate(response.json()).person_identifiers


if TYPE_CHECKING:
    _client_check: AlertClient = AlertsApiClient()
