"""HTTP clients for prisoner search and the prison API agency switches."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final

from pydantic import TypeAdapter

from casenotes.adapters.http_resilience import ResilientClient, raise_unless_found
from casenotes.config.apis import get_prison_api_config, get_prisoner_search_api_config
from casenotes.domain.model import PrisonerDetails, PrisonSwitch

from .schema import PrisonerPayload, PrisonSwitchPayload

if TYPE_CHECKING:
    from collections.abc import Callable

    from casenotes.config.http_resilience import ResilienceConfig
    from casenotes.domain.ports.clients import PrisonerSearchClient, PrisonSwitchClient

log = getLogger(__name__)

ALERTS_CASE_NOTES_SERVICE: Final[str] = "ALERTS_CASE_NOTES"
ALL_PRISONS: Final[str] = "*ALL*"

_SWITCHES = TypeAdapter(list[PrisonSwitchPayload])


def _default_search_resilience() -> ResilienceConfig:
    return get_prisoner_search_api_config().resilience


def _default_prison_api_resilience() -> ResilienceConfig:
    return get_prison_api_config().resilience


@dataclass(slots=True)
class PrisonerSearchApiClient:
    resilience: ResilienceConfig = field(default_factory=_default_search_resilience)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(default=ResilientClient)

    def get_prisoner(self, person_identifier: str) -> PrisonerDetails | None:
        return asyncio.run(self._get_prisoner_async(person_identifier))

    async def _get_prisoner_async(self, person_identifier: str) -> PrisonerDetails | None:
        async with self.client_factory(self.resilience) as client:
            response = await client.get(f"/prisoner/{person_identifier}")
        if not raise_unless_found(response):
            return None
        payload = PrisonerPayload.model_validate(response.json())
        return PrisonerDetails(prisoner_number=payload.prisoner_number, prison_id=payload.prison_id)


@dataclass(slots=True)
class PrisonApiClient:
    """Reads which prisons have a service switched on."""

    resilience: ResilienceConfig = field(default_factory=_default_prison_api_resilience)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(default=ResilientClient)
    service_code: str = ALERTS_CASE_NOTES_SERVICE

    def get_prison_switches(self) -> list[PrisonSwitch]:
        return asyncio.run(self._get_prison_switches_async())

    def alert_case_notes_for(self, prison_code: str) -> bool:
        return any(
            switch.prison_code in (prison_code, ALL_PRISONS)
            for switch in self.get_prison_switches()
        )

    async def _get_prison_switches_async(self) -> list[PrisonSwitch]:
        async with self.client_factory(self.resilience) as client:
            response = await client.get(f"/api/agency-switches/{self.service_code}")
        if not raise_unless_found(response):
            return []
        switches = [
            PrisonSwitch(prison_code=item.prison_code, description=item.description)
            for item in _SWITCHES.validate_python(response.json())
        ]
        log.debug("%s switched on for %s prisons", self.service_code, len(switches))
        return switches


if TYPE_CHECKING:
    _search_check: PrisonerSearchClient = PrisonerSearchApiClient()
    _switch_check: PrisonSwitchClient = PrisonApiClient()
