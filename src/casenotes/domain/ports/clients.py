"""Ports for upstream services consulted while reconciling notes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from datetime import date
    from uuid import UUID

    from casenotes.domain.model import Alert, CaseNoteAlert, PrisonerDetails, UserDetails


@runtime_checkable
class AlertClient(Protocol):
    """Alerts service. Absent data is reported as empty/None, never as an error."""

    def alerts_of_interest(
        self, person_identifier: str, from_date: date, to_date: date
    ) -> list[CaseNoteAlert]: ...

    def get_alert(self, alert_uuid: UUID) -> Alert | None: ...

    def person_identifiers_of_interest(self, from_date: date, to_date: date) -> list[str]: ...


@runtime_checkable
class UserDetailsClient(Protocol):
    def get_user_details(self, username: str) -> UserDetails | None: ...


@runtime_checkable
class PrisonerSearchClient(Protocol):
    def get_prisoner(self, person_identifier: str) -> PrisonerDetails | None: ...


@runtime_checkable
class PrisonSwitchClient(Protocol):
    """Answers whether a prison is configured to receive alert case notes."""

    def alert_case_notes_for(self, prison_code: str) -> bool: ...
