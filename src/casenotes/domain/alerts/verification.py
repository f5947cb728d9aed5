"""Check that every alert has its active/inactive note, and repair what is missing.

Stricter than reconciliation: only the current wording counts as a match and nothing is
published for the notes it creates.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from logging import getLogger
from typing import TYPE_CHECKING, Final

from casenotes.domain.alerts.common import (
    ActiveInactive,
    alert_notes_filter,
    require_alert_sub_types,
    start_of_day,
)
from casenotes.domain.identity import SYSTEM_USERNAME
from casenotes.domain.model import Note, System, stamp_created

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from datetime import datetime

    from casenotes.domain.identity import SystemUserCache
    from casenotes.domain.model import CaseNoteAlert, SubType
    from casenotes.domain.ports.clients import AlertClient
    from casenotes.domain.ports.events import Telemetry
    from casenotes.domain.ports.persistence import NoteRepository
    from casenotes.domain.ports.unit_of_work import CaseNoteUnitOfWork

log = getLogger(__name__)

DEFAULT_USER_ID: Final[str] = "2"
DEFAULT_USER_NAME: Final[str] = "Dps Synchronisation"


@dataclass(slots=True)
class VerificationResult:
    person_identifier: str
    missing_active: list[CaseNoteAlert] = field(default_factory=list["CaseNoteAlert"])
    missing_inactive: list[CaseNoteAlert] = field(default_factory=list["CaseNoteAlert"])
    created: list[Note] = field(default_factory=list["Note"])

    @property
    def has_missing(self) -> bool:
        return bool(self.missing_active or self.missing_inactive)


def _describe(alerts: Iterable[CaseNoteAlert]) -> str:
    return ", ".join(f"{alert.type.description} {alert.sub_type.description}" for alert in alerts)


class AlertCaseNoteVerification:
    def __init__(
        self,
        *,
        alerts: AlertClient,
        unit_of_work_factory: Callable[[], CaseNoteUnitOfWork],
        telemetry: Telemetry,
        system_user: SystemUserCache,
        action_missing_case_notes: bool,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._alerts = alerts
        self._unit_of_work_factory = unit_of_work_factory
        self._telemetry = telemetry
        self._system_user = system_user
        self._action_missing = action_missing_case_notes
        self._today = today

    def verify(self, person_identifier: str, from_date: date, to_date: date) -> VerificationResult:
        result = VerificationResult(person_identifier=person_identifier)
        alerts = self._alerts.alerts_of_interest(person_identifier, from_date, to_date)
        if not alerts:
            return result

        today = self._today()
        with self._unit_of_work_factory() as uow:
            notes = uow.repositories.notes.find(
                alert_notes_filter(person_identifier, from_date, to_date)
            )
            for alert in alerts:
                if not any(self._is_active_note(note, alert) for note in notes):
                    result.missing_active.append(alert)
                if not alert.is_active(today=today) and not any(
                    self._is_inactive_note(note, alert) for note in notes
                ):
                    result.missing_inactive.append(alert)

            if not result.has_missing:
                return result

            self._telemetry.track_event("MissingAlertCaseNotes", self._telemetry_properties(result))
            if not self._action_missing:
                return result

            sub_types = require_alert_sub_types(uow.repositories.sub_types)
            repository = uow.repositories.notes
            result.created = [
                *(
                    self._active_note(
                        person_identifier, alert, sub_types[ActiveInactive.ACTIVE], repository
                    )
                    for alert in result.missing_active
                ),
                *(
                    self._inactive_note(
                        person_identifier, alert, sub_types[ActiveInactive.INACTIVE], repository
                    )
                    for alert in result.missing_inactive
                ),
            ]
            repository.add_all(result.created)
            uow.commit()

        log.info(
            "Verification created %s alert case notes for %s",
            len(result.created),
            person_identifier,
        )
        return result

    @staticmethod
    def _is_active_note(note: Note, alert: CaseNoteAlert) -> bool:
        return note.text == alert.active_text() and note.occurred_at.date() == alert.active_from

    @staticmethod
    def _is_inactive_note(note: Note, alert: CaseNoteAlert) -> bool:
        return note.text == alert.inactive_text() and note.occurred_at.date() == alert.active_to

    @staticmethod
    def _telemetry_properties(result: VerificationResult) -> dict[str, str]:
        properties = {"PersonIdentifier": result.person_identifier}
        if result.missing_active:
            properties["ActiveCount"] = str(len(result.missing_active))
            properties["ActiveTypes"] = _describe(result.missing_active)
        if result.missing_inactive:
            properties["InactiveCount"] = str(len(result.missing_inactive))
            properties["InactiveTypes"] = _describe(result.missing_inactive)
        return properties

    def _active_note(
        self,
        person_identifier: str,
        alert: CaseNoteAlert,
        sub_type: SubType,
        notes: NoteRepository,
    ) -> Note:
        created_at = start_of_day(alert.created_at.date())
        return self._note(
            person_identifier,
            alert,
            sub_type,
            occurred_at=created_at,
            created_at=created_at,
            text=alert.active_text(),
            notes=notes,
        )

    def _inactive_note(
        self,
        person_identifier: str,
        alert: CaseNoteAlert,
        sub_type: SubType,
        notes: NoteRepository,
    ) -> Note:
        if alert.active_to is None:
            raise ValueError("Inactive alert case note requires an active-to date")
        occurred_at = start_of_day(alert.active_to)
        return self._note(
            person_identifier,
            alert,
            sub_type,
            occurred_at=occurred_at,
            created_at=occurred_at,
            text=alert.inactive_text(),
            notes=notes,
        )

    def _note(
        self,
        person_identifier: str,
        alert: CaseNoteAlert,
        sub_type: SubType,
        *,
        occurred_at: datetime,
        created_at: datetime,
        text: str,
        notes: NoteRepository,
    ) -> Note:
        if alert.prison_code is None:
            raise ValueError(f"Alert for {person_identifier} has no prison code")
        system_user = self._system_user.get()
        return Note(
            person_identifier=person_identifier,
            sub_type=sub_type,
            occurred_at=occurred_at,
            location_id=alert.prison_code,
            author_username=SYSTEM_USERNAME,
            author_user_id=system_user.user_id if system_user else DEFAULT_USER_ID,
            author_name=system_user.name if system_user else DEFAULT_USER_NAME,
            text=text,
            created=stamp_created(SYSTEM_USERNAME, at=created_at),
            system_generated=True,
            system=System.DPS,
            legacy_id=notes.next_legacy_id(),
        )
