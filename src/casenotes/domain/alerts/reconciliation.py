"""Backfill of alert case notes missing for a person over a date window.

Matching is by exact text and date, so running reconciliation again after notes were
synthesized finds them and creates nothing new.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING, Final

from casenotes.domain.alerts.common import (
    ActiveInactive,
    alert_notes_filter,
    require_alert_sub_types,
    start_of_day,
)
from casenotes.domain.events import PersonCaseNoteEvent, PersonCaseNoteEventType
from casenotes.domain.identity import SYSTEM_USERNAME
from casenotes.domain.model import Note, Source, System, stamp_created

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from casenotes.domain.events import PersonEventPublisher
    from casenotes.domain.identity import SystemUserCache
    from casenotes.domain.model import CaseNoteAlert, SubType
    from casenotes.domain.ports.clients import AlertClient
    from casenotes.domain.ports.events import Telemetry
    from casenotes.domain.ports.persistence import NoteRepository
    from casenotes.domain.ports.unit_of_work import CaseNoteUnitOfWork

log = getLogger(__name__)

DEFAULT_USER_ID: Final[str] = "2"
DEFAULT_USER_NAME: Final[str] = "System Generated"
CREATED_AT_TOLERANCE: Final[timedelta] = timedelta(minutes=1)


class Scope(StrEnum):
    IN = "IN"
    OUT = "OUT"


@dataclass(frozen=True, slots=True)
class MissingNote:
    status: ActiveInactive
    scope: Scope
    alert: CaseNoteAlert


@dataclass(slots=True)
class ReconciliationResult:
    person_identifier: str
    missing: list[MissingNote] = field(default_factory=list["MissingNote"])
    created: list[Note] = field(default_factory=list["Note"])


def _truncate_seconds(value: datetime) -> datetime:
    return value.replace(microsecond=0)


def _alert_dates(alert: CaseNoteAlert) -> list[date]:
    dates = [alert.created_at.date(), alert.active_from]
    if alert.made_inactive_at is not None:
        dates.append(alert.made_inactive_at.date())
    if alert.active_to is not None:
        dates.append(alert.active_to)
    return dates


def case_note_dates(alerts: Iterable[CaseNoteAlert]) -> tuple[date, date]:
    """Earliest and latest date on which any of the alerts could have produced a note."""

    dates = [value for alert in alerts for value in _alert_dates(alert)]
    return min(dates), max(dates)


def matches_active(note: Note, alert: CaseNoteAlert) -> bool:
    if note.text not in (alert.active_text(), alert.alternative_active_text()):
        return False
    if note.occurred_at.date() == alert.active_from:
        return True
    drift = _truncate_seconds(alert.created_at) - _truncate_seconds(note.created_at)
    return abs(drift) <= CREATED_AT_TOLERANCE


def matches_inactive(note: Note, alert: CaseNoteAlert) -> bool:
    return (
        note.text in (alert.inactive_text(), alert.alternative_inactive_text())
        and note.occurred_at.date() == alert.active_to
    )


def matched_statuses(notes: Iterable[Note], alert: CaseNoteAlert) -> set[ActiveInactive]:
    found: set[ActiveInactive] = set()
    for note in notes:
        if matches_active(note, alert):
            found.add(ActiveInactive.ACTIVE)
        if alert.active_to is not None and matches_inactive(note, alert):
            found.add(ActiveInactive.INACTIVE)
    return found


def _active_description(alert: CaseNoteAlert) -> str:
    return (
        f"{alert.type.description} and {alert.sub_type.description} -> "
        f"{alert.active_from.isoformat()} | {alert.created_at.isoformat()}"
    )


def _inactive_description(alert: CaseNoteAlert) -> str:
    active_to = alert.active_to.isoformat() if alert.active_to else None
    made_inactive_at = alert.made_inactive_at.isoformat() if alert.made_inactive_at else None
    return (
        f"{alert.type.description} and {alert.sub_type.description} -> "
        f"{active_to} | {made_inactive_at}"
    )


_PROPERTY_PREFIXES: Final[dict[tuple[ActiveInactive, Scope], str]] = {
    (ActiveInactive.ACTIVE, Scope.IN): "ActiveInScope",
    (ActiveInactive.ACTIVE, Scope.OUT): "ActiveOutOfScope",
    (ActiveInactive.INACTIVE, Scope.IN): "InactiveInScope",
    (ActiveInactive.INACTIVE, Scope.OUT): "InactiveOutOfScope",
}


def missing_notes_properties(
    person_identifier: str, missing: Sequence[MissingNote]
) -> dict[str, str]:
    grouped: dict[tuple[ActiveInactive, Scope], list[CaseNoteAlert]] = defaultdict(list)
    for item in missing:
        grouped[(item.status, item.scope)].append(item.alert)

    properties = {"PersonIdentifier": person_identifier}
    for group, prefix in _PROPERTY_PREFIXES.items():
        alerts = grouped.get(group)
        if not alerts:
            continue
        describe = (
            _active_description if group[0] is ActiveInactive.ACTIVE else _inactive_description
        )
        properties[f"{prefix}Count"] = str(len(alerts))
        properties[f"{prefix}Types"] = ", ".join(describe(alert) for alert in alerts)
    return properties


class AlertCaseNoteReconciliation:
    """Finds alerts without matching case notes and, when enabled, creates the notes."""

    def __init__(
        self,
        *,
        alerts: AlertClient,
        unit_of_work_factory: Callable[[], CaseNoteUnitOfWork],
        telemetry: Telemetry,
        events: PersonEventPublisher,
        system_user: SystemUserCache,
        action_missing_case_notes: bool,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._alerts = alerts
        self._unit_of_work_factory = unit_of_work_factory
        self._telemetry = telemetry
        self._events = events
        self._system_user = system_user
        self._action_missing = action_missing_case_notes
        self._today = today

    def reconcile(
        self, person_identifier: str, from_date: date, to_date: date
    ) -> ReconciliationResult:
        result = ReconciliationResult(person_identifier=person_identifier)
        alerts = self._alerts.alerts_of_interest(person_identifier, from_date, to_date)
        if not alerts:
            log.debug("No alerts of interest for %s", person_identifier)
            return result

        span_from, span_to = case_note_dates(alerts)
        query = alert_notes_filter(person_identifier, span_from, max(span_to, to_date))

        with self._unit_of_work_factory() as uow:
            existing = uow.repositories.notes.find(query)
            for alert in alerts:
                result.missing.extend(
                    self._find_missing(person_identifier, alert, existing, from_date, to_date)
                )

            if not result.missing:
                return result

            self._telemetry.track_event(
                "MissingAlertCaseNotes",
                missing_notes_properties(person_identifier, result.missing),
            )
            if not self._action_missing:
                log.info(
                    "Found %s missing alert case notes for %s; creation disabled",
                    len(result.missing),
                    person_identifier,
                )
                return result

            sub_types = require_alert_sub_types(uow.repositories.sub_types)
            repository = uow.repositories.notes
            notes = [
                self._to_note(person_identifier, item, sub_types[item.status], repository)
                for item in result.missing
            ]
            repository.add_all(notes)
            uow.commit()
            result.created = notes

        log.info("Created %s alert case notes for %s", len(result.created), person_identifier)
        self._events.publish_all(
            PersonCaseNoteEvent.for_note(note, PersonCaseNoteEventType.CREATED, source=Source.DPS)
            for note in result.created
        )
        return result

    def _find_missing(
        self,
        person_identifier: str,
        alert: CaseNoteAlert,
        existing: Sequence[Note],
        from_date: date,
        to_date: date,
    ) -> list[MissingNote]:
        today = self._today()
        matched = matched_statuses(existing, alert)
        missing: list[MissingNote] = []
        if ActiveInactive.ACTIVE not in matched:
            scope = Scope.IN if from_date <= alert.active_from <= to_date else Scope.OUT
            missing.append(MissingNote(ActiveInactive.ACTIVE, scope, alert))
            if alert.is_active(today=today):
                self._track_missing_active(person_identifier, alert)
        if alert.made_inactive(today=today) and ActiveInactive.INACTIVE not in matched:
            active_to = alert.active_to
            in_scope = active_to is not None and from_date <= active_to <= to_date
            scope = Scope.IN if in_scope else Scope.OUT
            missing.append(MissingNote(ActiveInactive.INACTIVE, scope, alert))
        return missing

    def _track_missing_active(self, person_identifier: str, alert: CaseNoteAlert) -> None:
        properties = {
            "personIdentifier": person_identifier,
            "type": alert.type.description,
            "subType": alert.sub_type.description,
            "from": alert.active_from.isoformat(),
            "createdAt": alert.created_at.isoformat(),
        }
        if alert.active_to is not None:
            properties["to"] = alert.active_to.isoformat()
        if alert.made_inactive_at is not None:
            properties["madeInactiveAt"] = alert.made_inactive_at.isoformat()
        self._telemetry.track_event("MissingActiveAlertCaseNote", properties)

    def _to_note(
        self,
        person_identifier: str,
        missing: MissingNote,
        sub_type: SubType,
        notes: NoteRepository,
    ) -> Note:
        alert = missing.alert
        if alert.prison_code is None:
            raise ValueError(f"Alert for {person_identifier} has no prison code")
        system_user = self._system_user.get()
        if missing.status is ActiveInactive.ACTIVE:
            occurred_at = start_of_day(alert.active_from)
            text = alert.active_text()
            created_at = _truncate_seconds(alert.created_at)
        else:
            if alert.active_to is None or alert.made_inactive_at is None:
                raise ValueError("Inactive alert case note requires active-to and made-inactive-at")
            occurred_at = start_of_day(alert.active_to)
            text = alert.inactive_text()
            created_at = alert.made_inactive_at
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
