"""Create one alert case note per alert lifecycle event."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Final
from uuid import UUID

from casenotes.domain.alerts.common import ActiveInactive, require_alert_sub_types, start_of_day
from casenotes.domain.errors import CaseNoteValidationError
from casenotes.domain.events import PersonCaseNoteEvent, PersonCaseNoteEventType
from casenotes.domain.model import Note, Source, System, stamp_created

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from casenotes.domain.events import DomainEvent, PersonEventPublisher
    from casenotes.domain.model import Alert, SubType, UserDetails
    from casenotes.domain.ports.clients import (
        AlertClient,
        PrisonerSearchClient,
        PrisonSwitchClient,
        UserDetailsClient,
    )
    from casenotes.domain.ports.unit_of_work import CaseNoteUnitOfWork

log = getLogger(__name__)

DEFAULT_USERNAME: Final[str] = "OMS_OWNER"
DEFAULT_USER_ID: Final[str] = "1"
DEFAULT_USER_NAME: Final[str] = "System Generated"


def alert_uuid_of(event: DomainEvent) -> UUID:
    value = event.additional_information.get("alertUuid")
    if value is None:
        raise CaseNoteValidationError(f"{event.event_type} event has no alertUuid")
    return value if isinstance(value, UUID) else UUID(str(value))


def local_naive(value: datetime) -> datetime:
    """Express an event timestamp in local time without offset, as notes store it."""

    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


class AlertCaseNoteHandler:
    """Turns ``person.alert.created`` and ``person.alert.inactive`` events into notes.

    Nothing is written for prisons that have not switched alert case notes on.
    """

    def __init__(
        self,
        *,
        alerts: AlertClient,
        prisoners: PrisonerSearchClient,
        switches: PrisonSwitchClient,
        users: UserDetailsClient,
        unit_of_work_factory: Callable[[], CaseNoteUnitOfWork],
        events: PersonEventPublisher,
    ) -> None:
        self._alerts = alerts
        self._prisoners = prisoners
        self._switches = switches
        self._users = users
        self._unit_of_work_factory = unit_of_work_factory
        self._events = events

    def handle_alert_created(self, event: DomainEvent) -> Note | None:
        alert = self._alerts.get_alert(alert_uuid_of(event))
        if alert is None:
            log.info("Alert from %s no longer exists", event.event_type)
            return None
        if alert.is_active:
            status, created_at = ActiveInactive.ACTIVE, alert.created_at.replace(microsecond=0)
        else:
            # already inactive when created; keep the timestamp as recorded
            status, created_at = ActiveInactive.INACTIVE, alert.created_at
        return self._create(alert, status, username=alert.created_by, created_at=created_at)

    def handle_alert_inactive(self, event: DomainEvent) -> Note | None:
        alert = self._alerts.get_alert(alert_uuid_of(event))
        if alert is None:
            log.info("Alert from %s no longer exists", event.event_type)
            return None
        return self._create(
            alert,
            ActiveInactive.INACTIVE,
            username=alert.inactive_username(),
            created_at=local_naive(event.occurred_at),
        )

    def _location_for(self, alert: Alert) -> str | None:
        prisoner = self._prisoners.get_prisoner(alert.prison_number)
        if prisoner is None:
            log.warning("Prisoner %s not found, skipping alert case note", alert.prison_number)
            return None
        if not self._switches.alert_case_notes_for(prisoner.prison_id):
            log.debug("Alert case notes not enabled for %s", prisoner.prison_id)
            return None
        return prisoner.prison_id

    def _create(
        self,
        alert: Alert,
        status: ActiveInactive,
        *,
        username: str | None,
        created_at: datetime,
    ) -> Note | None:
        location_id = self._location_for(alert)
        if location_id is None:
            return None
        user = self._users.get_user_details(username) if username else None

        with self._unit_of_work_factory() as uow:
            sub_type = require_alert_sub_types(uow.repositories.sub_types)[status]
            note = self._note(
                alert,
                status,
                sub_type=sub_type,
                location_id=location_id,
                user=user,
                username=username,
                created_at=created_at,
                legacy_id=uow.repositories.notes.next_legacy_id(),
            )
            uow.repositories.notes.add(note)
            uow.commit()

        self._events.publish(
            PersonCaseNoteEvent.for_note(note, PersonCaseNoteEventType.CREATED, source=Source.DPS)
        )
        return note

    @staticmethod
    def _note(
        alert: Alert,
        status: ActiveInactive,
        *,
        sub_type: SubType,
        location_id: str,
        user: UserDetails | None,
        username: str | None,
        created_at: datetime,
        legacy_id: int,
    ) -> Note:
        if status is ActiveInactive.ACTIVE:
            occurred_on = alert.active_from
            text = alert.active_text()
        else:
            if alert.active_to is None:
                raise CaseNoteValidationError(
                    f"Inactive alert {alert.alert_uuid} has no active-to date"
                )
            occurred_on = alert.active_to
            text = alert.inactive_text()
        return Note(
            person_identifier=alert.prison_number,
            sub_type=sub_type,
            occurred_at=start_of_day(occurred_on),
            location_id=location_id,
            author_username=user.username if user else DEFAULT_USERNAME,
            author_user_id=user.user_id if user else DEFAULT_USER_ID,
            author_name=user.name if user else DEFAULT_USER_NAME,
            text=text,
            created=stamp_created(username or DEFAULT_USERNAME, at=created_at),
            system_generated=True,
            system=System.DPS,
            legacy_id=legacy_id,
        )
