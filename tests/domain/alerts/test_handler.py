from __future__ import annotations

from datetime import UTC, date, datetime, timedelta, timezone

import pytest

from casenotes.domain.alerts import AlertCaseNoteHandler
from casenotes.domain.alerts.handler import local_naive
from casenotes.domain.errors import CaseNoteValidationError
from casenotes.domain.events import ALERT_CREATED, ALERT_INACTIVE, DomainEvent
from casenotes.domain.model import Alert, PrisonerDetails, UserDetails
from tests.helpers.fakes import (
    FakeAlertClient,
    FakeCaseNoteStore,
    FakePrisonerSearchClient,
    FakePrisonSwitchClient,
    FakeUserDetailsClient,
    RecordingPublisher,
    make_person_events,
)
from tests.helpers.notes import make_alert

PERSON = "A1234AA"


def _event(event_type: str, alert: Alert, *, occurred_at: datetime | None = None) -> DomainEvent:
    return DomainEvent(
        occurred_at=occurred_at or datetime(2024, 1, 1, 9, 0),
        event_type=event_type,
        description="alert changed",
        additional_information={"alertUuid": str(alert.alert_uuid)},
    )


def _user(username: str, name: str) -> UserDetails:
    return UserDetails(username=username, active=True, name=name, auth_source="nomis", user_id="77")


def _handler(
    store: FakeCaseNoteStore,
    publisher: RecordingPublisher,
    *alerts: Alert,
    enabled_prisons: set[str] | None = None,
    users: FakeUserDetailsClient | None = None,
) -> AlertCaseNoteHandler:
    return AlertCaseNoteHandler(
        alerts=FakeAlertClient(by_uuid={alert.alert_uuid: alert for alert in alerts}),
        prisoners=FakePrisonerSearchClient(
            prisoners={PERSON: PrisonerDetails(prisoner_number=PERSON, prison_id="MDI")}
        ),
        switches=FakePrisonSwitchClient(
            enabled=enabled_prisons if enabled_prisons is not None else {"MDI"}
        ),
        users=users or FakeUserDetailsClient(users={"CREATOR": _user("CREATOR", "Creator Name")}),
        unit_of_work_factory=store.unit_of_work,
        events=make_person_events(publisher),
    )


def test_alert_created_writes_one_active_note(
    store: FakeCaseNoteStore, publisher: RecordingPublisher
) -> None:
    alert = make_alert()
    handler = _handler(store, publisher, alert)

    note = handler.handle_alert_created(_event(ALERT_CREATED, alert))

    assert note is not None
    assert store.notes_for(PERSON) == [note]
    assert note.sub_type.code == "ACTIVE"
    assert note.text == "Alert Security and Escape risk made active."
    assert note.occurred_at == datetime(2024, 1, 1)
    assert note.created_at == datetime(2024, 1, 1, 9, 0)
    assert note.created_by == "CREATOR"
    assert note.author_username == "CREATOR"
    assert note.author_name == "Creator Name"
    assert note.location_id == "MDI"
    assert note.legacy_id == 1
    assert note.system_generated
    assert publisher.event_types == ["person.case-note.created"]


def test_created_event_for_already_inactive_alert_writes_inactive_note(
    store: FakeCaseNoteStore, publisher: RecordingPublisher
) -> None:
    alert = make_alert(is_active=False, active_to=date(2024, 1, 2))
    handler = _handler(store, publisher, alert)

    note = handler.handle_alert_created(_event(ALERT_CREATED, alert))

    assert note is not None
    assert note.sub_type.code == "INACTIVE"
    assert note.occurred_at == datetime(2024, 1, 2)
    assert note.created_at == datetime(2024, 1, 1, 9, 0, 0, 123456)


def test_prison_not_switched_on_is_skipped(
    store: FakeCaseNoteStore, publisher: RecordingPublisher
) -> None:
    alert = make_alert()
    handler = _handler(store, publisher, alert, enabled_prisons=set())

    assert handler.handle_alert_created(_event(ALERT_CREATED, alert)) is None
    assert store.notes == {}
    assert store.units == []
    assert publisher.events == []


def test_unknown_prisoner_and_alert_are_skipped(
    store: FakeCaseNoteStore, publisher: RecordingPublisher
) -> None:
    stranger = make_alert(prison_number="Z9999ZZ")
    handler = _handler(store, publisher, stranger)
    missing = make_alert()

    assert handler.handle_alert_created(_event(ALERT_CREATED, stranger)) is None
    assert handler.handle_alert_created(_event(ALERT_CREATED, missing)) is None
    assert store.notes == {}


def test_inactive_note_attributed_when_timestamps_match(
    store: FakeCaseNoteStore, publisher: RecordingPublisher
) -> None:
    at = datetime(2024, 2, 1, 8, 30)
    alert = make_alert(
        is_active=False,
        active_to=date(2024, 2, 1),
        made_inactive_at=at,
        active_to_last_set_at=at,
        active_to_last_set_by="EDITOR",
    )
    users = FakeUserDetailsClient(users={"EDITOR": _user("EDITOR", "Edith Editor")})
    handler = _handler(store, publisher, alert, users=users)

    note = handler.handle_alert_inactive(
        _event(ALERT_INACTIVE, alert, occurred_at=datetime(2024, 2, 1, 8, 31))
    )

    assert note is not None
    assert note.sub_type.code == "INACTIVE"
    assert note.text == "Alert Security and Escape risk made inactive."
    assert note.occurred_at == datetime(2024, 2, 1)
    assert note.created_at == datetime(2024, 2, 1, 8, 31)
    assert note.author_username == "EDITOR"
    assert note.author_name == "Edith Editor"


def test_inactive_note_uses_defaults_without_attribution(
    store: FakeCaseNoteStore, publisher: RecordingPublisher
) -> None:
    alert = make_alert(
        is_active=False,
        active_to=date(2024, 2, 1),
        made_inactive_at=datetime(2024, 2, 1, 8, 30),
        active_to_last_set_at=datetime(2024, 2, 3, 8, 30),
        active_to_last_set_by="LATER_EDITOR",
    )
    users = FakeUserDetailsClient()
    handler = _handler(store, publisher, alert, users=users)

    note = handler.handle_alert_inactive(_event(ALERT_INACTIVE, alert))

    assert note is not None
    assert note.author_username == "OMS_OWNER"
    assert note.author_user_id == "1"
    assert note.author_name == "System Generated"
    assert note.created_by == "OMS_OWNER"
    assert users.lookups == []


def test_event_without_alert_uuid_is_rejected(
    store: FakeCaseNoteStore, publisher: RecordingPublisher
) -> None:
    handler = _handler(store, publisher)
    event = DomainEvent(
        occurred_at=datetime(2024, 1, 1), event_type=ALERT_CREATED, description="alert"
    )

    with pytest.raises(CaseNoteValidationError):
        handler.handle_alert_created(event)


def test_local_naive_strips_offset_after_conversion() -> None:
    naive = datetime(2024, 2, 1, 8, 0)
    aware = datetime(2024, 2, 1, 8, 0, tzinfo=UTC)
    offset = datetime(2024, 2, 1, 10, 0, tzinfo=timezone(timedelta(hours=2)))

    assert local_naive(naive) is naive
    assert local_naive(aware).tzinfo is None
    assert local_naive(aware) == local_naive(offset)


def test_alert_uuid_accepts_uuid_payloads(
    store: FakeCaseNoteStore, publisher: RecordingPublisher
) -> None:
    alert = make_alert()
    handler = _handler(store, publisher, alert)
    event = DomainEvent(
        occurred_at=datetime(2024, 1, 1, 9, 0),
        event_type=ALERT_CREATED,
        description="alert",
        additional_information={"alertUuid": alert.alert_uuid},
    )

    assert handler.handle_alert_created(event) is not None
