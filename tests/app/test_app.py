from __future__ import annotations

from datetime import date, datetime

import pytest

from casenotes import app
from casenotes.domain.events import PRISONER_MERGED, DomainEvent
from tests.helpers.fakes import (
    FakeAlertClient,
    FakeCaseNoteStore,
    RecordingTelemetry,
    make_system_user,
)
from tests.helpers.notes import make_case_note_alert, make_migrate_request, make_note

PERSON = "A1234AA"


@pytest.fixture(autouse=True)
def offline_system_user(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(app, "system_user_cache", make_system_user)
    monkeypatch.delenv("ACTION_MISSING_CASE_NOTES", raising=False)
    monkeypatch.delenv("PUBLISH_PERSON_EVENTS", raising=False)


def test_reconciliation_only_reports_by_default(
    store: FakeCaseNoteStore, telemetry: RecordingTelemetry
) -> None:
    result = app.reconcile_alert_case_notes(
        PERSON,
        date(2024, 1, 1),
        date(2024, 1, 31),
        alerts=FakeAlertClient(alerts={PERSON: [make_case_note_alert()]}),
        unit_of_work_factory=store.unit_of_work,
        telemetry=telemetry,
    )

    assert len(result.missing) == 1
    assert store.notes == {}
    assert len(telemetry.named("MissingAlertCaseNotes")) == 1


def test_reconciliation_creates_notes_when_enabled(
    monkeypatch: pytest.MonkeyPatch, store: FakeCaseNoteStore, telemetry: RecordingTelemetry
) -> None:
    monkeypatch.setenv("ACTION_MISSING_CASE_NOTES", "true")

    result = app.reconcile_alert_case_notes(
        PERSON,
        date(2024, 1, 1),
        date(2024, 1, 31),
        alerts=FakeAlertClient(alerts={PERSON: [make_case_note_alert()]}),
        unit_of_work_factory=store.unit_of_work,
        telemetry=telemetry,
    )

    (note,) = result.created
    assert store.notes_for(PERSON) == [note]
    # publishing is off, so the person event lands in telemetry
    assert len(telemetry.named("person.case-note.created")) == 1


def test_migration_through_app(store: FakeCaseNoteStore) -> None:
    results = app.migrate_case_notes(
        PERSON, [make_migrate_request(101)], unit_of_work_factory=store.unit_of_work
    )

    assert [result.legacy_id for result in results] == [101]
    assert app.migration_results([101], unit_of_work_factory=store.unit_of_work) == results


def test_listener_routes_merge_events(
    monkeypatch: pytest.MonkeyPatch, store: FakeCaseNoteStore, telemetry: RecordingTelemetry
) -> None:
    for name in (
        "ALERTS_API_URL",
        "PRISONER_SEARCH_API_URL",
        "PRISON_API_URL",
        "MANAGE_USERS_API_URL",
    ):
        monkeypatch.setenv(name, "http://api.test")
    store.add_notes(make_note(store.sub_types[-1], person_identifier="B2222BB", legacy_id=5))
    listener = app.build_listener(unit_of_work_factory=store.unit_of_work, telemetry=telemetry)

    handled = listener.handle(
        DomainEvent(
            occurred_at=datetime(2024, 6, 1),
            event_type=PRISONER_MERGED,
            description="Prisoner merged",
            additional_information={"nomsNumber": PERSON, "removedNomsNumber": "B2222BB"},
        )
    )

    assert handled
    assert [note.legacy_id for note in store.notes_for(PERSON)] == [5]
    assert len(telemetry.named("person.case-note.moved")) == 1
