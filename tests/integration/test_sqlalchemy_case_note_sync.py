from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import TYPE_CHECKING

import pytest

from casenotes.domain.filters import NoteFilter
from casenotes.domain.merge import CaseNoteMerge
from casenotes.domain.model import DeletionCause, Note
from casenotes.domain.sync import AmendmentRequest, CaseNoteSync, SyncAction
from tests.helpers.fakes import RecordingPublisher, RecordingTelemetry, make_person_events
from tests.helpers.notes import (
    make_author,
    make_migrate_request,
    make_sub_type,
    make_sync_request,
)

if TYPE_CHECKING:
    from collections.abc import Callable
    from uuid import UUID

    from casenotes.adapters.sqlalchemy.unit_of_work import SqlAlchemyCaseNoteUnitOfWork

PERSON = "A1234AA"
OTHER = "B2222BB"


def _seed_general_type(sqlite_unit_of_work: Callable[[], SqlAlchemyCaseNoteUnitOfWork]) -> None:
    with sqlite_unit_of_work() as uow:
        uow.repositories.sub_types.add(make_sub_type("OSE"))
        uow.commit()


def _sync(
    sqlite_unit_of_work: Callable[[], SqlAlchemyCaseNoteUnitOfWork],
    telemetry: RecordingTelemetry,
) -> CaseNoteSync:
    return CaseNoteSync(
        unit_of_work_factory=sqlite_unit_of_work,
        events=make_person_events(RecordingPublisher()),
        telemetry=telemetry,
        clock=lambda: datetime(2024, 6, 1, 12, 0),
    )


def _notes_for(
    sqlite_unit_of_work: Callable[[], SqlAlchemyCaseNoteUnitOfWork], person_identifier: str
) -> list[tuple[int | None, str]]:
    with sqlite_unit_of_work() as uow:
        notes = uow.repositories.notes.find(NoteFilter(person_identifier=person_identifier))
        return sorted((note.legacy_id, note.text) for note in notes)


def test_repeated_migration_replaces_legacy_notes(
    sqlite_unit_of_work: Callable[[], SqlAlchemyCaseNoteUnitOfWork],
) -> None:
    _seed_general_type(sqlite_unit_of_work)
    telemetry = RecordingTelemetry()
    sync = _sync(sqlite_unit_of_work, telemetry)

    sync.migrate_notes(PERSON, [make_migrate_request(101), make_migrate_request(102)])
    sync.migrate_notes(PERSON, [make_migrate_request(101)])

    assert _notes_for(sqlite_unit_of_work, PERSON) == [(101, "Legacy note 101")]
    assert [event["replaced"] for event in telemetry.named("CaseNotesMigrated")] == [
        "false",
        "true",
    ]


def test_sync_update_keeps_id_and_archives(
    sqlite_unit_of_work: Callable[[], SqlAlchemyCaseNoteUnitOfWork],
) -> None:
    _seed_general_type(sqlite_unit_of_work)
    sync = _sync(sqlite_unit_of_work, RecordingTelemetry())

    created = sync.sync_note(make_sync_request(500))
    updated = sync.sync_note(make_sync_request(500, text="Corrected"))

    assert updated.action is SyncAction.UPDATED
    assert updated.id == created.id
    assert _notes_for(sqlite_unit_of_work, PERSON) == [(500, "Corrected")]
    with sqlite_unit_of_work() as uow:
        (archived,) = uow.repositories.deleted_notes.find_by_case_note_id(created.id)
    assert archived.cause is DeletionCause.UPDATE


def test_merge_moves_notes_between_people(
    sqlite_unit_of_work: Callable[[], SqlAlchemyCaseNoteUnitOfWork],
) -> None:
    _seed_general_type(sqlite_unit_of_work)
    sync = _sync(sqlite_unit_of_work, RecordingTelemetry())
    sync.migrate_notes(OTHER, [make_migrate_request(101), make_migrate_request(102)])
    merge = CaseNoteMerge(
        unit_of_work_factory=sqlite_unit_of_work,
        events=make_person_events(RecordingPublisher()),
    )

    moved = merge.merge(PERSON, OTHER)

    assert len(moved) == 2
    assert _notes_for(sqlite_unit_of_work, OTHER) == []
    assert _notes_for(sqlite_unit_of_work, PERSON) == [
        (101, "Legacy note 101"),
        (102, "Legacy note 102"),
    ]


def _note_graph(
    sqlite_unit_of_work: Callable[[], SqlAlchemyCaseNoteUnitOfWork], person_identifier: str
) -> dict[UUID, list[UUID]]:
    with sqlite_unit_of_work() as uow:
        notes = uow.repositories.notes.find(NoteFilter(person_identifier=person_identifier))
        return {note.id: [amendment.id for amendment in note.amendments] for note in notes}


def test_failed_merge_leaves_both_people_untouched(
    sqlite_unit_of_work: Callable[[], SqlAlchemyCaseNoteUnitOfWork],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    _seed_general_type(sqlite_unit_of_work)
    sync = _sync(sqlite_unit_of_work, RecordingTelemetry())
    requests = [
        replace(
            make_migrate_request(legacy_id),
            amendments=tuple(
                AmendmentRequest(
                    text=f"amendment {day}",
                    author=make_author("AMENDER"),
                    created_date_time=datetime(2023, 6, day),
                )
                for day in (2, 3)
            ),
        )
        for legacy_id in (101, 102, 103)
    ]
    sync.migrate_notes(OTHER, requests)
    before = _note_graph(sqlite_unit_of_work, OTHER)
    publisher = RecordingPublisher()
    merge = CaseNoteMerge(
        unit_of_work_factory=sqlite_unit_of_work, events=make_person_events(publisher)
    )

    rehome = Note.rehome
    calls: list[UUID] = []

    def failing_rehome(note: Note, person_identifier: str) -> Note:
        calls.append(note.id)
        if len(calls) == 2:
            raise RuntimeError("storage failure")
        return rehome(note, person_identifier)

    monkeypatch.setattr(Note, "rehome", failing_rehome)
    with pytest.raises(RuntimeError, match="storage failure"):
        merge.merge(PERSON, OTHER)

    assert len(before) == 3
    assert all(len(amendment_ids) == 2 for amendment_ids in before.values())
    assert _note_graph(sqlite_unit_of_work, OTHER) == before
    assert _note_graph(sqlite_unit_of_work, PERSON) == {}
    with sqlite_unit_of_work() as uow:
        for note_id in before:
            assert uow.repositories.deleted_notes.find_by_case_note_id(note_id) == []
    assert publisher.events == []

    monkeypatch.setattr(Note, "rehome", rehome)
    merge.merge(PERSON, OTHER)

    assert _note_graph(sqlite_unit_of_work, PERSON) == before
    assert _note_graph(sqlite_unit_of_work, OTHER) == {}
    assert len(publisher.events) == 3
