"""Soft deletion: snapshot a note into the archive, then remove it."""

from __future__ import annotations

from typing import TYPE_CHECKING

from casenotes.domain.model import DeletedCaseNote

if TYPE_CHECKING:
    from datetime import datetime

    from casenotes.domain.model import DeletionCause, Note, System
    from casenotes.domain.ports.unit_of_work import CaseNoteRepositories


def archive_and_remove(
    repositories: CaseNoteRepositories,
    note: Note,
    *,
    deleted_at: datetime,
    deleted_by: str,
    system: System,
    cause: DeletionCause,
    reason: str | None = None,
) -> DeletedCaseNote:
    archived = DeletedCaseNote.of(
        note,
        deleted_at=deleted_at,
        deleted_by=deleted_by,
        system=system,
        cause=cause,
        reason=reason,
    )
    repositories.deleted_notes.add(archived)
    repositories.notes.remove(note)
    return archived


def rehome_all(
    repositories: CaseNoteRepositories,
    notes: list[Note],
    to_identifier: str,
    *,
    deleted_at: datetime,
    deleted_by: str,
    system: System,
    cause: DeletionCause,
) -> list[Note]:
    """Replace ``notes`` with copies filed under ``to_identifier``.

    The originals are archived and removed and flushed before the copies are added,
    since the copies reuse their ids and legacy ids.
    """

    for note in notes:
        archive_and_remove(
            repositories,
            note,
            deleted_at=deleted_at,
            deleted_by=deleted_by,
            system=system,
            cause=cause,
        )
    repositories.notes.flush()
    moved = [note.rehome(to_identifier) for note in notes]
    repositories.notes.add_all(moved)
    return moved
