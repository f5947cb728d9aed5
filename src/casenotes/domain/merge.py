"""Re-home case notes when two prisoner records are merged."""

from __future__ import annotations

from datetime import datetime
from logging import getLogger
from typing import TYPE_CHECKING, Final

from casenotes.domain.deletion import rehome_all
from casenotes.domain.events import PersonCaseNoteEvent, PersonCaseNoteEventType
from casenotes.domain.filters import NoteFilter
from casenotes.domain.model import DeletionCause, Source, System

if TYPE_CHECKING:
    from collections.abc import Callable

    from casenotes.domain.events import PersonEventPublisher
    from casenotes.domain.model import Note
    from casenotes.domain.ports.unit_of_work import CaseNoteUnitOfWork

log = getLogger(__name__)

MERGE_USERNAME: Final[str] = "SYS"


class CaseNoteMerge:
    def __init__(
        self,
        *,
        unit_of_work_factory: Callable[[], CaseNoteUnitOfWork],
        events: PersonEventPublisher,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._unit_of_work_factory = unit_of_work_factory
        self._events = events
        self._clock = clock

    def merge(self, noms_number: str, removed_noms_number: str) -> list[Note]:
        """Move every note of ``removed_noms_number`` to ``noms_number`` in one transaction."""

        if noms_number == removed_noms_number:
            return []
        with self._unit_of_work_factory() as uow:
            repositories = uow.repositories
            notes = repositories.notes.find(NoteFilter(person_identifier=removed_noms_number))
            if not notes:
                log.info("No case notes to merge from %s", removed_noms_number)
                return []
            moved = rehome_all(
                repositories,
                notes,
                noms_number,
                deleted_at=self._clock(),
                deleted_by=MERGE_USERNAME,
                system=System.DPS,
                cause=DeletionCause.MERGE,
            )
            uow.commit()

        log.info("Merged %s case notes from %s to %s", len(moved), removed_noms_number, noms_number)
        self._events.publish_all(
            PersonCaseNoteEvent.for_note(
                note,
                PersonCaseNoteEventType.MOVED,
                source=Source.DPS,
                previous_person_identifier=removed_noms_number,
            )
            for note in moved
        )
        return moved
