"""Ingest and mirror case notes owned by the legacy prison system.

Every operation runs in a single unit of work; type validation happens before any write,
so a rejected batch leaves the store untouched.
"""

from __future__ import annotations

import re
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING, Final

from casenotes.domain.deletion import archive_and_remove, rehome_all
from casenotes.domain.errors import CaseNoteValidationError, DuplicateLegacyIdError
from casenotes.domain.events import PersonCaseNoteEvent, PersonCaseNoteEventType
from casenotes.domain.filters import NoteFilter
from casenotes.domain.model import (
    DeletionCause,
    Note,
    Source,
    System,
    TypeKey,
    stamp_created,
    system_for,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Collection, Iterable, Sequence
    from uuid import UUID

    from casenotes.domain.events import PersonEventPublisher
    from casenotes.domain.model import SubType
    from casenotes.domain.ports.events import Telemetry
    from casenotes.domain.ports.unit_of_work import CaseNoteRepositories, CaseNoteUnitOfWork

log = getLogger(__name__)

SYNC_USERNAME: Final[str] = "SYS"
OWNERSHIP_CONFLICT: Final[str] = (
    "Case note belongs to another prisoner or prisoner records have been merged"
)

_WHITESPACE = re.compile(r"\s+|_")
_NAME_PARTS = re.compile(r"(?<=[-’\s])|(?=[-’\s])")


def format_display_name(value: str) -> str:
    """``"JOHN o'brien-SMITH"`` -> ``"John O'brien-Smith"``."""

    parts = _NAME_PARTS.split(_WHITESPACE.sub(" ", value))
    return "".join(part[:1].upper() + part[1:].lower() for part in parts).strip()


@dataclass(frozen=True, slots=True, kw_only=True)
class Author:
    username: str
    user_id: str
    first_name: str
    last_name: str = ""

    @property
    def display_name(self) -> str:
        return format_display_name(f"{self.first_name} {self.last_name}")


@dataclass(frozen=True, slots=True, kw_only=True)
class AmendmentRequest:
    text: str
    author: Author
    created_date_time: datetime


@dataclass(frozen=True, slots=True, kw_only=True)
class MigrateCaseNoteRequest:
    legacy_id: int
    location_id: str
    type: str
    sub_type: str
    occurrence_date_time: datetime
    text: str
    system_generated: bool
    author: Author
    created_date_time: datetime
    created_by_username: str
    source: Source
    amendments: tuple[AmendmentRequest, ...] = ()

    @property
    def type_key(self) -> TypeKey:
        return TypeKey(self.type, self.sub_type)


@dataclass(frozen=True, slots=True, kw_only=True)
class SyncCaseNoteRequest(MigrateCaseNoteRequest):
    person_identifier: str
    id: UUID | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class MoveCaseNotesRequest:
    from_person_identifier: str
    to_person_identifier: str
    case_note_ids: frozenset[UUID] = field(default_factory=frozenset)


@dataclass(frozen=True, slots=True)
class MigrationResult:
    id: UUID
    legacy_id: int | None


class SyncAction(StrEnum):
    CREATED = "CREATED"
    UPDATED = "UPDATED"


@dataclass(frozen=True, slots=True)
class SyncResult:
    id: UUID
    legacy_id: int | None
    action: SyncAction


def _describe_keys(keys: Iterable[TypeKey]) -> str:
    grouped: dict[str, list[str]] = defaultdict(list)
    for key in sorted(keys):
        grouped[key.parent_code].append(key.code)
    body = ", ".join(f"{parent}:[{', '.join(codes)}]" for parent, codes in grouped.items())
    return f"{{ {body} }}"


def sync_types(
    repositories: CaseNoteRepositories,
    keys: Collection[TypeKey],
    *,
    require_sync: bool = True,
) -> dict[TypeKey, SubType]:
    """Resolve ``keys`` in one lookup; all must exist and, by default, be mirrored to NOMIS."""

    found = repositories.sub_types.find_by_keys(keys)
    missing = set(keys) - found.keys()
    if missing:
        raise CaseNoteValidationError(f"Case note types missing: {_describe_keys(missing)}")
    not_synced = [key for key, sub_type in found.items() if not sub_type.sync_to_nomis]
    if require_sync and not_synced:
        raise CaseNoteValidationError(
            f"Case note types are not sync to nomis types: {_describe_keys(not_synced)}"
        )
    return found


def note_from_request(
    request: MigrateCaseNoteRequest,
    person_identifier: str,
    sub_type: SubType,
    *,
    id: UUID | None = None,  # noqa: A002
) -> Note:
    extra = {"id": id} if id is not None else {}
    note = Note(
        person_identifier=person_identifier,
        sub_type=sub_type,
        occurred_at=request.occurrence_date_time,
        location_id=request.location_id,
        author_username=request.author.username,
        author_user_id=request.author.user_id,
        author_name=request.author.display_name,
        text=request.text,
        created=stamp_created(request.created_by_username, at=request.created_date_time),
        system_generated=request.system_generated,
        system=system_for(request.source),
        legacy_id=request.legacy_id,
        **extra,
    )
    for amendment in request.amendments:
        note.add_amendment(
            author_username=amendment.author.username,
            author_name=amendment.author.display_name,
            author_user_id=amendment.author.user_id,
            text=amendment.text,
            created=stamp_created(amendment.author.username, at=amendment.created_date_time),
            system=System.NOMIS,
        )
    return note


def _note_properties(note: Note) -> dict[str, str]:
    return {
        "id": str(note.id),
        "type": note.sub_type.parent_code,
        "subType": note.sub_type.code,
        "personIdentifier": note.person_identifier,
    }


class CaseNoteSync:
    def __init__(
        self,
        *,
        unit_of_work_factory: Callable[[], CaseNoteUnitOfWork],
        events: PersonEventPublisher,
        telemetry: Telemetry,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._unit_of_work_factory = unit_of_work_factory
        self._events = events
        self._telemetry = telemetry
        self._clock = clock

    def migrate_notes(
        self, person_identifier: str, requests: Sequence[MigrateCaseNoteRequest]
    ) -> list[MigrationResult]:
        """Bulk-load a person's legacy notes.

        When the batch collides with already migrated legacy ids, the person's legacy notes
        are dropped and the batch loaded again in a fresh unit of work.
        """

        replaced = False
        try:
            created = self._migrate(person_identifier, requests, replace=False)
        except DuplicateLegacyIdError:
            log.info("Legacy id conflict migrating %s, replacing legacy notes", person_identifier)
            created = self._migrate(person_identifier, requests, replace=True)
            replaced = True

        self._telemetry.track_event(
            "CaseNotesMigrated",
            {
                "personIdentifier": person_identifier,
                "count": str(len(requests)),
                "replaced": str(replaced).lower(),
            },
        )
        return [MigrationResult(note.id, note.legacy_id) for note in created]

    def _migrate(
        self,
        person_identifier: str,
        requests: Sequence[MigrateCaseNoteRequest],
        *,
        replace: bool,
    ) -> list[Note]:
        with self._unit_of_work_factory() as uow:
            repositories = uow.repositories
            types = sync_types(repositories, {request.type_key for request in requests})
            if replace:
                for note in repositories.notes.find(
                    NoteFilter(person_identifier=person_identifier, legacy_only=True)
                ):
                    repositories.notes.remove(note)
                repositories.notes.flush()
            notes = [
                note_from_request(request, person_identifier, types[request.type_key])
                for request in requests
            ]
            repositories.notes.add_all(notes)
            repositories.notes.flush()
            uow.commit()
        return notes

    def sync_note(self, request: SyncCaseNoteRequest) -> SyncResult:
        with self._unit_of_work_factory() as uow:
            repositories = uow.repositories
            sub_type = sync_types(repositories, {request.type_key}, require_sync=False)[
                request.type_key
            ]
            existing = (
                repositories.notes.get(request.id)
                if request.id is not None
                else repositories.notes.get_by_legacy_id(request.legacy_id)
            )
            if existing is not None:
                if existing.person_identifier != request.person_identifier:
                    raise CaseNoteValidationError(OWNERSHIP_CONFLICT)
                archive_and_remove(
                    repositories,
                    existing,
                    deleted_at=self._clock(),
                    deleted_by=SYNC_USERNAME,
                    system=System.NOMIS,
                    cause=DeletionCause.UPDATE,
                )
                repositories.notes.flush()
            note = note_from_request(
                request,
                request.person_identifier,
                sub_type,
                id=existing.id if existing is not None else request.id,
            )
            repositories.notes.add(note)
            uow.commit()

        action = SyncAction.CREATED if existing is None else SyncAction.UPDATED
        self._events.publish(
            PersonCaseNoteEvent.for_note(
                note, PersonCaseNoteEventType(action.value), source=Source.NOMIS
            )
        )
        properties = _note_properties(note)
        if existing is not None:
            properties["previousId"] = str(existing.id)
        self._telemetry.track_event("CaseNoteSynced", properties)
        return SyncResult(note.id, note.legacy_id, action)

    def delete_case_note(self, case_note_id: UUID) -> None:
        with self._unit_of_work_factory() as uow:
            note = uow.repositories.notes.get(case_note_id)
            if note is None:
                return
            archive_and_remove(
                uow.repositories,
                note,
                deleted_at=self._clock(),
                deleted_by=SYNC_USERNAME,
                system=System.NOMIS,
                cause=DeletionCause.DELETE,
            )
            uow.commit()

        self._events.publish(
            PersonCaseNoteEvent.for_note(note, PersonCaseNoteEventType.DELETED, source=Source.NOMIS)
        )
        self._telemetry.track_event("CaseNoteDeletedViaSync", _note_properties(note))

    def move_case_notes(self, request: MoveCaseNotesRequest) -> list[Note]:
        if not request.case_note_ids:
            return []
        with self._unit_of_work_factory() as uow:
            notes = uow.repositories.notes.find(
                NoteFilter(
                    person_identifier=request.from_person_identifier,
                    ids=request.case_note_ids,
                )
            )
            if len(notes) != len(request.case_note_ids):
                raise CaseNoteValidationError(
                    f"Case notes not found for {request.from_person_identifier}"
                )
            moved = rehome_all(
                uow.repositories,
                notes,
                request.to_person_identifier,
                deleted_at=self._clock(),
                deleted_by=SYNC_USERNAME,
                system=System.NOMIS,
                cause=DeletionCause.MOVE,
            )
            uow.commit()

        self._events.publish_all(
            PersonCaseNoteEvent.for_note(
                note,
                PersonCaseNoteEventType.MOVED,
                source=Source.NOMIS,
                previous_person_identifier=request.from_person_identifier,
            )
            for note in moved
        )
        return moved

    def migration_results(self, legacy_ids: Collection[int]) -> list[MigrationResult]:
        if not legacy_ids:
            return []
        with self._unit_of_work_factory() as uow:
            notes = uow.repositories.notes.find(NoteFilter(legacy_ids=frozenset(legacy_ids)))
            return [MigrationResult(note.id, note.legacy_id) for note in notes]

