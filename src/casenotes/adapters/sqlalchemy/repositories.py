"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING

from sqlalchemy import and_, delete, exists, func, insert, or_, select, true
from sqlalchemy.exc import IntegrityError

from casenotes.adapters.sqlalchemy.mappings import (
    case_note_amendment_table,
    case_note_legacy_id_seq,
    case_note_legacy_id_table,
    case_note_sub_type_table,
    case_note_table,
    deleted_case_note_table,
)
from casenotes.domain.errors import DuplicateLegacyIdError
from casenotes.domain.model import DeletedCaseNote, Note, SubType

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable, Iterator
    from uuid import UUID

    from sqlalchemy import ColumnElement
    from sqlalchemy.orm import Session

    from casenotes.domain.filters import CreatedBetween, NoteFilter
    from casenotes.domain.model import TypeKey
    from casenotes.domain.ports.persistence import (
        DeletedNoteRepository,
        NoteRepository,
        SubTypeRepository,
    )

_notes = case_note_table.c
_amendments = case_note_amendment_table.c
_sub_types = case_note_sub_type_table.c


@contextmanager
def translate_integrity_errors() -> Iterator[None]:
    """Surface legacy id collisions as :class:`DuplicateLegacyIdError`."""

    try:
        yield
    except IntegrityError as exc:
        if "legacy_id" in str(exc.orig):
            raise DuplicateLegacyIdError(str(exc.orig)) from exc
        raise


def _type_clause(type_sub_types: dict[str, frozenset[str]]) -> ColumnElement[bool]:
    return or_(
        *(
            and_(
                _sub_types._type_code == parent,  # noqa: SLF001
                _sub_types.code.in_(sorted(codes)) if codes else true(),
            )
            for parent, codes in sorted(type_sub_types.items())
        )
    )


def _created_clause(window: CreatedBetween) -> ColumnElement[bool]:
    amended_within = exists().where(
        _amendments._case_note_id == _notes.id,  # noqa: SLF001
        _amendments._created_at.between(window.start, window.end),  # noqa: SLF001
    )
    created_within = _notes._created_at.between(window.start, window.end)  # noqa: SLF001
    clause = or_(created_within, amended_within)
    if not window.include_sync_to_nomis:
        clause = and_(clause, _sub_types.sync_to_nomis.is_(False))
    return clause


def note_filter_clauses(note_filter: NoteFilter) -> list[ColumnElement[bool]]:  # noqa: C901
    """Translate a :class:`NoteFilter` into WHERE clauses over notes joined to sub-types."""

    clauses: list[ColumnElement[bool]] = []
    if note_filter.person_identifier is not None:
        clauses.append(
            func.lower(_notes.person_identifier) == note_filter.person_identifier.lower()
        )
    if not note_filter.include_sensitive:
        clauses.append(_sub_types.sensitive.is_(False))
    if note_filter.type_sub_types:
        clauses.append(_type_clause(dict(note_filter.type_sub_types)))
    if note_filter.created_between is not None:
        clauses.append(_created_clause(note_filter.created_between))
    if note_filter.occurred_after is not None:
        clauses.append(_notes.occurred_at >= note_filter.occurred_after)
    if note_filter.occurred_before is not None:
        clauses.append(_notes.occurred_at <= note_filter.occurred_before)
    if note_filter.location_id is not None:
        clauses.append(_notes.location_id == note_filter.location_id)
    if note_filter.author_username is not None:
        clauses.append(_notes.author_username == note_filter.author_username)
    if note_filter.ids is not None:
        clauses.append(_notes.id.in_(note_filter.ids))
    if note_filter.legacy_ids is not None:
        clauses.append(_notes.legacy_id.in_(note_filter.legacy_ids))
    if note_filter.legacy_only:
        clauses.append(_sub_types.sync_to_nomis.is_(True))
    return clauses


class SqlAlchemySubTypeRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: SubType) -> None:
        self.session.add(entity)

    def get(self, key: TypeKey) -> SubType | None:
        stmt = select(SubType).where(
            _sub_types._type_code == key.parent_code,  # noqa: SLF001
            _sub_types.code == key.code,
        )
        return self.session.execute(stmt).scalars().unique().one_or_none()

    def find_by_keys(self, keys: Collection[TypeKey]) -> dict[TypeKey, SubType]:
        if not keys:
            return {}
        stmt = select(SubType).where(
            or_(
                *(
                    and_(
                        _sub_types._type_code == key.parent_code,  # noqa: SLF001
                        _sub_types.code == key.code,
                    )
                    for key in sorted(keys)
                )
            )
        )
        found = self.session.execute(stmt).scalars().unique()
        return {sub_type.key: sub_type for sub_type in found}


class SqlAlchemyNoteRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Note) -> None:
        self.session.add(entity)

    def add_all(self, notes: Iterable[Note]) -> None:
        self.session.add_all(list(notes))

    def get(self, note_id: UUID) -> Note | None:
        return self.session.get(Note, note_id)

    def get_by_legacy_id(self, legacy_id: int) -> Note | None:
        stmt = select(Note).where(_notes.legacy_id == legacy_id)
        return self.session.execute(stmt).scalars().unique().one_or_none()

    def find(self, note_filter: NoteFilter) -> list[Note]:
        stmt = (
            select(Note)
            .join(
                case_note_sub_type_table,
                _notes._sub_type_id == _sub_types.id,  # noqa: SLF001
            )
            .where(*note_filter_clauses(note_filter))
            .order_by(_notes.occurred_at, _notes.id)
        )
        return list(self.session.execute(stmt).scalars().unique())

    def remove(self, note: Note) -> None:
        self.session.delete(note)

    def next_legacy_id(self) -> int:
        """Allocate a legacy id; values are never handed out twice."""

        if self.session.get_bind().dialect.supports_sequences:
            next_value = select(case_note_legacy_id_seq.next_value())
            return int(self.session.execute(next_value).scalar_one())

        result = self.session.execute(insert(case_note_legacy_id_table))
        primary_key = result.inserted_primary_key
        if primary_key is None:
            raise RuntimeError("Legacy id allocation returned no key")
        allocated = int(primary_key[0])
        self.session.execute(
            delete(case_note_legacy_id_table).where(case_note_legacy_id_table.c.id < allocated)
        )
        return allocated

    def flush(self) -> None:
        with translate_integrity_errors():
            self.session.flush()


class SqlAlchemyDeletedNoteRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: DeletedCaseNote) -> None:
        self.session.add(entity)

    def find_by_case_note_id(self, case_note_id: UUID) -> list[DeletedCaseNote]:
        stmt = (
            select(DeletedCaseNote)
            .where(deleted_case_note_table.c.case_note_id == case_note_id)
            .order_by(deleted_case_note_table.c.deleted_at)
        )
        return list(self.session.execute(stmt).scalars())


if TYPE_CHECKING:
    _sub_type_check: type[SubTypeRepository] = SqlAlchemySubTypeRepository
    _note_check: type[NoteRepository] = SqlAlchemyNoteRepository
    _deleted_check: type[DeletedNoteRepository] = SqlAlchemyDeletedNoteRepository
