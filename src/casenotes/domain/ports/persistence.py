"""Ports for persisting case notes and reference data."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable
    from uuid import UUID

    from casenotes.domain.filters import NoteFilter
    from casenotes.domain.model import DeletedCaseNote, Note, SubType, TypeKey


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class SubTypeRepository(Repository["SubType"], Protocol):
    """Lookup of case note sub-types by their (parent, code) key."""

    def get(self, key: TypeKey) -> SubType | None: ...

    def find_by_keys(self, keys: Collection[TypeKey]) -> dict[TypeKey, SubType]: ...


@runtime_checkable
class NoteRepository(Repository["Note"], Protocol):
    """Persistence contract for notes and their amendments."""

    def add_all(self, notes: Iterable[Note]) -> None: ...

    def get(self, note_id: UUID) -> Note | None: ...

    def get_by_legacy_id(self, legacy_id: int) -> Note | None: ...

    def find(self, note_filter: NoteFilter) -> list[Note]: ...

    def remove(self, note: Note) -> None: ...

    def next_legacy_id(self) -> int: ...

    def flush(self) -> None: ...


@runtime_checkable
class DeletedNoteRepository(Repository["DeletedCaseNote"], Protocol):
    """Write-once archive of deleted notes."""

    def find_by_case_note_id(self, case_note_id: UUID) -> list[DeletedCaseNote]: ...
