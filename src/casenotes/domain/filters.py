"""Composable filter describing which notes a query should return.

Storage adapters translate a :class:`NoteFilter` into their own query language;
:meth:`NoteFilter.matches` gives the reference in-memory semantics.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime
    from uuid import UUID

    from .model import Note


@dataclass(frozen=True, slots=True)
class CreatedBetween:
    """Inclusive creation window matched against the note or any of its amendments."""

    start: datetime
    end: datetime
    include_sync_to_nomis: bool = True

    def contains(self, value: datetime) -> bool:
        return self.start <= value <= self.end


@dataclass(frozen=True, slots=True, kw_only=True)
class NoteFilter:
    person_identifier: str | None = None
    include_sensitive: bool = True
    # parent type code -> sub-type codes; an empty set accepts any sub-type of that parent
    type_sub_types: Mapping[str, frozenset[str]] = field(default_factory=dict)
    created_between: CreatedBetween | None = None
    occurred_after: datetime | None = None
    occurred_before: datetime | None = None
    location_id: str | None = None
    author_username: str | None = None
    ids: frozenset[UUID] | None = None
    legacy_ids: frozenset[int] | None = None
    legacy_only: bool = False

    def matches(self, note: Note) -> bool:  # noqa: PLR0911
        if (
            self.person_identifier is not None
            and note.person_identifier.lower() != self.person_identifier.lower()
        ):
            return False
        if not self.include_sensitive and note.sub_type.sensitive:
            return False
        if self.type_sub_types and not self._matches_type(note):
            return False
        if self.created_between is not None and not self._matches_created(note):
            return False
        if self.occurred_after is not None and note.occurred_at < self.occurred_after:
            return False
        if self.occurred_before is not None and note.occurred_at > self.occurred_before:
            return False
        if self.location_id is not None and note.location_id != self.location_id:
            return False
        if self.author_username is not None and note.author_username != self.author_username:
            return False
        if self.ids is not None and note.id not in self.ids:
            return False
        if self.legacy_ids is not None and note.legacy_id not in self.legacy_ids:
            return False
        return not (self.legacy_only and not is_legacy_note(note))

    def _matches_type(self, note: Note) -> bool:
        sub_codes = self.type_sub_types.get(note.sub_type.parent_code)
        if sub_codes is None:
            return False
        return not sub_codes or note.sub_type.code in sub_codes

    def _matches_created(self, note: Note) -> bool:
        window = self.created_between
        if window is None:
            return True
        if not window.include_sync_to_nomis and note.sub_type.sync_to_nomis:
            return False
        if window.contains(note.created_at):
            return True
        return any(window.contains(amendment.created_at) for amendment in note.amendments)


def is_legacy_note(note: Note) -> bool:
    """Whether the note came from, and is mirrored into, the legacy system."""

    return note.sub_type.sync_to_nomis
