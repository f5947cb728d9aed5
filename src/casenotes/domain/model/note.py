"""Case notes and their amendments."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .base import new_id
from .enums import System

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from .audit import Created
    from .types import SubType


@dataclass(eq=False, kw_only=True)
class Amendment:
    """Append-only addendum to a note. Immutable once created."""

    note: Note = field(repr=False)
    author_username: str
    author_name: str
    author_user_id: str
    text: str
    created: Created
    system: System = System.DPS
    id: UUID = field(default_factory=new_id)

    @property
    def created_at(self) -> datetime:
        return self.created.at

    @property
    def created_by(self) -> str:
        return self.created.by

    def sort_key(self) -> tuple[datetime, str]:
        return (self.created.at, str(self.id))


@dataclass(eq=False, kw_only=True)
class Note:
    """A case note filed against a person.

    ``occurred_at`` is the effective date of what the note records, while ``created``
    is when it was recorded; backfilled and migrated notes routinely differ.
    """

    person_identifier: str
    sub_type: SubType
    occurred_at: datetime
    location_id: str
    author_username: str
    author_user_id: str
    author_name: str
    text: str
    created: Created
    system_generated: bool = False
    system: System = System.DPS
    legacy_id: int | None = None
    id: UUID = field(default_factory=new_id)
    version: int | None = field(default=None, repr=False)

    _amendments: list[Amendment] = field(default_factory=list["Amendment"], repr=False)

    @property
    def amendments(self) -> tuple[Amendment, ...]:
        return tuple(sorted(self._amendments, key=Amendment.sort_key))

    @property
    def created_at(self) -> datetime:
        return self.created.at

    @property
    def created_by(self) -> str:
        return self.created.by

    def add_amendment(
        self,
        *,
        author_username: str,
        author_name: str,
        author_user_id: str,
        text: str,
        created: Created,
        system: System = System.DPS,
        id: UUID | None = None,  # noqa: A002
    ) -> Amendment:
        amendment = Amendment(
            note=self,
            author_username=author_username,
            author_name=author_name,
            author_user_id=author_user_id,
            text=text,
            created=created,
            system=system,
            id=id or new_id(),
        )
        # a mapped back-reference may already have attached it
        if amendment not in self._amendments:
            self._amendments.append(amendment)
        return amendment

    def rehome(self, person_identifier: str) -> Note:
        """Return a copy filed under another person, keeping ids and audit values."""

        copy = Note(
            person_identifier=person_identifier,
            sub_type=self.sub_type,
            occurred_at=self.occurred_at,
            location_id=self.location_id,
            author_username=self.author_username,
            author_user_id=self.author_user_id,
            author_name=self.author_name,
            text=self.text,
            created=self.created,
            system_generated=self.system_generated,
            system=self.system,
            legacy_id=self.legacy_id,
            id=self.id,
        )
        for amendment in self.amendments:
            copy.add_amendment(
                author_username=amendment.author_username,
                author_name=amendment.author_name,
                author_user_id=amendment.author_user_id,
                text=amendment.text,
                created=amendment.created,
                system=amendment.system,
                id=amendment.id,
            )
        return copy
