"""Archive of deleted case notes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .base import new_id
from .enums import DeletionCause, System

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from .note import Amendment, Note


def _amendment_detail(amendment: Amendment) -> dict[str, object]:
    return {
        "id": str(amendment.id),
        "author_username": amendment.author_username,
        "author_name": amendment.author_name,
        "author_user_id": amendment.author_user_id,
        "text": amendment.text,
        "system": amendment.system.value,
        "created_at": amendment.created_at.isoformat(),
        "created_by": amendment.created_by,
    }


def note_detail(note: Note) -> dict[str, object]:
    """Snapshot the full note state (amendments included) as JSON-compatible data."""

    return {
        "id": str(note.id),
        "person_identifier": note.person_identifier,
        "type": note.sub_type.parent_code,
        "sub_type": note.sub_type.code,
        "occurred_at": note.occurred_at.isoformat(),
        "location_id": note.location_id,
        "author_username": note.author_username,
        "author_user_id": note.author_user_id,
        "author_name": note.author_name,
        "text": note.text,
        "system_generated": note.system_generated,
        "system": note.system.value,
        "legacy_id": note.legacy_id,
        "created_at": note.created_at.isoformat(),
        "created_by": note.created_by,
        "amendments": [_amendment_detail(amendment) for amendment in note.amendments],
    }


@dataclass(eq=False, kw_only=True)
class DeletedCaseNote:
    """Write-once snapshot of a note taken just before it is removed."""

    person_identifier: str
    case_note_id: UUID
    legacy_id: int | None
    case_note: dict[str, object]
    deleted_at: datetime
    deleted_by: str
    system: System
    cause: DeletionCause
    reason: str | None = None
    id: UUID = field(default_factory=new_id)

    @classmethod
    def of(
        cls,
        note: Note,
        *,
        deleted_at: datetime,
        deleted_by: str,
        system: System,
        cause: DeletionCause,
        reason: str | None = None,
    ) -> DeletedCaseNote:
        return cls(
            person_identifier=note.person_identifier,
            case_note_id=note.id,
            legacy_id=note.legacy_id,
            case_note=note_detail(note),
            deleted_at=deleted_at,
            deleted_by=deleted_by,
            system=system,
            cause=cause,
            reason=reason,
        )
