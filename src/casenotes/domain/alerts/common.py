"""Pieces shared by the alert case note workflows."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from enum import StrEnum
from typing import TYPE_CHECKING

from casenotes.domain.errors import MissingReferenceDataError
from casenotes.domain.filters import CreatedBetween, NoteFilter
from casenotes.domain.model import (
    ACTIVE_SUB_TYPE_CODE,
    ALERT_TYPE_CODE,
    INACTIVE_SUB_TYPE_CODE,
    TypeKey,
)

if TYPE_CHECKING:
    from casenotes.domain.model import SubType
    from casenotes.domain.ports.persistence import SubTypeRepository


class ActiveInactive(StrEnum):
    ACTIVE = ACTIVE_SUB_TYPE_CODE
    INACTIVE = INACTIVE_SUB_TYPE_CODE

    @property
    def key(self) -> TypeKey:
        return TypeKey(ALERT_TYPE_CODE, self.value)


def start_of_day(value: date) -> datetime:
    return datetime.combine(value, time.min)


def alert_notes_filter(person_identifier: str, from_date: date, to_date: date) -> NoteFilter:
    """Alert notes for a person recorded (or amended) from ``from_date`` through ``to_date``."""

    return NoteFilter(
        person_identifier=person_identifier,
        include_sensitive=True,
        type_sub_types={ALERT_TYPE_CODE: frozenset()},
        created_between=CreatedBetween(
            start_of_day(from_date),
            start_of_day(to_date + timedelta(days=1)),
        ),
    )


def require_alert_sub_types(repository: SubTypeRepository) -> dict[ActiveInactive, SubType]:
    found = repository.find_by_keys([status.key for status in ActiveInactive])
    sub_types = {status: found[status.key] for status in ActiveInactive if status.key in found}
    missing = [str(status.key) for status in ActiveInactive if status not in sub_types]
    if missing:
        raise MissingReferenceDataError(f"Alert case note types missing: {', '.join(missing)}")
    return sub_types
