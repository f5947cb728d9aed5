"""Domain events consumed and produced by the case notes service."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping
    from uuid import UUID

    from casenotes.domain.model import Note, Source
    from casenotes.domain.ports.events import DomainEventPublisher, Telemetry

log = getLogger(__name__)

PRISONER_MERGED: Final[str] = "prison-offender-events.prisoner.merged"
RECONCILE_ALERTS: Final[str] = "case-notes.alerts.reconciliation"
ALERT_CREATED: Final[str] = "person.alert.created"
ALERT_INACTIVE: Final[str] = "person.alert.inactive"

NOMS_NUMBER_TYPE: Final[str] = "NOMS"
PERSON_EVENT_PREFIX: Final[str] = "person.case-note."


def _now() -> datetime:
    return datetime.now().astimezone()


@dataclass(frozen=True, slots=True)
class Identifier:
    type: str
    value: str


@dataclass(frozen=True, slots=True)
class PersonReference:
    identifiers: tuple[Identifier, ...] = ()

    @classmethod
    def with_identifier(cls, prison_number: str) -> PersonReference:
        return cls((Identifier(NOMS_NUMBER_TYPE, prison_number),))

    def get(self, key: str) -> str | None:
        return next((item.value for item in self.identifiers if item.type == key), None)

    def noms_number(self) -> str | None:
        return self.get(NOMS_NUMBER_TYPE)


@dataclass(frozen=True, slots=True, kw_only=True)
class DomainEvent:
    occurred_at: datetime
    event_type: str
    description: str
    additional_information: Mapping[str, object] = field(default_factory=dict)
    person_reference: PersonReference = field(default_factory=PersonReference)
    detail_url: str | None = None
    version: int = 1


class PersonCaseNoteEventType(StrEnum):
    CREATED = "CREATED"
    UPDATED = "UPDATED"
    DELETED = "DELETED"
    MOVED = "MOVED"


@dataclass(frozen=True, slots=True, kw_only=True)
class PersonCaseNoteEvent:
    """Change notification for one note, published once the change has committed."""

    event_type: PersonCaseNoteEventType
    person_identifier: str
    id: UUID
    legacy_id: int | None
    type: str
    sub_type: str
    source: Source
    sync_to_nomis: bool
    system_generated: bool
    previous_person_identifier: str | None = None

    @classmethod
    def for_note(
        cls,
        note: Note,
        event_type: PersonCaseNoteEventType,
        *,
        source: Source,
        previous_person_identifier: str | None = None,
    ) -> PersonCaseNoteEvent:
        return cls(
            event_type=event_type,
            person_identifier=note.person_identifier,
            id=note.id,
            legacy_id=note.legacy_id,
            type=note.sub_type.parent_code,
            sub_type=note.sub_type.code,
            source=source,
            sync_to_nomis=note.sub_type.sync_to_nomis,
            system_generated=note.system_generated,
            previous_person_identifier=previous_person_identifier,
        )

    @property
    def event_name(self) -> str:
        return PERSON_EVENT_PREFIX + self.event_type.value.lower()

    @property
    def detail_path(self) -> str:
        return f"/case-notes/{self.person_identifier}/{self.id}"

    def additional_information(self) -> dict[str, object]:
        info: dict[str, object] = {
            "id": str(self.id),
            "legacyId": self.legacy_id,
            "type": self.type,
            "subType": self.sub_type,
            "source": self.source.value,
            "syncToNomis": self.sync_to_nomis,
            "systemGenerated": self.system_generated,
        }
        if self.previous_person_identifier is not None:
            info["previousNomsNumber"] = self.previous_person_identifier
        return info

    def telemetry_properties(self) -> dict[str, str]:
        return {
            "eventType": self.event_name,
            "personIdentifier": self.person_identifier,
            "id": str(self.id),
            "legacyId": str(self.legacy_id),
            "type": self.type,
            "subType": self.sub_type,
            "source": self.source.value,
        }

    def as_domain_event(self, base_url: str, *, occurred_at: datetime | None = None) -> DomainEvent:
        return DomainEvent(
            occurred_at=occurred_at or _now(),
            event_type=self.event_name,
            detail_url=base_url.rstrip("/") + self.detail_path,
            description=f"A case note has been {self.event_type.value.lower()}",
            additional_information=self.additional_information(),
            person_reference=PersonReference.with_identifier(self.person_identifier),
        )


class PersonEventPublisher:
    """Routes committed note changes to the event topic or, when switched off, to telemetry."""

    def __init__(
        self,
        *,
        publisher: DomainEventPublisher | None,
        telemetry: Telemetry,
        base_url: str,
        enabled: bool,
        clock: Callable[[], datetime] = _now,
    ) -> None:
        self._publisher = publisher
        self._telemetry = telemetry
        self._base_url = base_url
        self._enabled = enabled
        self._clock = clock

    def publish_all(self, events: Iterable[PersonCaseNoteEvent]) -> None:
        for event in events:
            self.publish(event)

    def publish(self, event: PersonCaseNoteEvent) -> None:
        if self._enabled and self._publisher is not None:
            domain_event = event.as_domain_event(self._base_url, occurred_at=self._clock())
            self._publisher.publish(domain_event)
        else:
            log.debug("Person event publishing disabled, recording %s", event.event_name)
            self._telemetry.track_event(event.event_name, event.telemetry_properties())
