"""Convert between domain events and their notification envelope."""

from __future__ import annotations

from casenotes.domain.events import DomainEvent, Identifier, PersonReference

from .schema import (
    EVENT_TYPE_ATTRIBUTE,
    DomainEventPayload,
    IdentifierPayload,
    MessageAttribute,
    Notification,
    PersonReferencePayload,
)


def to_payload(event: DomainEvent) -> DomainEventPayload:
    return DomainEventPayload(
        occurred_at=event.occurred_at,
        event_type=event.event_type,
        detail_url=event.detail_url,
        description=event.description,
        additional_information=dict(event.additional_information),
        person_reference=PersonReferencePayload(
            identifiers=[
                IdentifierPayload(type=item.type, value=item.value)
                for item in event.person_reference.identifiers
            ]
        ),
        version=event.version,
    )


def from_payload(payload: DomainEventPayload) -> DomainEvent:
    return DomainEvent(
        occurred_at=payload.occurred_at,
        event_type=payload.event_type,
        detail_url=payload.detail_url,
        description=payload.description,
        additional_information=payload.additional_information,
        person_reference=PersonReference(
            tuple(
                Identifier(item.type, item.value)
                for item in payload.person_reference.identifiers
            )
        ),
        version=payload.version,
    )


def to_notification(event: DomainEvent) -> Notification:
    message = to_payload(event).model_dump_json(by_alias=True, exclude_none=True)
    return Notification(
        message=message,
        attributes={EVENT_TYPE_ATTRIBUTE: MessageAttribute(value=event.event_type)},
    )


def parse_notification(raw: str | bytes) -> DomainEvent:
    """Unwrap an inbound notification into the domain event it carries."""

    notification = Notification.model_validate_json(raw)
    return from_payload(DomainEventPayload.model_validate_json(notification.message))
