"""Wire format of domain events and their notification envelope."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

EVENT_TYPE_ATTRIBUTE = "eventType"


class EventsBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class IdentifierPayload(EventsBaseModel):
    type: str
    value: str


class PersonReferencePayload(EventsBaseModel):
    identifiers: list[IdentifierPayload] = Field(default_factory=list["IdentifierPayload"])


class DomainEventPayload(EventsBaseModel):
    occurred_at: datetime = Field(alias="occurredAt")
    event_type: str = Field(alias="eventType")
    detail_url: str | None = Field(default=None, alias="detailUrl")
    description: str = ""
    additional_information: dict[str, Any] = Field(
        default_factory=dict[str, Any], alias="additionalInformation"
    )
    person_reference: PersonReferencePayload = Field(
        default_factory=PersonReferencePayload, alias="personReference"
    )
    version: int = 1


class MessageAttribute(EventsBaseModel):
    type: str = Field(default="String", alias="Type")
    value: str = Field(alias="Value")


class Notification(EventsBaseModel):
    message: str = Field(alias="Message")
    attributes: dict[str, MessageAttribute] = Field(
        default_factory=dict[str, MessageAttribute], alias="MessageAttributes"
    )

    @property
    def event_type(self) -> str | None:
        attribute = self.attributes.get(EVENT_TYPE_ATTRIBUTE)
        return attribute.value if attribute else None
