"""Pydantic models describing the alerts API payloads."""

from __future__ import annotations

from datetime import date, datetime  # noqa: TC003
from uuid import UUID  # noqa: TC003

from pydantic import BaseModel, ConfigDict, Field


class AlertsBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class CodedDescriptionPayload(AlertsBaseModel):
    code: str
    description: str


class CaseNoteAlertPayload(AlertsBaseModel):
    type: CodedDescriptionPayload
    sub_type: CodedDescriptionPayload = Field(alias="subType")
    prison_code: str | None = Field(default=None, alias="prisonCode")
    active_from: date = Field(alias="activeFrom")
    active_to: date | None = Field(default=None, alias="activeTo")
    created_at: datetime = Field(alias="createdAt")
    made_inactive_at: datetime | None = Field(default=None, alias="madeInactiveAt")


class CaseNoteAlertResponse(AlertsBaseModel):
    content: list[CaseNoteAlertPayload] = Field(default_factory=list["CaseNoteAlertPayload"])


class AlertCodePayload(AlertsBaseModel):
    alert_type_code: str = Field(alias="alertTypeCode")
    alert_type_description: str = Field(alias="alertTypeDescription")
    code: str
    description: str


class AlertPayload(AlertsBaseModel):
    alert_uuid: UUID = Field(alias="alertUuid")
    prison_number: str = Field(alias="prisonNumber")
    alert_code: AlertCodePayload = Field(alias="alertCode")
    active_from: date = Field(alias="activeFrom")
    active_to: date | None = Field(default=None, alias="activeTo")
    is_active: bool = Field(alias="isActive")
    created_at: datetime = Field(alias="createdAt")
    created_by: str = Field(alias="createdBy")
    active_to_last_set_at: datetime | None = Field(default=None, alias="activeToLastSetAt")
    active_to_last_set_by: str | None = Field(default=None, alias="activeToLastSetBy")
    made_inactive_at: datetime | None = Field(default=None, alias="madeInactiveAt")
    made_inactive_by: str | None = Field(default=None, alias="madeInactiveBy")


class PersonIdentifiersResponse(AlertsBaseModel):
    person_identifiers: list[str] = Field(default_factory=list[str], alias="personIdentifiers")
