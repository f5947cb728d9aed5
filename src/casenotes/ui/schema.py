"""Pydantic models for sync and migration requests read from JSON files."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003
from uuid import UUID  # noqa: TC003

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from casenotes.domain.model import Source
from casenotes.domain.sync import (
    AmendmentRequest,
    Author,
    MigrateCaseNoteRequest,
    SyncCaseNoteRequest,
)


class RequestBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class AuthorPayload(RequestBaseModel):
    username: str = Field(min_length=1, max_length=80)
    user_id: str = Field(alias="userId", min_length=1, max_length=64)
    first_name: str = Field(alias="firstName", min_length=1)
    last_name: str = Field(default="", alias="lastName")

    def to_domain(self) -> Author:
        return Author(
            username=self.username,
            user_id=self.user_id,
            first_name=self.first_name,
            last_name=self.last_name,
        )


class AmendmentPayload(RequestBaseModel):
    text: str = Field(min_length=1)
    author: AuthorPayload
    created_date_time: datetime = Field(alias="createdDateTime")

    def to_domain(self) -> AmendmentRequest:
        return AmendmentRequest(
            text=self.text,
            author=self.author.to_domain(),
            created_date_time=self.created_date_time,
        )


class MigrateCaseNotePayload(RequestBaseModel):
    legacy_id: int = Field(alias="legacyId")
    location_id: str = Field(alias="locationId", min_length=1, max_length=6)
    type: str = Field(min_length=1, max_length=12)
    sub_type: str = Field(alias="subType", min_length=1, max_length=12)
    occurrence_date_time: datetime = Field(alias="occurrenceDateTime")
    text: str = Field(min_length=1)
    system_generated: bool = Field(default=False, alias="systemGenerated")
    author: AuthorPayload
    created_date_time: datetime = Field(alias="createdDateTime")
    created_by_username: str = Field(alias="createdByUsername", min_length=1)
    source: Source = Source.NOMIS
    amendments: list[AmendmentPayload] = Field(default_factory=list["AmendmentPayload"])

    def _fields(self) -> dict[str, object]:
        return {
            "legacy_id": self.legacy_id,
            "location_id": self.location_id,
            "type": self.type,
            "sub_type": self.sub_type,
            "occurrence_date_time": self.occurrence_date_time,
            "text": self.text,
            "system_generated": self.system_generated,
            "author": self.author.to_domain(),
            "created_date_time": self.created_date_time,
            "created_by_username": self.created_by_username,
            "source": self.source,
            "amendments": tuple(amendment.to_domain() for amendment in self.amendments),
        }

    def to_domain(self) -> MigrateCaseNoteRequest:
        return MigrateCaseNoteRequest(**self._fields())  # pyright: ignore[reportArgumentType]


class SyncCaseNotePayload(MigrateCaseNotePayload):
    id: UUID | None = None
    person_identifier: str = Field(alias="personIdentifier", min_length=1, max_length=12)

    def to_sync_request(self) -> SyncCaseNoteRequest:
        return SyncCaseNoteRequest(
            **self._fields(),  # pyright: ignore[reportArgumentType]
            person_identifier=self.person_identifier,
            id=self.id,
        )


MIGRATE_REQUESTS = TypeAdapter(list[MigrateCaseNotePayload])
