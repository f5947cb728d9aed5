"""Pydantic models for the prisoner search and prison API payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class PrisonsBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class PrisonerPayload(PrisonsBaseModel):
    prisoner_number: str = Field(alias="prisonerNumber")
    prison_id: str = Field(alias="prisonId")


class PrisonSwitchPayload(PrisonsBaseModel):
    prison_code: str = Field(alias="prisonId")
    description: str = Field(alias="prison")
