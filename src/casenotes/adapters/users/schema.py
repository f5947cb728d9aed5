"""Pydantic models describing the manage users API payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class UserDetailsPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    username: str
    active: bool
    name: str
    auth_source: str = Field(alias="authSource")
    user_id: str = Field(alias="userId")
    active_case_load_id: str | None = Field(default=None, alias="activeCaseLoadId")
    uuid: str | None = None
