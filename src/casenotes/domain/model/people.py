"""People resolved from upstream services."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True, kw_only=True)
class UserDetails:
    username: str
    active: bool
    name: str
    auth_source: str
    user_id: str
    active_case_load_id: str | None = None
    uuid: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class PrisonerDetails:
    prisoner_number: str
    prison_id: str


@dataclass(frozen=True, slots=True, kw_only=True)
class PrisonSwitch:
    prison_code: str
    description: str
