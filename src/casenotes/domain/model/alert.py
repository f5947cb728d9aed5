"""Alert records fetched from the alerts service.

Alerts are not owned here; they only drive the synthesis of alert case notes.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from uuid import UUID

ALERT_TYPE_CODE: Final[str] = "ALERT"
ACTIVE_SUB_TYPE_CODE: Final[str] = "ACTIVE"
INACTIVE_SUB_TYPE_CODE: Final[str] = "INACTIVE"

# Sub-types renamed on 2024-11-25; notes written before then carry the old wording.
CPC_RENAMED_AT: Final[datetime] = datetime.fromisoformat("2024-11-25T09:54:57.787788")
ONCR_RENAMED_AT: Final[datetime] = datetime.fromisoformat("2024-11-25T09:54:29.816785")
CPC_PREVIOUS_DESCRIPTION: Final[str] = "PPRC"
ONCR_PREVIOUS_DESCRIPTION: Final[str] = "No-contact request"


def _text_template(type_description: str, sub_type_description: str) -> str:
    return f"Alert {type_description} and {sub_type_description} made"


@dataclass(frozen=True, slots=True)
class CodedDescription:
    code: str
    description: str


@dataclass(frozen=True, slots=True, kw_only=True)
class CaseNoteAlert:
    """Summary of one alert lifecycle, as returned for case note reconciliation."""

    type: CodedDescription
    sub_type: CodedDescription
    prison_code: str | None
    active_from: date
    active_to: date | None
    created_at: datetime
    made_inactive_at: datetime | None

    def is_active(self, *, today: date | None = None) -> bool:
        reference = today or date.today()
        return self.active_to is None or self.active_to > reference

    def made_inactive(self, *, today: date | None = None) -> bool:
        return not self.is_active(today=today) and self.made_inactive_at is not None

    def _base_text(self, at: datetime | None) -> str:
        codes = (self.type.code, self.sub_type.code)
        if codes == ("C", "CPC") and at is not None and at < CPC_RENAMED_AT:
            return _text_template(self.type.description, CPC_PREVIOUS_DESCRIPTION)
        if codes == ("O", "ONCR") and at is not None and at < ONCR_RENAMED_AT:
            return _text_template(self.type.description, ONCR_PREVIOUS_DESCRIPTION)
        return _text_template(self.type.description, self.sub_type.description)

    def active_text(self, *, now: datetime | None = None) -> str:
        return f"{self._base_text(now or datetime.now())} active."

    def inactive_text(self, *, now: datetime | None = None) -> str:
        return f"{self._base_text(now or datetime.now())} inactive."

    def alternative_active_text(self) -> str:
        return f"{self._base_text(self.created_at)} active."

    def alternative_inactive_text(self) -> str:
        return f"{self._base_text(self.made_inactive_at)} inactive."


@dataclass(frozen=True, slots=True, kw_only=True)
class AlertCode:
    alert_type_code: str
    alert_type_description: str
    code: str
    description: str


@dataclass(frozen=True, slots=True, kw_only=True)
class Alert:
    """A single alert, as published by alert lifecycle events."""

    alert_uuid: UUID
    prison_number: str
    alert_code: AlertCode
    active_from: date
    active_to: date | None
    is_active: bool
    created_at: datetime
    created_by: str
    active_to_last_set_at: datetime | None = None
    active_to_last_set_by: str | None = None
    made_inactive_at: datetime | None = None
    made_inactive_by: str | None = None

    def _text_template(self) -> str:
        return _text_template(self.alert_code.alert_type_description, self.alert_code.description)

    def active_text(self) -> str:
        return f"{self._text_template()} active."

    def inactive_text(self) -> str:
        return f"{self._text_template()} inactive."

    def inactive_username(self) -> str | None:
        """Who made the alert inactive, when that can be attributed reliably."""

        last_set_at = self.active_to_last_set_at
        if self.made_inactive_at is not None and self.made_inactive_at == last_set_at:
            return self.active_to_last_set_by
        return None
