"""Translate alerts API payloads into domain values."""

from __future__ import annotations

from typing import TYPE_CHECKING

from casenotes.domain.model import Alert, AlertCode, CaseNoteAlert, CodedDescription

if TYPE_CHECKING:
    from .schema import AlertPayload, CaseNoteAlertPayload, CodedDescriptionPayload


def _coded(payload: CodedDescriptionPayload) -> CodedDescription:
    return CodedDescription(code=payload.code, description=payload.description)


def parse_case_note_alert(payload: CaseNoteAlertPayload) -> CaseNoteAlert:
    return CaseNoteAlert(
        type=_coded(payload.type),
        sub_type=_coded(payload.sub_type),
        prison_code=payload.prison_code,
        active_from=payload.active_from,
        active_to=payload.active_to,
        created_at=payload.created_at,
        made_inactive_at=payload.made_inactive_at,
    )


def parse_alert(payload: AlertPayload) -> Alert:
    code = payload.alert_code
    return Alert(
        alert_uuid=payload.alert_uuid,
        prison_number=payload.prison_number,
        alert_code=AlertCode(
            alert_type_code=code.alert_type_code,
            alert_type_description=code.alert_type_description,
            code=code.code,
            description=code.description,
        ),
        active_from=payload.active_from,
        active_to=payload.active_to,
        is_active=payload.is_active,
        created_at=payload.created_at,
        created_by=payload.created_by,
        active_to_last_set_at=payload.active_to_last_set_at,
        active_to_last_set_by=payload.active_to_last_set_by,
        made_inactive_at=payload.made_inactive_at,
        made_inactive_by=payload.made_inactive_by,
    )
