"""Public interface for the alerts API adapter."""

from __future__ import annotations

from .client import AlertsApiClient
from .schema import AlertPayload, CaseNoteAlertPayload, CaseNoteAlertResponse
from .translator import parse_alert, parse_case_note_alert

__all__ = [
    "AlertPayload",
    "AlertsApiClient",
    "CaseNoteAlertPayload",
    "CaseNoteAlertResponse",
    "parse_alert",
    "parse_case_note_alert",
]
