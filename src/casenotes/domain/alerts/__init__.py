"""Alert-driven case note workflows."""

from __future__ import annotations

from .common import ActiveInactive, alert_notes_filter
from .fanout import ReconciliationEventGenerator, reconciliation_event
from .handler import AlertCaseNoteHandler
from .reconciliation import (
    AlertCaseNoteReconciliation,
    MissingNote,
    ReconciliationResult,
    Scope,
)
from .verification import AlertCaseNoteVerification, VerificationResult

__all__ = [
    "ActiveInactive",
    "AlertCaseNoteHandler",
    "AlertCaseNoteReconciliation",
    "AlertCaseNoteVerification",
    "MissingNote",
    "ReconciliationEventGenerator",
    "ReconciliationResult",
    "Scope",
    "VerificationResult",
    "alert_notes_filter",
    "reconciliation_event",
]
