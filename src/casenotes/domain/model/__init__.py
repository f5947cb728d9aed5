"""Domain model for case notes."""

from __future__ import annotations

from .alert import (
    ACTIVE_SUB_TYPE_CODE,
    ALERT_TYPE_CODE,
    INACTIVE_SUB_TYPE_CODE,
    Alert,
    AlertCode,
    CaseNoteAlert,
    CodedDescription,
)
from .audit import Created, stamp_created
from .base import new_id
from .deleted import DeletedCaseNote, note_detail
from .enums import DeletionCause, Source, System, system_for
from .note import Amendment, Note
from .people import PrisonerDetails, PrisonSwitch, UserDetails
from .types import CaseNoteType, SubType, TypeKey

__all__ = [
    "ACTIVE_SUB_TYPE_CODE",
    "ALERT_TYPE_CODE",
    "INACTIVE_SUB_TYPE_CODE",
    "Alert",
    "AlertCode",
    "Amendment",
    "CaseNoteAlert",
    "CaseNoteType",
    "CodedDescription",
    "Created",
    "DeletedCaseNote",
    "DeletionCause",
    "Note",
    "PrisonSwitch",
    "PrisonerDetails",
    "Source",
    "SubType",
    "System",
    "TypeKey",
    "UserDetails",
    "new_id",
    "note_detail",
    "stamp_created",
    "system_for",
]
