"""Domain error definitions."""

from __future__ import annotations


class CaseNoteValidationError(ValueError):
    """Raised when a request cannot be applied; nothing has been written."""


class MissingReferenceDataError(CaseNoteValidationError):
    """Raised when required case note sub-types are absent from the type registry."""


class DuplicateLegacyIdError(RuntimeError):
    """Raised by storage when a write collides with an existing legacy id."""
