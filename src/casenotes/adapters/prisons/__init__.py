"""Public interface for the prisoner search and prison API adapters."""

from __future__ import annotations

from .client import ALERTS_CASE_NOTES_SERVICE, PrisonApiClient, PrisonerSearchApiClient
from .schema import PrisonerPayload, PrisonSwitchPayload

__all__ = [
    "ALERTS_CASE_NOTES_SERVICE",
    "PrisonApiClient",
    "PrisonSwitchPayload",
    "PrisonerPayload",
    "PrisonerSearchApiClient",
]
