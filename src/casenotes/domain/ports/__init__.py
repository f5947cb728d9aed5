"""Domain port definitions for adapters."""

from __future__ import annotations

from .clients import AlertClient, PrisonerSearchClient, PrisonSwitchClient, UserDetailsClient
from .events import DomainEventPublisher, Telemetry, WorkQueue
from .persistence import DeletedNoteRepository, NoteRepository, Repository, SubTypeRepository
from .unit_of_work import (
    CaseNoteRepositories,
    CaseNoteUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "AlertClient",
    "CaseNoteRepositories",
    "CaseNoteUnitOfWork",
    "DeletedNoteRepository",
    "DomainEventPublisher",
    "NoteRepository",
    "PrisonSwitchClient",
    "PrisonerSearchClient",
    "Repository",
    "RepositoryCollection",
    "SubTypeRepository",
    "Telemetry",
    "UnitOfWork",
    "UserDetailsClient",
    "WorkQueue",
]
