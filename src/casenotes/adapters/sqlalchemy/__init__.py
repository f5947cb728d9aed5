"""SQLAlchemy adapter package for case notes."""

from __future__ import annotations

from .mappings import mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyDeletedNoteRepository,
    SqlAlchemyNoteRepository,
    SqlAlchemySubTypeRepository,
)
from .unit_of_work import SqlAlchemyCaseNoteUnitOfWork, startup

__all__ = [
    "SqlAlchemyCaseNoteUnitOfWork",
    "SqlAlchemyDeletedNoteRepository",
    "SqlAlchemyNoteRepository",
    "SqlAlchemySubTypeRepository",
    "mapper_registry",
    "start_mappers",
    "startup",
]
