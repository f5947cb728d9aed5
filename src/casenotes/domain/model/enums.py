"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class System(StrEnum):
    """System a note or amendment was written in."""

    DPS = "DPS"
    NOMIS = "NOMIS"


class Source(StrEnum):
    """Origin of the request that caused a change."""

    DPS = "DPS"
    NOMIS = "NOMIS"


class DeletionCause(StrEnum):
    DELETE = "DELETE"
    UPDATE = "UPDATE"
    MOVE = "MOVE"
    MERGE = "MERGE"


def system_for(source: Source) -> System:
    return System.NOMIS if source is Source.NOMIS else System.DPS
