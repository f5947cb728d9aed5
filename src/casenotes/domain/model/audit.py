"""Audit value objects embedded in notes and amendments."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable


@dataclass(frozen=True, slots=True)
class Created:
    """When and by whom a record was created."""

    at: datetime
    by: str

    def __composite_values__(self) -> tuple[datetime, str]:
        """For SQLAlchemy composite columns (adapter-side convenience)."""
        return (self.at, self.by)


def stamp_created(
    by: str,
    *,
    at: datetime | None = None,
    clock: Callable[[], datetime] = datetime.now,
) -> Created:
    """Build the created stamp, defaulting to the current time."""

    return Created(at=at if at is not None else clock(), by=by)
