"""Case note type registry: two-level taxonomy of note categories."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True, order=True)
class TypeKey:
    """Stable external identity of a sub-type: (parent type code, sub-type code)."""

    parent_code: str
    code: str

    def __str__(self) -> str:
        return f"{self.parent_code}/{self.code}"


@dataclass(eq=False, kw_only=True)
class CaseNoteType:
    code: str
    description: str


@dataclass(eq=False, kw_only=True)
class SubType:
    """Reference data describing one note category beneath a parent type."""

    type: CaseNoteType
    code: str
    description: str
    active: bool = True
    sensitive: bool = False
    restricted_use: bool = False
    sync_to_nomis: bool = False
    dps_user_selectable: bool = True
    id: int | None = field(default=None, repr=False)

    @property
    def parent_code(self) -> str:
        return self.type.code

    @property
    def key(self) -> TypeKey:
        return TypeKey(self.type.code, self.code)
