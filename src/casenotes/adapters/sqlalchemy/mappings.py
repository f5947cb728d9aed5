"""SQLAlchemy mapping metadata for the case notes domain model."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from functools import cache
from typing import Final

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    Column,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Sequence,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)
from sqlalchemy.orm import composite, configure_mappers, relationship

from casenotes.domain.model import (
    Amendment,
    CaseNoteType,
    Created,
    DeletedCaseNote,
    DeletionCause,
    Note,
    SubType,
    System,
)

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]

PERSON_IDENTIFIER_LENGTH: Final[int] = 12
TYPE_CODE_LENGTH: Final[int] = 12


class LocalDateTime(TypeDecorator[datetime]):
    """Naive local timestamps; aware values are converted to local time first."""

    impl = DateTime(timezone=False)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None or value.tzinfo is None:
            return value
        return value.astimezone().replace(tzinfo=None)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None or value.tzinfo is None:
            return value
        return value.astimezone().replace(tzinfo=None)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Reference data ---------------------------------------------------------------

case_note_type_table = Table(
    "case_note_type",
    mapper_registry.metadata,
    Column("code", String(TYPE_CODE_LENGTH), primary_key=True),
    Column("description", String(80), nullable=False),
)

case_note_sub_type_table = Table(
    "case_note_sub_type",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "type_code",
        String(TYPE_CODE_LENGTH),
        ForeignKey("case_note_type.code"),
        key="_type_code",
        nullable=False,
    ),
    Column("code", String(TYPE_CODE_LENGTH), nullable=False),
    Column("description", String(80), nullable=False),
    Column("active", Boolean, nullable=False, default=True),
    Column("sensitive", Boolean, nullable=False, default=False),
    Column("restricted_use", Boolean, nullable=False, default=False),
    Column("sync_to_nomis", Boolean, nullable=False, default=False),
    Column("dps_user_selectable", Boolean, nullable=False, default=True),
    UniqueConstraint("_type_code", "code"),
)

# Notes ------------------------------------------------------------------------

case_note_table = Table(
    "case_note",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("person_identifier", String(PERSON_IDENTIFIER_LENGTH), nullable=False),
    Column(
        "sub_type_id",
        Integer,
        ForeignKey("case_note_sub_type.id"),
        key="_sub_type_id",
        nullable=False,
    ),
    Column("occurred_at", LocalDateTime, nullable=False),
    Column("location_id", String(12), nullable=False),
    Column("author_username", String(64), nullable=False),
    Column("author_user_id", String(64), nullable=False),
    Column("author_name", String(80), nullable=False),
    Column("text", Text, nullable=False),
    Column("system_generated", Boolean, nullable=False, default=False),
    Column("system", Enum(System, native_enum=False), nullable=False),
    Column("legacy_id", BigInteger, nullable=True, unique=True),
    Column("created_at", LocalDateTime, key="_created_at", nullable=False),
    Column("created_by", String(64), key="_created_by", nullable=False),
    Column("version", Integer, nullable=False),
    Index("ix_case_note_person_identifier", "person_identifier"),
    Index("ix_case_note_created_at", "_created_at"),
)

case_note_amendment_table = Table(
    "case_note_amendment",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "case_note_id",
        UUIDColumnType,
        ForeignKey("case_note.id", ondelete="CASCADE"),
        key="_case_note_id",
        nullable=False,
    ),
    Column("author_username", String(64), nullable=False),
    Column("author_user_id", String(64), nullable=False),
    Column("author_name", String(80), nullable=False),
    Column("text", Text, nullable=False),
    Column("system", Enum(System, native_enum=False), nullable=False),
    Column("created_at", LocalDateTime, key="_created_at", nullable=False),
    Column("created_by", String(64), key="_created_by", nullable=False),
    Index("ix_case_note_amendment_case_note_id", "_case_note_id"),
)

deleted_case_note_table = Table(
    "deleted_case_note",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("person_identifier", String(PERSON_IDENTIFIER_LENGTH), nullable=False),
    Column("case_note_id", UUIDColumnType, nullable=False),
    Column("legacy_id", BigInteger, nullable=True),
    Column("case_note", JSON, nullable=False),
    Column("deleted_at", LocalDateTime, nullable=False),
    Column("deleted_by", String(64), nullable=False),
    Column("system", Enum(System, native_enum=False), nullable=False),
    Column("cause", Enum(DeletionCause, native_enum=False), nullable=False),
    Column("reason", Text, nullable=True),
    Index("ix_deleted_case_note_case_note_id", "case_note_id"),
)

# Legacy ids come from this sequence where the dialect has sequences (PostgreSQL).
case_note_legacy_id_seq = Sequence("case_note_legacy_id_seq", metadata=mapper_registry.metadata)

# Elsewhere (SQLite) the autoincrement key of this table is the allocated value; AUTOINCREMENT
# never reuses a key, so only the latest row is kept.
case_note_legacy_id_table = Table(
    "case_note_legacy_id",
    mapper_registry.metadata,
    Column(
        "id",
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    ),
    sqlite_autoincrement=True,
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(CaseNoteType, case_note_type_table)

    mapper_registry.map_imperatively(
        SubType,
        case_note_sub_type_table,
        properties={
            "type": relationship(CaseNoteType, lazy="joined", innerjoin=True),
        },
    )

    mapper_registry.map_imperatively(
        Note,
        case_note_table,
        version_id_col=case_note_table.c.version,
        properties={
            "sub_type": relationship(SubType, lazy="joined", innerjoin=True),
            "created": composite(
                Created,
                case_note_table.c._created_at,  # noqa: SLF001
                case_note_table.c._created_by,  # noqa: SLF001
            ),
            "_amendments": relationship(
                Amendment,
                back_populates="note",
                cascade="all, delete-orphan",
                lazy="selectin",
            ),
        },
    )

    mapper_registry.map_imperatively(
        Amendment,
        case_note_amendment_table,
        properties={
            "note": relationship(Note, back_populates="_amendments"),
            "created": composite(
                Created,
                case_note_amendment_table.c._created_at,  # noqa: SLF001
                case_note_amendment_table.c._created_by,  # noqa: SLF001
            ),
        },
    )

    mapper_registry.map_imperatively(DeletedCaseNote, deleted_case_note_table)

    configure_mappers()
    return mapper_registry
