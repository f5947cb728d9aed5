"""Create case note tables and seed alert sub-types.

Revision ID: 0001_initial
Revises:
Create Date: 2024-11-25 10:00:00

"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

_SYSTEM = sa.Enum("DPS", "NOMIS", name="system", native_enum=False)
_CAUSE = sa.Enum("DELETE", "UPDATE", "MOVE", "MERGE", name="deletioncause", native_enum=False)
LEGACY_ID_SEQUENCE = "case_note_legacy_id_seq"


def upgrade() -> None:
    case_note_type = op.create_table(
        "case_note_type",
        sa.Column("code", sa.String(12), nullable=False),
        sa.Column("description", sa.String(80), nullable=False),
        sa.PrimaryKeyConstraint("code", name="pk_case_note_type"),
    )
    case_note_sub_type = op.create_table(
        "case_note_sub_type",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("type_code", sa.String(12), nullable=False),
        sa.Column("code", sa.String(12), nullable=False),
        sa.Column("description", sa.String(80), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False),
        sa.Column("sensitive", sa.Boolean(), nullable=False),
        sa.Column("restricted_use", sa.Boolean(), nullable=False),
        sa.Column("sync_to_nomis", sa.Boolean(), nullable=False),
        sa.Column("dps_user_selectable", sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(
            ["type_code"],
            ["case_note_type.code"],
            name="fk_case_note_sub_type_type_code_case_note_type",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_case_note_sub_type"),
        sa.UniqueConstraint("type_code", "code", name="uq_case_note_sub_type_type_code"),
    )
    op.create_table(
        "case_note",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("person_identifier", sa.String(12), nullable=False),
        sa.Column("sub_type_id", sa.Integer(), nullable=False),
        sa.Column("occurred_at", sa.DateTime(), nullable=False),
        sa.Column("location_id", sa.String(12), nullable=False),
        sa.Column("author_username", sa.String(64), nullable=False),
        sa.Column("author_user_id", sa.String(64), nullable=False),
        sa.Column("author_name", sa.String(80), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("system_generated", sa.Boolean(), nullable=False),
        sa.Column("system", _SYSTEM, nullable=False),
        sa.Column("legacy_id", sa.BigInteger(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("created_by", sa.String(64), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(
            ["sub_type_id"],
            ["case_note_sub_type.id"],
            name="fk_case_note_sub_type_id_case_note_sub_type",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_case_note"),
        sa.UniqueConstraint("legacy_id", name="uq_case_note_legacy_id"),
    )
    op.create_index("ix_case_note_person_identifier", "case_note", ["person_identifier"])
    op.create_index("ix_case_note_created_at", "case_note", ["created_at"])

    op.create_table(
        "case_note_amendment",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("case_note_id", sa.Uuid(), nullable=False),
        sa.Column("author_username", sa.String(64), nullable=False),
        sa.Column("author_user_id", sa.String(64), nullable=False),
        sa.Column("author_name", sa.String(80), nullable=False),
        sa.Column("text", sa.Text(), nullable=False),
        sa.Column("system", _SYSTEM, nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("created_by", sa.String(64), nullable=False),
        sa.ForeignKeyConstraint(
            ["case_note_id"],
            ["case_note.id"],
            name="fk_case_note_amendment_case_note_id_case_note",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_case_note_amendment"),
    )
    op.create_index(
        "ix_case_note_amendment_case_note_id", "case_note_amendment", ["case_note_id"]
    )

    op.create_table(
        "deleted_case_note",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("person_identifier", sa.String(12), nullable=False),
        sa.Column("case_note_id", sa.Uuid(), nullable=False),
        sa.Column("legacy_id", sa.BigInteger(), nullable=True),
        sa.Column("case_note", sa.JSON(), nullable=False),
        sa.Column("deleted_at", sa.DateTime(), nullable=False),
        sa.Column("deleted_by", sa.String(64), nullable=False),
        sa.Column("system", _SYSTEM, nullable=False),
        sa.Column("cause", _CAUSE, nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_deleted_case_note"),
    )
    op.create_index("ix_deleted_case_note_case_note_id", "deleted_case_note", ["case_note_id"])

    if op.get_bind().dialect.supports_sequences:
        op.execute(sa.schema.CreateSequence(sa.Sequence(LEGACY_ID_SEQUENCE)))
    else:
        op.create_table(
            "case_note_legacy_id",
            sa.Column(
                "id",
                sa.BigInteger().with_variant(sa.Integer(), "sqlite"),
                autoincrement=True,
                nullable=False,
            ),
            sa.PrimaryKeyConstraint("id", name="pk_case_note_legacy_id"),
            sqlite_autoincrement=True,
        )

    op.bulk_insert(case_note_type, [{"code": "ALERT", "description": "Alert"}])
    op.bulk_insert(
        case_note_sub_type,
        [
            {
                "type_code": "ALERT",
                "code": code,
                "description": description,
                "active": True,
                "sensitive": False,
                "restricted_use": False,
                "sync_to_nomis": True,
                "dps_user_selectable": False,
            }
            for code, description in (("ACTIVE", "Active"), ("INACTIVE", "Inactive"))
        ],
    )


def downgrade() -> None:
    if op.get_bind().dialect.supports_sequences:
        op.execute(sa.schema.DropSequence(sa.Sequence(LEGACY_ID_SEQUENCE)))
    else:
        op.drop_table("case_note_legacy_id")
    op.drop_index("ix_deleted_case_note_case_note_id", table_name="deleted_case_note")
    op.drop_table("deleted_case_note")
    op.drop_index("ix_case_note_amendment_case_note_id", table_name="case_note_amendment")
    op.drop_table("case_note_amendment")
    op.drop_index("ix_case_note_created_at", table_name="case_note")
    op.drop_index("ix_case_note_person_identifier", table_name="case_note")
    op.drop_table("case_note")
    op.drop_table("case_note_sub_type")
    op.drop_table("case_note_type")
