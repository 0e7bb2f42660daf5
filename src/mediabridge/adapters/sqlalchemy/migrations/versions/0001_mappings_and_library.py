"""Provider mappings, library entries and library aliases.

Revision ID: 0001
Revises:
Create Date: 2026-10-17
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

from mediabridge.adapters.sqlalchemy.mappings import ReferenceType, UTCDateTime

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

MEDIA_CATEGORIES = ("ANIME", "MOVIE", "TV")
LIBRARY_STATUSES = ("PLANNING", "WATCHING", "COMPLETED", "ON_HOLD", "DROPPED")


def upgrade() -> None:
    op.create_table(
        "provider_mapping",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("reference", ReferenceType(), nullable=False),
        sa.Column("provider", sa.String(64), nullable=False),
        sa.Column("provider_native_id", sa.String(255), nullable=False),
        sa.Column("provider_display_title", sa.String(512), nullable=False),
        sa.Column("confidence", sa.Float(), nullable=False),
        sa.Column("verified_by", sa.String(128), nullable=True),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.Column("updated_at", UTCDateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_provider_mapping"),
        sa.UniqueConstraint("reference", "provider", name="uq_provider_mapping_reference"),
    )
    op.create_index(
        "ix_provider_mapping_provider", "provider_mapping", ["provider", "confidence"]
    )

    op.create_table(
        "library_entry",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.String(128), nullable=False),
        sa.Column("reference", ReferenceType(), nullable=False),
        sa.Column("title", sa.String(512), nullable=False),
        sa.Column(
            "media_type",
            sa.Enum(*MEDIA_CATEGORIES, name="mediacategory", native_enum=False),
            nullable=True,
        ),
        sa.Column(
            "status",
            sa.Enum(*LIBRARY_STATUSES, name="librarystatus", native_enum=False),
            nullable=False,
        ),
        sa.Column("image_url", sa.String(1024), nullable=True),
        sa.Column("total", sa.Integer(), nullable=True),
        sa.Column("progress", sa.Integer(), nullable=False),
        sa.Column("rating", sa.Float(), nullable=True),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.Column("updated_at", UTCDateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_library_entry"),
    )
    op.create_index("ix_library_entry_user_id", "library_entry", ["user_id"])
    op.create_index("ix_library_entry_reference", "library_entry", ["reference"])

    op.create_table(
        "library_alias",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("entry_id", sa.Uuid(), nullable=False),
        sa.Column("reference", ReferenceType(), nullable=False),
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.ForeignKeyConstraint(
            ["entry_id"],
            ["library_entry.id"],
            name="fk_library_alias_entry_id_library_entry",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_library_alias"),
        sa.UniqueConstraint("reference", name="uq_library_alias_reference"),
    )
    op.create_index("ix_library_alias_entry_id", "library_alias", ["entry_id"])


def downgrade() -> None:
    op.drop_index("ix_library_alias_entry_id", table_name="library_alias")
    op.drop_table("library_alias")
    op.drop_index("ix_library_entry_reference", table_name="library_entry")
    op.drop_index("ix_library_entry_user_id", table_name="library_entry")
    op.drop_table("library_entry")
    op.drop_index("ix_provider_mapping_provider", table_name="provider_mapping")
    op.drop_table("provider_mapping")
