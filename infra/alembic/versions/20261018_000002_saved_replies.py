"""Saved reply templates for the support console."""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "20261018_000002"
down_revision = "20260301_000001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "saved_replies",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=True),
        sa.Column("created_by", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), nullable=False),
    )
    op.create_index("ix_saved_replies_title", "saved_replies", ["title"])


def downgrade() -> None:
    op.drop_index("ix_saved_replies_title", table_name="saved_replies")
    op.drop_table("saved_replies")
