"""Series point cache table.

Revision ID: 001
Revises:
Create Date: 2026-10-17
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "series_point",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("category", sa.String(), nullable=False),
        sa.Column("timestamp", sa.String(), nullable=False),
        sa.Column("value", sa.Float(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_series_point_category_timestamp",
        "series_point",
        ["category", "timestamp"],
    )


def downgrade() -> None:
    op.drop_index("ix_series_point_category_timestamp", table_name="series_point")
    op.drop_table("series_point")
