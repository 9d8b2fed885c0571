"""Denormalized comment counter on posts.

Revision ID: 002_comments_count
Revises: 001_baseline
Create Date: 2025-12-24
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

from pressctl.infrastructure.database.counters import reset_comments_count

revision: str = "002_comments_count"
down_revision: str | None = "001_baseline"
branch_labels: tuple[str, ...] | None = None
depends_on: tuple[str, ...] | None = None


def upgrade() -> None:
    op.add_column(
        "posts",
        sa.Column("comments_count", sa.Integer(), nullable=False, server_default="0"),
    )

    # Backfill from live rows so the counter is correct from the first read.
    reset_comments_count(op.get_bind())


def downgrade() -> None:
    with op.batch_alter_table("posts") as batch:
        batch.drop_column("comments_count")
