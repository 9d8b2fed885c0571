"""Record who published a post through the explicit publish transition.

Revision ID: 003_published_by
Revises: 002_comments_count
Create Date: 2025-12-26
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision: str = "003_published_by"
down_revision: str | None = "002_comments_count"
branch_labels: tuple[str, ...] | None = None
depends_on: tuple[str, ...] | None = None


def upgrade() -> None:
    with op.batch_alter_table("posts") as batch:
        batch.add_column(sa.Column("published_by_id", sa.Integer(), nullable=True))
        batch.create_foreign_key("fk_posts_published_by_id", "users", ["published_by_id"], ["id"])
        batch.create_index("ix_posts_published_by_id", ["published_by_id"])


def downgrade() -> None:
    with op.batch_alter_table("posts") as batch:
        batch.drop_index("ix_posts_published_by_id")
        batch.drop_constraint("fk_posts_published_by_id", type_="foreignkey")
        batch.drop_column("published_by_id")
