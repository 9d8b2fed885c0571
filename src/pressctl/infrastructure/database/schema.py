"""SQLAlchemy Core table definitions for the pressctl database.

Timestamps are stored as UTC ISO 8601 text through :class:`IsoTimestamp`. The slug
unique constraint is composite on ``(user_id, slug)`` so two authors may
share a slug while one author never holds it twice.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import (
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.types import TypeDecorator


class IsoTimestamp(TypeDecorator[datetime]):
    """UTC timestamp stored as ISO 8601 text.

    SQLite has no native timezone-aware datetime. Values are normalized to
    UTC on the way in, so lexical order equals chronological order, and
    come back as aware datetimes.
    """

    impl = Text
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Any) -> str | None:
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC).isoformat(timespec="microseconds")

    def process_result_value(self, value: str | None, dialect: Any) -> datetime | None:
        if value is None:
            return None
        parsed = datetime.fromisoformat(value)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=UTC)
        return parsed


metadata = MetaData()

POST_SLUG_CONSTRAINT = "uq_posts_user_slug"

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", Text, nullable=False),
    Column("email", Text, unique=True),
    Column("role", Text, nullable=False, default="member", server_default="member"),
    Column("created_at", IsoTimestamp(), nullable=False),
)

posts = Table(
    "posts",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, ForeignKey("users.id"), nullable=False),
    Column("title", Text, nullable=False),
    Column("body", Text, nullable=False),
    Column("slug", Text, nullable=False),
    Column("published_at", IsoTimestamp()),
    Column("published_by_id", Integer, ForeignKey("users.id")),
    Column("comments_count", Integer, nullable=False, default=0, server_default="0"),
    Column("created_at", IsoTimestamp(), nullable=False),
    Column("updated_at", IsoTimestamp(), nullable=False),
    UniqueConstraint("user_id", "slug", name=POST_SLUG_CONSTRAINT),
)

comments = Table(
    "comments",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("post_id", Integer, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False),
    Column("user_id", Integer, ForeignKey("users.id")),
    Column("body", Text, nullable=False),
    Column("created_at", IsoTimestamp(), nullable=False),
)

# Outbound notification events, written before dispatch so nothing is lost
# if the process exits while a worker is still running.
outbox = Table(
    "outbox",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("hook_name", Text, nullable=False),
    Column("payload", Text, nullable=False),  # JSON
    Column("status", Text, nullable=False),
    Column("error", Text),
    Column("retries", Integer, default=0, server_default="0"),
    Column("created", Text, nullable=False),
    Column("completed", Text),
)

Index("ix_posts_user_id", posts.c.user_id)
Index("ix_posts_published_at", posts.c.published_at)
Index("ix_posts_published_by_id", posts.c.published_by_id)
Index("ix_comments_post_id", comments.c.post_id)
Index("ix_comments_user_id", comments.c.user_id)
Index("ix_outbox_status", outbox.c.status)
