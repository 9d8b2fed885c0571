"""SQLite database engine, schema, and post counters via SQLAlchemy Core."""

from pressctl.infrastructure.database.counters import (
    adjust_comments_count,
    reset_comments_count,
)
from pressctl.infrastructure.database.engine import create_db_engine, db_path_for, init_database
from pressctl.infrastructure.database.schema import comments, metadata, outbox, posts, users

__all__ = [
    "adjust_comments_count",
    "comments",
    "create_db_engine",
    "db_path_for",
    "init_database",
    "metadata",
    "outbox",
    "posts",
    "reset_comments_count",
    "users",
]
