"""Alembic environment for pressctl: SQLite only, always in batch mode."""

from __future__ import annotations

from typing import Any

from alembic import context
from sqlalchemy import create_engine, event, pool

from pressctl.infrastructure.database.schema import metadata

# SQLite cannot ALTER most constraints; batch mode recreates tables instead.
_OPTIONS: dict[str, Any] = {"target_metadata": metadata, "render_as_batch": True}


def _migration_pragmas(dbapi_conn: Any, _record: Any) -> None:
    # Table copies during batch operations must not trigger cascades.
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=OFF")
    cursor.close()


def _database_url() -> str:
    url = context.config.get_main_option("sqlalchemy.url")
    if not url:
        msg = "sqlalchemy.url is not set on the Alembic config"
        raise RuntimeError(msg)
    return url


def run_offline() -> None:
    context.configure(
        url=_database_url(),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_OPTIONS,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_online() -> None:
    engine = create_engine(_database_url(), poolclass=pool.NullPool)
    event.listen(engine, "connect", _migration_pragmas)
    try:
        with engine.connect() as connection:
            context.configure(connection=connection, **_OPTIONS)
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_offline()
else:
    run_online()
