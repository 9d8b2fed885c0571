"""Database engine setup for SQLite with WAL mode.

SQLite is the persistence layer: WAL mode for concurrent reads and ACID
transactions for every write. The DB is stored at
``{site_root}/.pressctl/{filename}``.

pysqlite's own transaction handling is switched off and every
transaction is opened with ``BEGIN IMMEDIATE`` instead. Writers then
serialize on the database lock from their first statement, and
SAVEPOINTs (used by slug assignment) nest inside the outer transaction.

SQLAlchemy Core (not ORM) is used because each invocation is short-lived:
no benefit from session management or identity maps.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Connection, Engine

from pressctl.infrastructure.database.schema import metadata

DATA_DIRNAME = ".pressctl"
DEFAULT_DB_FILENAME = "press.db"


def db_path_for(site_root: Path, filename: str = DEFAULT_DB_FILENAME) -> Path:
    """Location of the database file for a site."""
    return site_root / DATA_DIRNAME / filename


def create_db_engine(db_path: Path) -> Engine:
    """Create a SQLite engine with WAL mode and foreign keys enabled."""
    engine = create_engine(f"sqlite:///{db_path}", echo=False)

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
        dbapi_conn.isolation_level = None
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA busy_timeout=10000")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn: Connection) -> None:
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


def init_database(site_root: Path, filename: str = DEFAULT_DB_FILENAME) -> Engine:
    """Initialize the database at ``{site_root}/.pressctl/{filename}``.

    Creates the ``.pressctl/`` directory and all tables from
    :data:`schema.metadata`. Idempotent; safe to call on an existing site.

    Returns the engine ready for use.
    """
    data_dir = site_root / DATA_DIRNAME
    data_dir.mkdir(parents=True, exist_ok=True)
    (data_dir / "plugins").mkdir(exist_ok=True)
    (data_dir / "templates").mkdir(exist_ok=True)

    engine = create_db_engine(db_path_for(site_root, filename))
    metadata.create_all(engine)
    return engine
