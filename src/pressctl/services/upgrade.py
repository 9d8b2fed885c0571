"""UpgradeService: database migration with Alembic.

Pipeline: CHECK, BACKUP, MIGRATE, REPORT.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Any

from alembic.script import ScriptDirectory
from sqlalchemy import inspect

from pressctl.infrastructure.database.migrations import (
    build_config,
    current_revision,
    stamp_head,
    upgrade_head,
)
from pressctl.services._helpers import utcnow
from pressctl.services.base import BaseService
from pressctl.services.result import Outcome

logger = logging.getLogger(__name__)


class UpgradeService(BaseService):
    """Applies pending schema migrations to a site database."""

    def check_pending(self) -> Outcome:
        """List pending migrations without applying them."""
        script = ScriptDirectory.from_config(build_config(f"sqlite:///{self._store.db_path}"))
        head = script.get_current_head()
        current = current_revision(self._store.db_path)

        pending: list[dict[str, Any]] = []
        if current != head and head is not None:
            rev = script.get_revision(head)
            while rev is not None and rev.revision != current:
                pending.append({"revision": rev.revision, "description": rev.doc or ""})
                if rev.down_revision is None:
                    break
                rev = script.get_revision(str(rev.down_revision))
        pending.reverse()

        return Outcome.succeed(
            "upgrade",
            data={
                "pending_count": len(pending),
                "pending": pending,
                "current": current,
                "head": head,
            },
        )

    def apply(self, *, backup: bool = True) -> Outcome:
        """Migrate the database to head, copying the file first unless *backup* is off."""
        check = self.check_pending()
        if check.data["pending_count"] == 0:
            return Outcome.succeed(
                "upgrade",
                data={
                    "applied_count": 0,
                    "current": check.data["head"],
                    "message": "Database is already up to date",
                },
            )

        if check.data["current"] is None and self._tables_exist():
            # Created by create_all before migrations were tracked: already at head.
            stamp_head(self._store.db_path)
            return Outcome.succeed(
                "upgrade",
                data={
                    "applied_count": 0,
                    "current": current_revision(self._store.db_path),
                    "message": "Stamped existing schema at head",
                },
            )

        backup_path = self._backup_db() if backup else None
        if backup_path is not None:
            logger.info("Backed up %s to %s", self._store.db_path, backup_path)
        upgrade_head(self._store.db_path)

        return Outcome.succeed(
            "upgrade",
            data={
                "applied_count": check.data["pending_count"],
                "applied": check.data["pending"],
                "current": current_revision(self._store.db_path),
                "backup": str(backup_path) if backup_path is not None else None,
            },
        )

    def _tables_exist(self) -> bool:
        return "posts" in inspect(self._store.engine).get_table_names()

    def _backup_db(self) -> Path:
        source = self._store.db_path
        backup_dir = source.parent / "backups"
        backup_dir.mkdir(exist_ok=True)
        target = backup_dir / f"{source.stem}-{utcnow():%Y%m%dT%H%M%S%f}{source.suffix}"
        shutil.copy2(source, target)
        return target
