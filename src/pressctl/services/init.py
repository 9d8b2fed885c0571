"""InitService: lay out a new site directory.

Pipeline: CHECK, CONFIG, DATABASE, STAMP. The schema is created from the
table definitions and stamped at the migration head, so a fresh site
never replays historical migrations.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pressctl.config.discovery import CONFIG_FILENAME
from pressctl.domain.types import ErrorCode
from pressctl.infrastructure.database.engine import db_path_for, init_database
from pressctl.infrastructure.database.migrations import current_revision, stamp_head
from pressctl.infrastructure.templates import build_template_environment
from pressctl.services.result import Outcome

logger = logging.getLogger(__name__)


class InitService:
    """Creates ``pressctl.toml`` and the ``.pressctl/`` data directory."""

    @staticmethod
    def init_site(path: Path, *, name: str, db_filename: str = "press.db") -> Outcome:
        op = "init"
        config_path = path / CONFIG_FILENAME
        if config_path.exists():
            msg = f"Site already initialized at {path} ({CONFIG_FILENAME} exists)"
            return Outcome.fail(op, ErrorCode.INVALID, msg)

        path.mkdir(parents=True, exist_ok=True)
        env = build_template_environment("site")
        config_path.write_text(
            env.get_template("pressctl.toml.j2").render(name=name, db_filename=db_filename),
            encoding="utf-8",
        )

        engine = init_database(path, db_filename)
        engine.dispose()
        db_path = db_path_for(path, db_filename)
        stamp_head(db_path)
        logger.info("Initialized site %r at %s", name, path)

        return Outcome.succeed(
            op,
            data={
                "name": name,
                "path": str(path),
                "config": str(config_path),
                "db_path": str(db_path),
                "revision": current_revision(db_path),
            },
        )
