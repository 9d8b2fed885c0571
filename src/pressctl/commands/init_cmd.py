"""Command: site initialization (named init_cmd to avoid shadowing builtins)."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from pressctl.commands._base import PressCommand

if TYPE_CHECKING:
    from pressctl.commands._context import AppContext

_INIT_EXAMPLES = """\
  pressctl init
  pressctl init /srv/blog --name "Engineering Blog"
  pressctl init . --name demo --db-file demo.db"""


@click.command("init", cls=PressCommand, examples=_INIT_EXAMPLES)
@click.argument("path", required=False, default=".")
@click.option("--name", default=None, help="Site name (defaults to the directory name).")
@click.option("--db-file", "db_file", default=None, help="Database filename inside .pressctl/.")
@click.pass_obj
def init_cmd(app: AppContext, path: str, name: str | None, db_file: str | None) -> None:
    """Initialize a new pressctl site."""
    from pressctl.services.init import InitService

    site_path = Path(path).resolve()
    app.emit(
        InitService.init_site(
            site_path,
            name=name or site_path.name,
            db_filename=db_file or app.settings.database.filename,
        )
    )
