"""Command: bring a site database up to the current schema."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from pressctl.commands._base import EXIT_FAILURE, PressCommand

if TYPE_CHECKING:
    from pressctl.commands._context import AppContext


@click.command(
    cls=PressCommand,
    examples="""\
  pressctl upgrade
  pressctl upgrade --check || echo "migrations pending"
  pressctl upgrade --no-backup""",
)
@click.option(
    "--check",
    "check_only",
    is_flag=True,
    help="List pending migrations without applying; exit 1 if there are any.",
)
@click.option(
    "--backup/--no-backup",
    default=True,
    show_default=True,
    help="Copy the database into .pressctl/backups before migrating.",
)
@click.pass_obj
def upgrade(app: AppContext, check_only: bool, backup: bool) -> None:
    """Run pending database migrations."""
    from pressctl.services.upgrade import UpgradeService

    svc = UpgradeService(app.store)
    if not check_only:
        app.emit(svc.apply(backup=backup))
        return

    outcome = svc.check_pending()
    app.emit(outcome)
    if outcome.data["pending_count"]:
        raise SystemExit(EXIT_FAILURE)
