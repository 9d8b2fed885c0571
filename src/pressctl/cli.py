"""Root CLI group for pressctl with global flags and command registration."""

from __future__ import annotations

import click

from pressctl import __version__
from pressctl.commands import register_commands
from pressctl.commands._base import RootGroup
from pressctl.commands._context import AppContext
from pressctl.config.settings import PressSettings


@click.group(cls=RootGroup, invoke_without_command=True)
@click.version_option(version=__version__, prog_name="pressctl")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logs and timing spans.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option("--sync", is_flag=True, help="Deliver notifications synchronously.")
@click.option("--as", "actor_id", type=int, default=None, help="Act as this user id.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    sync: bool,
    actor_id: int | None,
) -> None:
    """pressctl: a small multi-author blog engine for the command line."""
    settings = PressSettings.from_cli(
        config_path=config_path,
        json_output=json_output or None,
        verbose=verbose or None,
        log_json=log_json or None,
        sync=sync or None,
        actor_id=actor_id,
    )
    app = AppContext(settings)
    ctx.obj = app
    ctx.call_on_close(app.close)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
