"""Subcommand modules for pressctl.

Provides register_commands() which uses deferred imports to keep
``pressctl --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups and standalone commands on the root CLI group."""
    # --- Groups ---
    from pressctl.commands.admin import admin
    from pressctl.commands.comment import comment
    from pressctl.commands.post import post
    from pressctl.commands.user import user

    cli.add_command(user)
    cli.add_command(post)
    cli.add_command(comment)
    cli.add_command(admin)

    # --- Standalone commands ---
    from pressctl.commands.init_cmd import init_cmd
    from pressctl.commands.upgrade import upgrade

    cli.add_command(init_cmd)
    cli.add_command(upgrade)
