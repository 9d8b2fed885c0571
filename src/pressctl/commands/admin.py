"""Command group: admin dashboard and moderation."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from pressctl.commands._base import PressGroup
from pressctl.domain.policy import is_admin

if TYPE_CHECKING:
    from pressctl.commands._context import AppContext


@click.group(
    cls=PressGroup,
    examples="""\
  pressctl --as 1 admin stats
  pressctl --as 1 admin purge-comments 3 4 9
  pressctl --as 1 admin outbox --retry""",
)
def admin() -> None:
    """Admin-only site tools."""


@admin.command(examples="  pressctl --as 1 --json admin stats")
@click.pass_obj
def stats(app: AppContext) -> None:
    """Totals of users, posts, and comments."""
    from pressctl.services.admin import AdminService

    app.require(is_admin(app.actor), "stats")
    app.emit(AdminService(app.store).stats())


@admin.command("purge-comments", examples="  pressctl --as 1 admin purge-comments 3 4 9")
@click.argument("comment_ids", nargs=-1, type=int, required=True)
@click.pass_obj
def purge_comments(app: AppContext, comment_ids: tuple[int, ...]) -> None:
    """Delete several comments at once."""
    from pressctl.services.admin import AdminService

    app.require(is_admin(app.actor), "bulk_destroy_comments")
    app.emit(AdminService(app.store).bulk_destroy_comments(comment_ids))


@admin.command(examples="  pressctl --as 1 admin outbox --retry")
@click.option("--retry", is_flag=True, help="Redeliver pending and failed notifications first.")
@click.pass_obj
def outbox(app: AppContext, retry: bool) -> None:
    """Notification outbox counts by status."""
    from pressctl.services.admin import AdminService

    app.require(is_admin(app.actor), "outbox")
    app.emit(AdminService(app.store).outbox(retry=retry))
