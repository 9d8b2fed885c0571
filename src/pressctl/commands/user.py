"""Command group: account management (add, edit, role, remove, list).

Every subcommand requires an admin actor, except ``add`` on a site with
no accounts yet (the first account bootstraps the site) and ``edit``,
which any signed-in actor runs on their own account.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from pressctl.commands._base import PressGroup
from pressctl.domain.policy import is_admin, is_signed_in
from pressctl.domain.types import Role

if TYPE_CHECKING:
    from pressctl.commands._context import AppContext

_ROLE_CHOICE = click.Choice([r.value for r in Role], case_sensitive=False)


@click.group(
    cls=PressGroup,
    examples="""\
  pressctl user add "Ada Admin" --email ada@example.com --role admin
  pressctl --as 1 user add "Bob" --email bob@example.com
  pressctl --as 1 user role 2 admin
  pressctl --as 2 user edit --email ann@newmail.example
  pressctl --as 1 user list --role member""",
)
def user() -> None:
    """Manage accounts."""


@user.command(
    examples="""\
  pressctl user add "Ada Admin" --email ada@example.com --role admin
  pressctl --as 1 user add "Guest Writer" """,
)
@click.argument("name")
@click.option("--email", default=None, help="Address for comment notifications.")
@click.option("--role", type=_ROLE_CHOICE, default=Role.MEMBER.value, show_default=True)
@click.pass_obj
def add(app: AppContext, name: str, email: str | None, role: str) -> None:
    """Register a new account."""
    from pressctl.services.accounts import AccountService

    svc = AccountService(app.store)
    bootstrapping = svc.list().data["count"] == 0
    if not bootstrapping:
        app.require(is_admin(app.actor), "register_user")
    app.emit(svc.register(name, email, Role(role)))


@user.command(
    examples="""\
  pressctl --as 2 user edit --email ann@newmail.example
  pressctl --as 2 user edit --name "Ann Writer"
  pressctl --as 2 user edit --email "" """,
)
@click.option("--name", default=None, help="New display name.")
@click.option("--email", default=None, help="New notification address; empty clears it.")
@click.pass_obj
def edit(app: AppContext, name: str | None, email: str | None) -> None:
    """Edit the acting account's own name and/or email."""
    from pressctl.services.accounts import AccountService

    if name is None and email is None:
        raise click.UsageError("Nothing to change: pass --name and/or --email.")
    acting = app.actor
    app.require(is_signed_in(acting), "update_user")
    assert acting is not None
    app.emit(AccountService(app.store).update(acting, name=name, email=email))


@user.command("role", examples="  pressctl --as 1 user role 2 admin")
@click.argument("user_id", type=int)
@click.argument("role", type=_ROLE_CHOICE)
@click.pass_obj
def change_role(app: AppContext, user_id: int, role: str) -> None:
    """Change an account's role."""
    from pressctl.services.accounts import AccountService

    acting = app.actor
    app.require(is_admin(acting), "change_role")
    assert acting is not None
    app.emit(AccountService(app.store).change_role(acting, user_id, Role(role)))


@user.command(examples="  pressctl --as 1 user remove 3")
@click.argument("user_id", type=int)
@click.pass_obj
def remove(app: AppContext, user_id: int) -> None:
    """Remove an account that has no posts or comments."""
    from pressctl.services.accounts import AccountService

    acting = app.actor
    app.require(is_admin(acting), "remove_user")
    assert acting is not None
    app.emit(AccountService(app.store).remove(acting, user_id))


@user.command("list", examples="  pressctl --as 1 user list --role admin")
@click.option("--role", type=_ROLE_CHOICE, default=None, help="Only accounts with this role.")
@click.pass_obj
def list_users(app: AppContext, role: str | None) -> None:
    """List accounts, newest first."""
    from pressctl.services.accounts import AccountService

    app.require(is_admin(app.actor), "list_users")
    app.emit(AccountService(app.store).list(role=Role(role) if role else None))
