"""Command group: comment submission and removal."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from pressctl.commands._base import PressGroup
from pressctl.commands.post import load_post
from pressctl.domain.content import Comment
from pressctl.domain.types import Action
from pressctl.services.comments import CommentService

if TYPE_CHECKING:
    from pressctl.commands._context import AppContext


@click.group(
    cls=PressGroup,
    examples="""\
  pressctl --as 3 comment add hello-world "Great read, thanks!"
  pressctl --as 3 comment delete 12""",
)
def comment() -> None:
    """Add and remove comments."""


@comment.command(examples='  pressctl --as 3 comment add 4 "Nice write-up"')
@click.argument("post_key")
@click.argument("body")
@click.pass_obj
def add(app: AppContext, post_key: str, body: str) -> None:
    """Comment on a post the acting user can see."""
    actor = app.actor
    policy = app.policy
    target = load_post(app, post_key, "submit_comment")
    app.require(policy.allows_post(Action.VIEW, actor, target), "submit_comment")
    app.require(policy.allows_comment(Action.CREATE, actor), "submit_comment")
    app.emit(CommentService(app.store).submit(target, actor, body))


@comment.command(examples="  pressctl --as 1 comment delete 12")
@click.argument("comment_id", type=int)
@click.pass_obj
def delete(app: AppContext, comment_id: int) -> None:
    """Delete a comment (its author or an admin)."""
    svc = CommentService(app.store)
    found = svc.get(comment_id)
    if found.failure:
        app.emit(found.model_copy(update={"op": "destroy_comment"}))
    target = found.payload
    assert isinstance(target, Comment)
    app.require(app.policy.allows_comment(Action.DESTROY, app.actor, target), "destroy_comment")
    app.emit(svc.destroy(target))
