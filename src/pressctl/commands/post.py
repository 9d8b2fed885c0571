"""Command group: post authoring, publication, and listing.

Each subcommand asks the policy engine before calling a service; the
services themselves never check ownership.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from pressctl.commands._base import PressGroup
from pressctl.domain.types import Action
from pressctl.services.posts import STATUS_FILTERS, PostService

if TYPE_CHECKING:
    from pressctl.commands._context import AppContext
    from pressctl.domain.content import Post

_POST_EXAMPLES = """\
  pressctl --as 2 post create "Hello World" --body "First post!" --publish
  pressctl --as 2 post edit hello-world --title "Hello, World"
  pressctl --as 2 post publish 4
  pressctl post list --search rails
  pressctl post show hello-world --comments"""


def load_post(app: AppContext, key: str, op: str) -> Post:
    """Resolve *key* (id or slug) to a post, exiting with ``not_found`` if absent.

    Slugs are unique per author, so the acting actor's own post wins.
    Otherwise a shared slug goes to the earliest post the actor may see,
    and only then to the earliest post overall.
    """
    svc = PostService(app.store)
    actor = app.actor
    if actor is not None:
        own = svc.get(key, owner_id=actor.id)
        if own.success:
            assert own.payload is not None
            return own.payload  # type: ignore[return-value]
    found = svc.get(key, scope=app.policy.scope_posts(actor))
    if found.failure:
        app.emit(found.model_copy(update={"op": op}))
    return found.payload  # type: ignore[return-value]


@click.group(cls=PressGroup, examples=_POST_EXAMPLES)
def post() -> None:
    """Write, publish, and browse posts."""


@post.command(
    examples="""\
  pressctl --as 2 post create "Hello World" --body "First post!"
  pressctl --as 2 post create "Release notes" -b "..." --publish""",
)
@click.argument("title")
@click.option("-b", "--body", required=True, help="Post body.")
@click.option("--publish", "publish_now", is_flag=True, help="Publish immediately.")
@click.pass_obj
def create(app: AppContext, title: str, body: str, publish_now: bool) -> None:
    """Create a post owned by the acting user."""
    actor = app.actor
    app.require(app.policy.allows_post(Action.CREATE, actor), "create_post")
    assert actor is not None
    app.emit(PostService(app.store).create(actor, title, body, publish_now=publish_now))


@post.command(examples='  pressctl --as 2 post edit hello-world --title "Hello again"')
@click.argument("key")
@click.option("--title", default=None, help="New title (re-derives the slug).")
@click.option("-b", "--body", default=None, help="New body.")
@click.pass_obj
def edit(app: AppContext, key: str, title: str | None, body: str | None) -> None:
    """Edit a post's title and/or body."""
    if title is None and body is None:
        raise click.UsageError("Nothing to change: pass --title and/or --body.")
    target = load_post(app, key, "update_post")
    app.require(app.policy.allows_post(Action.UPDATE, app.actor, target), "update_post")
    app.emit(PostService(app.store).update(target, title=title, body=body))


@post.command(examples="  pressctl --as 2 post publish hello-world")
@click.argument("key")
@click.pass_obj
def publish(app: AppContext, key: str) -> None:
    """Publish a draft."""
    from pressctl.services.publication import PublicationService

    target = load_post(app, key, "publish_post")
    actor = app.actor
    app.require(app.policy.allows_post(Action.PUBLISH, actor, target), "publish_post")
    assert actor is not None
    app.emit(PublicationService(app.store).publish(target, actor))


@post.command(examples="  pressctl --as 2 post unpublish hello-world")
@click.argument("key")
@click.pass_obj
def unpublish(app: AppContext, key: str) -> None:
    """Return a published post to draft."""
    from pressctl.services.publication import PublicationService

    target = load_post(app, key, "unpublish_post")
    app.require(app.policy.allows_post(Action.UNPUBLISH, app.actor, target), "unpublish_post")
    app.emit(PublicationService(app.store).unpublish(target))


@post.command(examples="  pressctl --as 1 post delete 7")
@click.argument("key")
@click.pass_obj
def delete(app: AppContext, key: str) -> None:
    """Delete a post and its comments."""
    target = load_post(app, key, "destroy_post")
    app.require(app.policy.allows_post(Action.DESTROY, app.actor, target), "destroy_post")
    app.emit(PostService(app.store).destroy(target))


@post.command(
    "list",
    examples="""\
  pressctl post list
  pressctl --as 1 post list --status drafts
  pressctl post list --author 2 --search release --limit 10""",
)
@click.option(
    "--status",
    type=click.Choice(STATUS_FILTERS),
    default=None,
    help="Admins only: published posts or drafts.",
)
@click.option("--author", "author_id", type=int, default=None, help="Only posts by this user id.")
@click.option("--search", default=None, help="Substring of title or body.")
@click.option("--limit", type=click.IntRange(min=1), default=None)
@click.pass_obj
def list_posts(
    app: AppContext,
    status: str | None,
    author_id: int | None,
    search: str | None,
    limit: int | None,
) -> None:
    """List the posts the acting user may see."""
    actor = app.actor
    policy = app.policy
    app.require(policy.allows_post(Action.INDEX, actor), "list_posts")
    app.emit(
        PostService(app.store).list(
            actor,
            status=status,
            author_id=author_id,
            search=search,
            limit=limit,
            policy=policy,
        )
    )


@post.command(examples="  pressctl post show hello-world --comments")
@click.argument("key")
@click.option("--comments", "with_comments", is_flag=True, help="Show the comment thread instead.")
@click.pass_obj
def show(app: AppContext, key: str, with_comments: bool) -> None:
    """Show a post, or its comments with ``--comments``."""
    target = load_post(app, key, "get_post")
    app.require(app.policy.allows_post(Action.VIEW, app.actor, target), "get_post")
    svc = PostService(app.store)
    if with_comments:
        app.emit(svc.comments(target))
    else:
        app.emit(svc.get(target.id))
