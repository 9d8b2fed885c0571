"""PostService: authoring, lookup, and scoped listing of posts.

Pipeline for writes: VALIDATE, SLUG, PERSIST, RESPOND. Publication
fields are only touched here at creation time (``publish_now``); every
later change goes through :class:`~pressctl.services.publication.PublicationService`.
"""

from __future__ import annotations

import logging
from typing import Any

from pressctl.domain.content import Actor, Post, validate_post_fields
from pressctl.domain.policy import DEFAULT_POLICY, Policy, PostScope, is_admin
from pressctl.domain.types import ErrorCode
from pressctl.infrastructure.repositories.posts import PostRepository
from pressctl.services._helpers import utcnow
from pressctl.services.base import BaseService
from pressctl.services.result import Outcome
from pressctl.services.slugs import SlugAssigner, SlugExhaustedError
from pressctl.services.telemetry import trace_span, traced

logger = logging.getLogger(__name__)

STATUS_FILTERS = ("published", "drafts")


class PostService(BaseService):
    """Creates, edits, deletes, and lists posts."""

    def _slugs(self) -> SlugAssigner:
        return SlugAssigner(max_attempts=self._store.settings.posts.slug_max_attempts)

    def _validate(self, title: str | None, body: str | None) -> list[str]:
        cfg = self._store.settings.posts
        result = validate_post_fields(
            title,
            body,
            title_min=cfg.title_min_length,
            title_max=cfg.title_max_length,
            body_min=cfg.body_min_length,
            body_max=cfg.body_max_length,
        )
        return result.errors

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @traced
    def create(
        self,
        actor: Actor,
        title: str,
        body: str,
        *,
        publish_now: bool = False,
    ) -> Outcome:
        """Create a post owned by *actor*.

        With *publish_now* the post is stored already published, but
        ``published_by_id`` stays null and no status event is emitted.
        """
        op = "create_post"
        errors = self._validate(title, body)
        if errors:
            return Outcome.fail(op, ErrorCode.INVALID, ", ".join(errors))

        now = utcnow()
        try:
            with self._store.transaction() as txn, trace_span("assign_slug") as span:
                slug, post_id = self._slugs().assign(
                    txn,
                    title,
                    actor.id,
                    lambda candidate: txn.insert_post(
                        user_id=actor.id,
                        title=title,
                        body=body,
                        slug=candidate,
                        published_at=now if publish_now else None,
                        published_by_id=None,
                        comments_count=0,
                        created_at=now,
                        updated_at=now,
                    ),
                )
                post = txn.get_post(post_id)
                if span is not None:
                    span.annotate("slug", slug)
        except SlugExhaustedError as exc:
            return Outcome.fail(op, ErrorCode.SLUG_CONFLICT, str(exc))

        assert post is not None
        logger.debug("Created post %d with slug %r", post.id, slug)
        return Outcome.succeed(op, post)

    @traced
    def update(
        self,
        post: Post,
        *,
        title: str | None = None,
        body: str | None = None,
    ) -> Outcome:
        """Edit title and/or body. A changed title re-derives the slug."""
        op = "update_post"
        try:
            with self._store.transaction() as txn:
                current = txn.get_post(post.id)
                if current is None:
                    return Outcome.fail(op, ErrorCode.NOT_FOUND, f"No post with id {post.id}")

                new_title = current.title if title is None else title
                new_body = current.body if body is None else body
                errors = self._validate(new_title, new_body)
                if errors:
                    return Outcome.fail(op, ErrorCode.INVALID, ", ".join(errors), payload=current)

                values: dict[str, Any] = {
                    "title": new_title,
                    "body": new_body,
                    "updated_at": utcnow(),
                }
                if new_title != current.title:
                    self._slugs().assign(
                        txn,
                        new_title,
                        current.user_id,
                        lambda candidate: txn.update_post(current.id, slug=candidate, **values),
                        post_id=current.id,
                    )
                else:
                    txn.update_post(current.id, **values)
                updated = txn.get_post(current.id)
        except SlugExhaustedError as exc:
            return Outcome.fail(op, ErrorCode.SLUG_CONFLICT, str(exc), payload=post)

        return Outcome.succeed(op, updated)

    @traced
    def destroy(self, post: Post) -> Outcome:
        """Delete a post together with its comments."""
        op = "destroy_post"
        with self._store.transaction() as txn:
            current = txn.get_post(post.id)
            if current is None:
                return Outcome.fail(op, ErrorCode.NOT_FOUND, f"No post with id {post.id}")
            removed = txn.delete_post(current.id)

        return Outcome.succeed(op, current, data={"comments_removed": removed})

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @traced
    def get(
        self,
        key: int | str,
        *,
        owner_id: int | None = None,
        scope: PostScope | None = None,
    ) -> Outcome:
        """Look a post up by numeric id or slug.

        A shared slug resolves to the earliest post inside *scope* when one
        is given.
        """
        op = "get_post"
        with self._store.reader() as txn:
            post = txn.find_post(key, owner_id=owner_id, scope=scope)
        if post is None:
            return Outcome.fail(op, ErrorCode.NOT_FOUND, f"No post found for {key!r}")
        return Outcome.succeed(op, post)

    @traced
    def list(
        self,
        actor: Actor | None,
        *,
        status: str | None = None,
        author_id: int | None = None,
        search: str | None = None,
        limit: int | None = None,
        policy: Policy = DEFAULT_POLICY,
    ) -> Outcome:
        """Posts visible to *actor*, newest publication first.

        *status* (``published`` or ``drafts``) only narrows the listing
        for admins; everyone else already sees a fixed scope.
        """
        op = "list_posts"
        if status is not None and status not in STATUS_FILTERS:
            return Outcome.fail(
                op,
                ErrorCode.INVALID,
                f"Unknown status filter {status!r}; expected one of {', '.join(STATUS_FILTERS)}",
            )

        published: bool | None = None
        if status is not None and is_admin(actor):
            published = status == "published"

        repo = PostRepository(self._store.engine)
        found = repo.list_posts(
            policy.scope_posts(actor),
            published=published,
            author_id=author_id,
            search=search,
            limit=limit,
        )
        return Outcome.succeed(op, data={"posts": found, "count": len(found)})

    @traced
    def comments(self, post: Post) -> Outcome:
        """Comments on *post*, newest first."""
        op = "list_comments"
        with self._store.reader() as txn:
            found = txn.list_comments(post.id)
        return Outcome.succeed(op, post, data={"comments": found, "count": len(found)})
