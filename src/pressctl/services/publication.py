"""PublicationService: the draft/published state machine.

A post's state is derived from ``published_at`` alone. Both transitions
re-read the row inside the write transaction, so a racing caller sees
the committed state and gets a conflict instead of a double write.
Status events go out only after commit.
"""

from __future__ import annotations

import logging

from pressctl.domain.content import Actor, Post
from pressctl.domain.lifecycle import PostState, is_valid_transition, status_channel
from pressctl.domain.types import ErrorCode
from pressctl.services._helpers import iso_or_none, utcnow
from pressctl.services.base import BaseService
from pressctl.services.result import Outcome
from pressctl.services.telemetry import traced

logger = logging.getLogger(__name__)


class PublicationService(BaseService):
    """Publishes and unpublishes posts."""

    @traced
    def publish(self, post: Post, actor: Actor) -> Outcome:
        """Mark *post* published by *actor*.

        Publishing an already published post leaves the row untouched and
        returns ``already_published``.
        """
        op = "publish_post"
        with self._store.transaction() as txn:
            current = txn.get_post(post.id)
            if current is None:
                return Outcome.fail(op, ErrorCode.NOT_FOUND, f"No post with id {post.id}")
            if not is_valid_transition(current.state, PostState.PUBLISHED):
                return Outcome.fail(
                    op, ErrorCode.ALREADY_PUBLISHED, "Post is already published", payload=current
                )

            now = utcnow()
            txn.update_post(current.id, published_at=now, published_by_id=actor.id, updated_at=now)
            updated = txn.get_post(current.id)

        assert updated is not None
        self._announce(updated)
        logger.debug("Post %d published by %d", updated.id, actor.id)
        return Outcome.succeed(op, updated)

    @traced
    def unpublish(self, post: Post) -> Outcome:
        """Return *post* to draft, clearing both publication fields.

        Unpublishing a draft is a conflict (``already_draft``) and leaves
        ``published_by_id`` as it was.
        """
        op = "unpublish_post"
        with self._store.transaction() as txn:
            current = txn.get_post(post.id)
            if current is None:
                return Outcome.fail(op, ErrorCode.NOT_FOUND, f"No post with id {post.id}")
            if not is_valid_transition(current.state, PostState.DRAFT):
                return Outcome.fail(
                    op, ErrorCode.ALREADY_DRAFT, "Post is already a draft", payload=current
                )

            txn.update_post(
                current.id, published_at=None, published_by_id=None, updated_at=utcnow()
            )
            updated = txn.get_post(current.id)

        assert updated is not None
        self._announce(updated)
        return Outcome.succeed(op, updated)

    def _announce(self, post: Post) -> None:
        self._dispatch_event(
            "post_status_changed",
            {
                "post_id": post.id,
                "channel": status_channel(post.id),
                "state": str(post.state),
                "published_at": iso_or_none(post.published_at),
                "published_by_id": post.published_by_id,
            },
        )
