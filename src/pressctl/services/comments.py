"""CommentService: gated comment submission and removal.

Submission gates run in a fixed order: BLANK, SPAM, LENGTH, PERSIST,
NOTIFY. The first three reject without touching the database. PERSIST
writes the comment row and bumps the parent counter in one transaction.
NOTIFY runs after commit; a delivery that cannot be queued is logged
and never changes the outcome.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError

from pressctl.domain.content import (
    Actor,
    Comment,
    Post,
    is_blank,
    validate_comment_body,
)
from pressctl.domain.notifications import comment_recipients
from pressctl.domain.spam import find_spam_keyword
from pressctl.domain.types import ErrorCode
from pressctl.infrastructure.database.counters import MissingPostError
from pressctl.services._helpers import iso_or_none, utcnow
from pressctl.services.base import BaseService
from pressctl.services.result import Outcome
from pressctl.services.telemetry import trace_span, traced

logger = logging.getLogger(__name__)

BLANK_MESSAGE = "Comment body can't be blank"
SPAM_MESSAGE = "Comment appears to be spam and was blocked"
MISSING_POST_MESSAGE = "Post must exist"


def _notification_context(post: Post, comment: Comment) -> dict[str, Any]:
    """JSON-safe template variables for one new-comment notification."""
    return {
        "post": {
            "id": post.id,
            "title": post.title,
            "slug": post.slug,
            "user_id": post.user_id,
        },
        "comment": {
            "id": comment.id,
            "body": comment.body,
            "created_at": iso_or_none(comment.created_at),
        },
        "commenter_name": comment.author_name,
    }


class CommentService(BaseService):
    """Accepts, rejects, and removes comments."""

    @traced
    def submit(self, post: Post, actor: Actor | None, body: str | None) -> Outcome:
        """Run the comment pipeline for *body* on *post*.

        *actor* may be None for an anonymous comment; the policy layer
        decides whether that is allowed before this is called.
        """
        op = "submit_comment"
        cfg = self._store.settings.comments

        # BLANK
        if is_blank(body):
            return Outcome.fail(op, ErrorCode.INVALID, BLANK_MESSAGE)
        assert body is not None

        # SPAM
        keyword = find_spam_keyword(body, cfg.spam_keywords)
        if keyword is not None:
            logger.info("Blocked comment on post %d: matched %r", post.id, keyword)
            return Outcome.fail(op, ErrorCode.SPAM_BLOCKED, SPAM_MESSAGE)

        # LENGTH
        vr = validate_comment_body(body, minimum=cfg.body_min_length, maximum=cfg.body_max_length)
        if not vr.valid:
            return Outcome.fail(op, ErrorCode.INVALID, vr.message)

        # PERSIST
        commenter_id = actor.id if actor is not None else None
        try:
            with self._store.transaction() as txn:
                comment_id = txn.insert_comment(
                    post_id=post.id, user_id=commenter_id, body=body, now=utcnow()
                )
                comment = txn.get_comment(comment_id)
                stored_post = txn.get_post(post.id)
                owner = txn.get_user(post.user_id)
                prior = txn.prior_commenters(post.id, exclude_comment_id=comment_id)
        except MissingPostError:
            return Outcome.fail(op, ErrorCode.INVALID, MISSING_POST_MESSAGE)
        except IntegrityError as exc:
            logger.debug("Comment insert rejected by constraint", exc_info=True)
            return Outcome.fail(op, ErrorCode.INVALID, f"Comment could not be saved: {exc.orig}")

        assert comment is not None and stored_post is not None

        # NOTIFY
        with trace_span("notify") as span:
            recipients = comment_recipients(
                post_owner=owner, commenter_id=commenter_id, prior_commenters=prior
            )
            context = _notification_context(stored_post, comment)
            queued = 0
            for recipient in recipients:
                queued += self._dispatch_event(
                    "deliver_comment_notification",
                    {
                        "recipient": {
                            "id": recipient.id,
                            "name": recipient.name,
                            "email": recipient.email,
                        },
                        "context": context,
                    },
                )
            if span is not None:
                span.annotate("recipients", len(recipients))
                span.annotate("queued", queued)

        return Outcome.succeed(
            op,
            comment,
            data={
                "comments_count": stored_post.comments_count,
                "notified": [r.id for r in recipients],
            },
        )

    @traced
    def destroy(self, comment: Comment) -> Outcome:
        """Delete *comment* and decrement its post's counter."""
        op = "destroy_comment"
        with self._store.transaction() as txn:
            current = txn.get_comment(comment.id)
            if current is None:
                return Outcome.fail(op, ErrorCode.NOT_FOUND, f"No comment with id {comment.id}")
            txn.delete_comment(current)

        return Outcome.succeed(op, current)

    @traced
    def get(self, comment_id: int) -> Outcome:
        """Look up a single comment."""
        op = "get_comment"
        with self._store.reader() as txn:
            comment = txn.get_comment(comment_id)
        if comment is None:
            return Outcome.fail(op, ErrorCode.NOT_FOUND, f"No comment with id {comment_id}")
        return Outcome.succeed(op, comment)
