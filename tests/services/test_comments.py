"""Tests for CommentService: gates, counter integrity, and notifications."""

from __future__ import annotations

import threading
from typing import Any

import pytest

from pressctl.domain.types import ErrorCode
from pressctl.infrastructure.store import Store
from pressctl.plugins.builtins.mail_queue import MailMessage
from pressctl.services.comments import (
    BLANK_MESSAGE,
    MISSING_POST_MESSAGE,
    SPAM_MESSAGE,
    CommentService,
)
from pressctl.services.posts import PostService
from tests.conftest import add_comment, create_post, create_user, reload_post


class RecordingQueue:
    def __init__(self) -> None:
        self.sent: list[MailMessage] = []

    def enqueue(self, recipient: dict[str, Any], message: MailMessage) -> None:
        self.sent.append(message)


class TestGates:
    def test_spam_is_blocked_without_row(self, store: Store) -> None:
        author = create_user(store, "Author")
        post = create_post(store, author, publish_now=True)
        outcome = CommentService(store).submit(post, author, "Buy bitcoin now!!!")
        assert outcome.error_code is ErrorCode.SPAM_BLOCKED
        assert outcome.error == SPAM_MESSAGE
        assert reload_post(store, post).comments_count == 0
        with store.reader() as txn:
            assert txn.list_comments(post.id) == []

    @pytest.mark.parametrize("body", ["", "   ", None])
    def test_blank(self, store: Store, body: str | None) -> None:
        author = create_user(store, "Author")
        post = create_post(store, author, publish_now=True)
        outcome = CommentService(store).submit(post, author, body)
        assert outcome.error_code is ErrorCode.INVALID
        assert outcome.error == BLANK_MESSAGE

    def test_blank_checked_before_spam(self, store: Store) -> None:
        author = create_user(store, "Author")
        post = create_post(store, author, publish_now=True)
        outcome = CommentService(store).submit(post, author, "  ")
        assert outcome.error == BLANK_MESSAGE

    def test_spam_checked_before_length(self, store: Store) -> None:
        author = create_user(store, "Author")
        post = create_post(store, author, publish_now=True)
        outcome = CommentService(store).submit(post, author, "winner " + "x" * 600)
        assert outcome.error_code is ErrorCode.SPAM_BLOCKED

    def test_too_short_and_too_long(self, store: Store) -> None:
        author = create_user(store, "Author")
        post = create_post(store, author, publish_now=True)
        svc = CommentService(store)
        short = svc.submit(post, author, "hi")
        assert short.error == "Body is too short (minimum is 3 characters)"
        long = svc.submit(post, author, "x" * 501)
        assert long.error == "Body is too long (maximum is 500 characters)"
        assert reload_post(store, post).comments_count == 0

    def test_missing_post(self, store: Store) -> None:
        author = create_user(store, "Author")
        post = create_post(store, author, publish_now=True)
        PostService(store).destroy(post)
        outcome = CommentService(store).submit(post, author, "Still here?")
        assert outcome.error_code is ErrorCode.INVALID
        assert outcome.error == MISSING_POST_MESSAGE


class TestPersist:
    def test_hello_world_scenario(self, store: Store) -> None:
        author = create_user(store, "Author")
        reader = create_user(store, "Reader")
        post = create_post(store, author, "Hello World", "First post!", publish_now=True)
        assert post.slug == "hello-world"

        outcome = CommentService(store).submit(post, reader, "Great read")
        assert outcome.success
        assert outcome.data["comments_count"] == 1
        assert outcome.payload.author_name == "Reader"  # type: ignore[union-attr]
        assert reload_post(store, post).comments_count == 1

    def test_anonymous_comment(self, store: Store) -> None:
        author = create_user(store, "Author")
        post = create_post(store, author, publish_now=True)
        comment = add_comment(store, post, None, "Drive-by remark")
        assert comment.user_id is None
        assert comment.author_name == "Guest"

    def test_concurrent_submissions_keep_counter_exact(self, store: Store) -> None:
        author = create_user(store, "Author")
        post = create_post(store, author, publish_now=True)
        workers = 8
        barrier = threading.Barrier(workers)
        failures: list[str] = []

        def submit(n: int) -> None:
            barrier.wait()
            outcome = CommentService(store).submit(post, author, f"Comment number {n}")
            if not outcome.success:
                failures.append(outcome.error or "")

        threads = [threading.Thread(target=submit, args=(n,)) for n in range(workers)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert failures == []
        assert reload_post(store, post).comments_count == workers
        with store.reader() as txn:
            assert len(txn.list_comments(post.id)) == workers

    def test_destroy_decrements_counter(self, store: Store) -> None:
        author = create_user(store, "Author")
        post = create_post(store, author, publish_now=True)
        comment = add_comment(store, post, author)
        add_comment(store, post, author, "Second comment")
        outcome = CommentService(store).destroy(comment)
        assert outcome.success
        assert reload_post(store, post).comments_count == 1

    def test_destroy_missing(self, store: Store) -> None:
        author = create_user(store, "Author")
        post = create_post(store, author, publish_now=True)
        comment = add_comment(store, post, author)
        svc = CommentService(store)
        svc.destroy(comment)
        assert svc.destroy(comment).error_code is ErrorCode.NOT_FOUND
        assert reload_post(store, post).comments_count == 0

    def test_get(self, store: Store) -> None:
        author = create_user(store, "Author")
        post = create_post(store, author, publish_now=True)
        comment = add_comment(store, post, author)
        svc = CommentService(store)
        assert svc.get(comment.id).payload == comment
        assert svc.get(9999).error_code is ErrorCode.NOT_FOUND


class TestNotify:
    @pytest.fixture
    def queue(self, store: Store) -> RecordingQueue:
        q = RecordingQueue()
        store.init_event_bus(sync=True, mail_queue=q)
        return q

    def test_owner_and_prior_commenters(self, store: Store, queue: RecordingQueue) -> None:
        owner = create_user(store, "Owner", "owner@example.com")
        ann = create_user(store, "Ann", "ann@example.com")
        ben = create_user(store, "Ben", "ben@example.com")
        post = create_post(store, owner, "Hello World", publish_now=True)

        add_comment(store, post, ann, "First!")
        assert [m.to for m in queue.sent] == ["owner@example.com"]

        queue.sent.clear()
        outcome = CommentService(store).submit(post, ben, "Second!")
        assert sorted(m.to for m in queue.sent) == ["ann@example.com", "owner@example.com"]
        assert sorted(outcome.data["notified"]) == sorted([owner.id, ann.id])

    def test_message_rendering(self, store: Store, queue: RecordingQueue) -> None:
        owner = create_user(store, "Owner", "owner@example.com")
        post = create_post(store, owner, "Hello World", publish_now=True)
        add_comment(store, post, None, "Lovely post")

        [message] = queue.sent
        assert message.subject == 'New comment on "Hello World"'
        assert "Hi Owner," in message.body
        assert "Guest left a new comment" in message.body
        assert "Lovely post" in message.body
        assert message.sender == store.settings.notifications.sender

    def test_owner_commenting_is_not_notified(self, store: Store, queue: RecordingQueue) -> None:
        owner = create_user(store, "Owner", "owner@example.com")
        post = create_post(store, owner, publish_now=True)
        add_comment(store, post, owner, "Replying to myself")
        assert queue.sent == []

    def test_owner_without_email_is_skipped(self, store: Store, queue: RecordingQueue) -> None:
        owner = create_user(store, "Owner")
        post = create_post(store, owner, publish_now=True)
        outcome = CommentService(store).submit(post, None, "Anyone home?")
        assert outcome.success
        assert outcome.data["notified"] == []
        assert queue.sent == []

    def test_mailless_prior_commenter_reaches_hook_but_not_queue(
        self, store: Store, queue: RecordingQueue
    ) -> None:
        owner = create_user(store, "Owner", "owner@example.com")
        quiet = create_user(store, "Quiet")
        ben = create_user(store, "Ben", "ben@example.com")
        post = create_post(store, owner, publish_now=True)
        add_comment(store, post, quiet, "Lurking")

        queue.sent.clear()
        outcome = CommentService(store).submit(post, ben, "Hello all")
        assert sorted(outcome.data["notified"]) == sorted([owner.id, quiet.id])
        assert [m.to for m in queue.sent] == ["owner@example.com"]

    def test_delivery_failure_does_not_fail_comment(self, store: Store) -> None:
        class BrokenQueue:
            def enqueue(self, recipient: dict[str, Any], message: MailMessage) -> None:
                raise RuntimeError("smtp down")

        store.init_event_bus(sync=True, mail_queue=BrokenQueue())
        owner = create_user(store, "Owner", "owner@example.com")
        post = create_post(store, owner, publish_now=True)
        outcome = CommentService(store).submit(post, None, "Still saved")
        assert outcome.success
        assert reload_post(store, post).comments_count == 1
