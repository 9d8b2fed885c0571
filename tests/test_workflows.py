"""Integration workflow tests: multi-step scenarios spanning several services.

These exercise the hand-offs unit tests cannot catch: publication events
reaching channel subscribers, comment notifications fanning out to prior
commenters, and counters staying exact across creation, moderation and
post deletion.
"""

from __future__ import annotations

from typing import Any

from pressctl.domain.lifecycle import status_channel
from pressctl.domain.policy import DEFAULT_POLICY
from pressctl.domain.types import Action, Role
from pressctl.infrastructure.store import Store
from pressctl.plugins.builtins.mail_queue import MailMessage
from pressctl.services.admin import AdminService
from pressctl.services.comments import CommentService
from pressctl.services.posts import PostService
from pressctl.services.publication import PublicationService
from tests.conftest import add_comment, create_post, create_user, reload_post


class _Inbox:
    def __init__(self) -> None:
        self.messages: list[MailMessage] = []

    def enqueue(self, recipient: dict[str, Any], message: MailMessage) -> None:
        self.messages.append(message)

    def addressed_to(self, email: str) -> list[MailMessage]:
        return [m for m in self.messages if m.to == email]


class TestDraftToDiscussion:
    """Draft → publish → comment thread → unpublish."""

    def test_full_lifecycle(self, store: Store) -> None:
        inbox = _Inbox()
        store.init_event_bus(sync=True, mail_queue=inbox)
        admin = create_user(store, "Root", "root@example.com", Role.ADMIN)
        ann = create_user(store, "Ann", "ann@example.com")
        ben = create_user(store, "Ben", "ben@example.com")
        cat = create_user(store, "Cat")

        draft = create_post(store, ann, "Hello World", "First post!")
        assert not DEFAULT_POLICY.allows_post(Action.VIEW, ben, draft)

        status: list[dict[str, Any]] = []
        store.channels.subscribe(status_channel(draft.id), status.append)
        published = PublicationService(store).publish(draft, admin).payload
        assert published is not None
        assert DEFAULT_POLICY.allows_post(Action.VIEW, ben, published)  # type: ignore[arg-type]
        assert status[-1]["published_by_id"] == admin.id

        add_comment(store, draft, ben, "Great read")
        add_comment(store, draft, cat, "Agreed")
        add_comment(store, draft, None, "Anonymous thanks")

        assert len(inbox.addressed_to("ann@example.com")) == 3
        # Ben hears about the two comments after his.
        assert len(inbox.addressed_to("ben@example.com")) == 2
        assert reload_post(store, draft).comments_count == 3

        PublicationService(store).unpublish(draft)
        assert [m["state"] for m in status] == ["published", "draft"]
        listed = PostService(store).list(ben).data["posts"]
        assert draft.id not in [p.id for p in listed]


class TestModerationCounters:
    """Counters stay equal to live rows across every removal path."""

    def test_counters_match_rows(self, store: Store) -> None:
        ann = create_user(store, "Ann")
        ben = create_user(store, "Ben")
        first = create_post(store, ann, "First post", publish_now=True)
        second = create_post(store, ann, "Second post", publish_now=True)

        comments = [add_comment(store, first, ben, f"Comment {n} here") for n in range(4)]
        add_comment(store, second, ben, "Elsewhere")

        CommentService(store).destroy(comments[0])
        AdminService(store).bulk_destroy_comments([comments[1].id, comments[2].id])

        assert reload_post(store, first).comments_count == 1
        with store.reader() as txn:
            assert len(txn.list_comments(first.id)) == 1

        outcome = PostService(store).destroy(second)
        assert outcome.data["comments_removed"] == 1
        assert AdminService(store).stats().data["total_comments"] == 1
