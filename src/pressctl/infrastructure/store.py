"""Store: repository pattern with transaction coordination.

The Store is the single dependency injected into every service. It owns
the database engine, the notification event bus and the live status
channels. :meth:`Store.transaction` yields a :class:`StoreTransaction`
whose helpers are the only way services touch rows, so every
invariant-preserving write (counter changes, publication fields) rides
the same ``engine.begin()`` block and commits or rolls back as one.

Rows are converted to frozen domain models on the way out.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, func, insert, or_, select, update

from pressctl.domain.content import Actor, Comment, Post
from pressctl.domain.slugs import belongs_to_base
from pressctl.domain.types import Role
from pressctl.infrastructure.database.counters import adjust_comments_count
from pressctl.infrastructure.database.engine import db_path_for, init_database
from pressctl.infrastructure.database.schema import comments, posts, users
from pressctl.plugins.channels import ChannelHub

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from sqlalchemy import Connection, Row
    from sqlalchemy.engine import Engine

    from pressctl.config.settings import PressSettings
    from pressctl.domain.policy import PostScope
    from pressctl.plugins.builtins.mail_queue import MailQueue
    from pressctl.plugins.event_bus import EventBus

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Row → model conversion
# ---------------------------------------------------------------------------


def actor_from_row(row: Row[Any]) -> Actor:
    return Actor(id=row.id, name=row.name, email=row.email, role=Role(row.role))


def post_from_row(row: Row[Any]) -> Post:
    return Post(
        id=row.id,
        user_id=row.user_id,
        title=row.title,
        body=row.body,
        slug=row.slug,
        published_at=row.published_at,
        published_by_id=row.published_by_id,
        comments_count=row.comments_count,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def comment_from_row(row: Row[Any]) -> Comment:
    return Comment(
        id=row.id,
        post_id=row.post_id,
        user_id=row.user_id,
        body=row.body,
        created_at=row.created_at,
        user_name=row.user_name,
    )


_COMMENT_COLUMNS = (
    comments.c.id,
    comments.c.post_id,
    comments.c.user_id,
    comments.c.body,
    comments.c.created_at,
    users.c.name.label("user_name"),
)


def _comment_select() -> Any:
    return select(*_COMMENT_COLUMNS).select_from(
        comments.outerjoin(users, comments.c.user_id == users.c.id)
    )


# ---------------------------------------------------------------------------
# StoreTransaction: yielded to callers within transaction()
# ---------------------------------------------------------------------------


@dataclass
class StoreTransaction:
    """Active transaction context with helpers for every entity write.

    All helpers run on :attr:`conn`; nothing here commits. Constraint
    violations surface as ``sqlalchemy.exc.IntegrityError`` for the
    service layer to translate.
    """

    conn: Connection

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def insert_user(self, *, name: str, email: str | None, role: Role, now: datetime) -> int:
        result = self.conn.execute(
            insert(users).values(name=name, email=email, role=str(role), created_at=now)
        )
        assert result.inserted_primary_key is not None
        return int(result.inserted_primary_key[0])

    def get_user(self, user_id: int) -> Actor | None:
        row = self.conn.execute(select(users).where(users.c.id == user_id)).first()
        return actor_from_row(row) if row is not None else None

    def find_user_by_email(self, email: str) -> Actor | None:
        row = self.conn.execute(select(users).where(users.c.email == email)).first()
        return actor_from_row(row) if row is not None else None

    def list_users(self, *, role: Role | None = None) -> list[Actor]:
        stmt = select(users).order_by(users.c.created_at.desc(), users.c.id.desc())
        if role is not None:
            stmt = stmt.where(users.c.role == str(role))
        return [actor_from_row(r) for r in self.conn.execute(stmt)]

    def update_user(self, user_id: int, **values: Any) -> None:
        self.conn.execute(update(users).where(users.c.id == user_id).values(**values))

    def set_user_role(self, user_id: int, role: Role) -> None:
        self.conn.execute(update(users).where(users.c.id == user_id).values(role=str(role)))

    def delete_user(self, user_id: int) -> None:
        self.conn.execute(delete(users).where(users.c.id == user_id))

    def count_user_content(self, user_id: int) -> tuple[int, int]:
        """Return ``(posts, comments)`` authored by *user_id*."""
        post_count = self.conn.execute(
            select(func.count(posts.c.id)).where(posts.c.user_id == user_id)
        ).scalar_one()
        comment_count = self.conn.execute(
            select(func.count(comments.c.id)).where(comments.c.user_id == user_id)
        ).scalar_one()
        return int(post_count), int(comment_count)

    # ------------------------------------------------------------------
    # Posts
    # ------------------------------------------------------------------

    def get_post(self, post_id: int) -> Post | None:
        row = self.conn.execute(select(posts).where(posts.c.id == post_id)).first()
        return post_from_row(row) if row is not None else None

    def find_post(
        self,
        key: int | str,
        *,
        owner_id: int | None = None,
        scope: PostScope | None = None,
    ) -> Post | None:
        """Find a post by numeric id or by slug.

        Slugs are only unique per owner. When several posts share one, the
        earliest inside *scope* wins, then the earliest overall.
        """
        if isinstance(key, int) or key.isdigit():
            post = self.get_post(int(key))
            if post is not None and (owner_id is None or post.user_id == owner_id):
                return post
            if isinstance(key, int):
                return None

        stmt = select(posts).where(posts.c.slug == str(key))
        if owner_id is not None:
            stmt = stmt.where(posts.c.user_id == owner_id)
        candidates = [post_from_row(r) for r in self.conn.execute(stmt.order_by(posts.c.id))]
        if not candidates:
            return None
        if scope is not None:
            visible = next((p for p in candidates if scope.admits(p)), None)
            if visible is not None:
                return visible
        return candidates[0]

    def owner_slugs(
        self, owner_id: int, base: str, *, exclude_post_id: int | None = None
    ) -> set[str]:
        """Slugs in the ``base`` family already held by the owner's other posts."""
        stmt = select(posts.c.slug).where(
            posts.c.user_id == owner_id,
            or_(posts.c.slug == base, posts.c.slug.like(f"{base}-%")),
        )
        if exclude_post_id is not None:
            stmt = stmt.where(posts.c.id != exclude_post_id)
        taken = {str(r.slug) for r in self.conn.execute(stmt)}
        return {slug for slug in taken if belongs_to_base(slug, base)}

    def insert_post(self, **values: Any) -> int:
        result = self.conn.execute(insert(posts).values(**values))
        assert result.inserted_primary_key is not None
        return int(result.inserted_primary_key[0])

    def update_post(self, post_id: int, **values: Any) -> int:
        """Update a post row. Returns the number of rows changed."""
        result = self.conn.execute(update(posts).where(posts.c.id == post_id).values(**values))
        return int(result.rowcount)

    def delete_post(self, post_id: int) -> int:
        """Delete a post and its comments. Returns the comment rows removed."""
        removed = self.conn.execute(delete(comments).where(comments.c.post_id == post_id))
        self.conn.execute(delete(posts).where(posts.c.id == post_id))
        return int(removed.rowcount)

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    def get_comment(self, comment_id: int) -> Comment | None:
        row = self.conn.execute(_comment_select().where(comments.c.id == comment_id)).first()
        return comment_from_row(row) if row is not None else None

    def list_comments(self, post_id: int) -> list[Comment]:
        """Comments on a post, newest first."""
        stmt = (
            _comment_select()
            .where(comments.c.post_id == post_id)
            .order_by(comments.c.created_at.desc(), comments.c.id.desc())
        )
        return [comment_from_row(r) for r in self.conn.execute(stmt)]

    def insert_comment(
        self,
        *,
        post_id: int,
        user_id: int | None,
        body: str,
        now: datetime,
    ) -> int:
        """Bump the parent counter, then insert the comment, in this transaction.

        The counter goes first so a vanished post raises MissingPostError
        rather than a foreign-key IntegrityError.
        """
        adjust_comments_count(self.conn, post_id, 1)
        result = self.conn.execute(
            insert(comments).values(post_id=post_id, user_id=user_id, body=body, created_at=now)
        )
        assert result.inserted_primary_key is not None
        return int(result.inserted_primary_key[0])

    def delete_comment(self, comment: Comment) -> None:
        """Delete a comment and decrement the parent counter in this transaction."""
        result = self.conn.execute(delete(comments).where(comments.c.id == comment.id))
        if result.rowcount:
            adjust_comments_count(self.conn, comment.post_id, -1)

    def prior_commenters(self, post_id: int, *, exclude_comment_id: int) -> list[Actor]:
        """Distinct registered authors of other comments on a post."""
        stmt = (
            select(users)
            .join(comments, comments.c.user_id == users.c.id)
            .where(comments.c.post_id == post_id, comments.c.id != exclude_comment_id)
            .group_by(users.c.id)
            .order_by(func.min(comments.c.id))
        )
        return [actor_from_row(r) for r in self.conn.execute(stmt)]

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    def stats(self) -> dict[str, int]:
        """Site-wide totals for the admin dashboard."""

        def count(stmt: Any) -> int:
            return int(self.conn.execute(stmt).scalar_one())

        return {
            "total_users": count(select(func.count(users.c.id))),
            "total_posts": count(select(func.count(posts.c.id))),
            "published_posts": count(
                select(func.count(posts.c.id)).where(posts.c.published_at.is_not(None))
            ),
            "draft_posts": count(
                select(func.count(posts.c.id)).where(posts.c.published_at.is_(None))
            ),
            "total_comments": count(select(func.count(comments.c.id))),
            "admin_users": count(
                select(func.count(users.c.id)).where(users.c.role == str(Role.ADMIN))
            ),
        }


# ---------------------------------------------------------------------------
# Store: the repository
# ---------------------------------------------------------------------------


class Store:
    """Repository encapsulating database access and outbound dispatch.

    Constructed once per invocation from :class:`PressSettings`. Services
    receive the Store via their :class:`BaseService` constructor.
    """

    def __init__(self, settings: PressSettings) -> None:
        self._settings = settings
        self._engine: Engine = init_database(self.root, settings.database.filename)
        self._event_bus: EventBus | None = None
        self._channels = ChannelHub()

    @property
    def root(self) -> Path:
        """The site root directory."""
        return self._settings.site_root

    @property
    def db_path(self) -> Path:
        return db_path_for(self.root, self._settings.database.filename)

    @property
    def engine(self) -> Engine:
        """The underlying SQLAlchemy engine (for direct access when needed)."""
        return self._engine

    @property
    def settings(self) -> PressSettings:
        """The resolved settings for this site."""
        return self._settings

    @property
    def event_bus(self) -> EventBus | None:
        """The notification event bus (None if not initialized)."""
        return self._event_bus

    @property
    def channels(self) -> ChannelHub:
        """Live status channels that publication events fan out to."""
        return self._channels

    def init_event_bus(self, *, sync: bool = False, mail_queue: MailQueue | None = None) -> None:
        """Initialize the notification event bus.

        Creates a PluginManager, discovers entry-point and local plugins,
        registers the built-in mail and status-channel plugins, and wires
        up the EventBus. Called by AppContext when the store is first used.
        """
        from pressctl.plugins.builtins.mail_queue import LoggingMailQueue, MailQueuePlugin
        from pressctl.plugins.builtins.status_channel import StatusChannelPlugin
        from pressctl.plugins.event_bus import EventBus
        from pressctl.plugins.manager import PluginManager

        config = self._settings.notifications
        pm = PluginManager()
        pm.discover_and_load(local_dir=self.root / ".pressctl" / "plugins")

        if config.enabled:
            pm.register_plugin(
                MailQueuePlugin(
                    mail_queue or LoggingMailQueue(),
                    site_name=self._settings.site.name,
                    sender=config.sender,
                    site_root=self.root,
                ),
                name="mail-builtin",
            )
        pm.register_plugin(StatusChannelPlugin(self._channels), name="status-builtin")

        self._event_bus = EventBus(
            self._engine,
            pm,
            sync=sync,
            max_retries=config.max_retries,
            max_workers=config.max_workers,
        )

    @contextmanager
    def transaction(self) -> Iterator[StoreTransaction]:
        """One atomic unit of work.

        Commits when the block exits normally, rolls back on any exception.
        A service that returns a failure Outcome from inside the block must
        do so before writing anything.

        Usage::

            with store.transaction() as txn:
                comment_id = txn.insert_comment(post_id=..., ...)
                # insert and counter bump commit together.
        """
        with self._engine.begin() as conn:
            yield StoreTransaction(conn=conn)

    @contextmanager
    def reader(self) -> Iterator[StoreTransaction]:
        """Read-only access; anything written here is rolled back."""
        with self._engine.connect() as conn:
            yield StoreTransaction(conn=conn)

    def close(self) -> None:
        """Shut down the event bus and release pooled connections."""
        if self._event_bus is not None:
            self._event_bus.shutdown()
        self._engine.dispose()
