"""Denormalized comment counter on ``posts.comments_count``.

The increment is a single ``UPDATE ... SET n = n + delta`` so concurrent
submissions never read-modify-write a stale value. The caller owns the
transaction; pass a ``Connection`` obtained from ``engine.begin()`` so
the counter change commits or rolls back with the comment row itself.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import func, select, update

from pressctl.infrastructure.database.schema import comments, posts

if TYPE_CHECKING:
    from sqlalchemy import Connection


class MissingPostError(LookupError):
    """The post whose counter should change no longer exists."""


def adjust_comments_count(conn: Connection, post_id: int, delta: int) -> int:
    """Add *delta* to a post's comment counter and return the new value.

    Raises:
        MissingPostError: If no post row has *post_id*.
    """
    result = conn.execute(
        update(posts)
        .where(posts.c.id == post_id)
        .values(comments_count=posts.c.comments_count + delta)
    )
    if result.rowcount == 0:
        msg = f"Post {post_id} does not exist"
        raise MissingPostError(msg)

    return int(
        conn.execute(select(posts.c.comments_count).where(posts.c.id == post_id)).scalar_one()
    )


def reset_comments_count(conn: Connection, post_id: int | None = None) -> int:
    """Recompute counters from live comment rows.

    Resets one post when *post_id* is given, otherwise every post.
    Returns the number of post rows touched.
    """
    live = (
        select(func.count(comments.c.id))
        .where(comments.c.post_id == posts.c.id)
        .scalar_subquery()
    )
    stmt = update(posts).values(comments_count=live)
    if post_id is not None:
        stmt = stmt.where(posts.c.id == post_id)
    return int(conn.execute(stmt).rowcount)
