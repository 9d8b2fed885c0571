"""Read-oriented repository for post listings."""

from __future__ import annotations

from typing import Any, assert_never

from sqlalchemy import ColumnElement, and_, or_, select, true
from sqlalchemy.engine import Engine

from pressctl.domain.content import Post
from pressctl.domain.policy import PostScope, ScopeKind
from pressctl.infrastructure.database.schema import posts
from pressctl.infrastructure.store import post_from_row

_LIKE_ESCAPE = "\\"


def scope_clause(scope: PostScope) -> ColumnElement[bool]:
    """Translate a policy scope into a WHERE clause on ``posts``."""
    match scope.kind:
        case ScopeKind.ALL:
            return true()
        case ScopeKind.PUBLISHED_OR_OWNED:
            return or_(posts.c.published_at.is_not(None), posts.c.user_id == scope.owner_id)
        case ScopeKind.PUBLISHED:
            return posts.c.published_at.is_not(None)
        case _:
            assert_never(scope.kind)


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so *term* matches literally."""
    return (
        term.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", f"{_LIKE_ESCAPE}%")
        .replace("_", f"{_LIKE_ESCAPE}_")
    )


class PostRepository:
    """Encapsulates SQL for scoped post listings."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def list_posts(
        self,
        scope: PostScope,
        *,
        published: bool | None = None,
        author_id: int | None = None,
        search: str | None = None,
        limit: int | None = None,
    ) -> list[Post]:
        """List posts inside *scope*, most recently published first.

        Args:
            scope: Visibility scope from the policy engine.
            published: ``True`` for published only, ``False`` for drafts only.
            author_id: Restrict to one author.
            search: Case-insensitive substring over title and body.
            limit: Maximum rows returned.
        """
        conditions: list[ColumnElement[bool]] = [scope_clause(scope)]
        if published is True:
            conditions.append(posts.c.published_at.is_not(None))
        elif published is False:
            conditions.append(posts.c.published_at.is_(None))
        if author_id is not None:
            conditions.append(posts.c.user_id == author_id)
        if search:
            pattern = f"%{escape_like(search)}%"
            conditions.append(
                or_(
                    posts.c.title.ilike(pattern, escape=_LIKE_ESCAPE),
                    posts.c.body.ilike(pattern, escape=_LIKE_ESCAPE),
                )
            )

        stmt: Any = (
            select(posts)
            .where(and_(*conditions))
            .order_by(
                posts.c.published_at.desc().nulls_last(),
                posts.c.created_at.desc(),
                posts.c.id.desc(),
            )
        )
        if limit is not None:
            stmt = stmt.limit(limit)

        with self._engine.connect() as conn:
            return [post_from_row(row) for row in conn.execute(stmt)]
