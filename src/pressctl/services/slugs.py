"""SlugAssigner: per-author unique slugs backed by the store constraint.

The pre-check only picks a good first candidate. The ``(user_id, slug)``
unique constraint is the real arbiter: each write runs in a SAVEPOINT,
and a uniqueness violation (a sibling post committed the same slug in
the meantime) rolls back just that attempt and moves on to the next
counter.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, TypeVar

from sqlalchemy.exc import IntegrityError

from pressctl.domain.slugs import parameterize, slug_candidates
from pressctl.infrastructure.database.schema import POST_SLUG_CONSTRAINT

if TYPE_CHECKING:
    from pressctl.infrastructure.store import StoreTransaction

logger = logging.getLogger(__name__)

_T = TypeVar("_T")


class SlugExhaustedError(RuntimeError):
    """No free slug found within the allowed attempts."""


def is_slug_violation(exc: IntegrityError) -> bool:
    """Whether *exc* came from the ``(user_id, slug)`` unique constraint."""
    message = str(exc.orig)
    return POST_SLUG_CONSTRAINT in message or "posts.slug" in message


class SlugAssigner:
    """Derive and claim a slug for a post owned by one author."""

    def __init__(self, *, max_attempts: int = 50) -> None:
        self._max_attempts = max_attempts

    def assign(
        self,
        txn: StoreTransaction,
        title: str,
        owner_id: int,
        write: Callable[[str], _T],
        *,
        post_id: int | None = None,
    ) -> tuple[str, _T]:
        """Claim the first free slug for *title* by calling ``write(slug)``.

        *write* performs the insert or update that stores the slug; its
        return value is passed back. *post_id* excludes the post's own
        current slug from the collision check, so re-assigning an
        unchanged title is a no-op.

        Raises:
            SlugExhaustedError: After ``max_attempts`` constraint violations.
        """
        base = parameterize(title)
        taken = txn.owner_slugs(owner_id, base, exclude_post_id=post_id)

        attempts = 0
        for candidate in slug_candidates(base):
            if candidate in taken:
                continue
            if attempts >= self._max_attempts:
                break
            attempts += 1
            try:
                with txn.conn.begin_nested():
                    result = write(candidate)
            except IntegrityError as exc:
                if not is_slug_violation(exc):
                    raise
                logger.debug("Slug %r taken for owner %d, trying next", candidate, owner_id)
                continue
            return candidate, result

        msg = f"No free slug for {base!r} after {attempts} attempts"
        raise SlugExhaustedError(msg)
