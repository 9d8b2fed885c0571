"""Policy engine: who may do what to which post or comment.

Every decision is a pure function of ``(action, actor, resource)``:
no I/O, no exceptions for denial. A denied action is simply ``False``
and the caller decides what to show. An anonymous caller is ``None``.

Rules:

=====================  ====================================================
Action                 Rule
=====================  ====================================================
index post             anyone
view post              published, or actor owns it, or actor is admin
list posts (scope)     admin: all; member: published + own; anon: published
create post/comment    signed in
update post            signed in and (owner or admin)
destroy post           :class:`DeletePostRule` (owner-or-admin by default)
publish/unpublish      signed in and (owner or admin)
destroy comment        signed in and (author or admin)
=====================  ====================================================

Publishing an already published post is a conflict reported by the
publication service, not a denial here.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import assert_never

from pressctl.domain.content import Actor, Comment, Post
from pressctl.domain.types import Action, DeletePostRule, Role

# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def is_signed_in(actor: Actor | None) -> bool:
    return actor is not None


def is_admin(actor: Actor | None) -> bool:
    """Exhaustive role check; anonymous is never admin."""
    if actor is None:
        return False
    match actor.role:
        case Role.ADMIN:
            return True
        case Role.MEMBER:
            return False
        case _:
            assert_never(actor.role)


def is_owner(actor: Actor | None, owner_id: int | None) -> bool:
    """Identity equality with the resource owner key. Null never matches."""
    if actor is None or owner_id is None:
        return False
    return actor.id == owner_id


def _manages(actor: Actor | None, owner_id: int | None) -> bool:
    return is_signed_in(actor) and (is_owner(actor, owner_id) or is_admin(actor))


# ---------------------------------------------------------------------------
# Scope filter
# ---------------------------------------------------------------------------


class ScopeKind(StrEnum):
    """How a post listing is narrowed for an actor."""

    ALL = "all"
    PUBLISHED_OR_OWNED = "published_or_owned"
    PUBLISHED = "published"


@dataclass(frozen=True)
class PostScope:
    """Query-narrowing descriptor, translated to SQL by the store."""

    kind: ScopeKind
    owner_id: int | None = None

    def admits(self, post: Post) -> bool:
        """Whether a single post falls inside this scope."""
        match self.kind:
            case ScopeKind.ALL:
                return True
            case ScopeKind.PUBLISHED_OR_OWNED:
                return post.published or post.user_id == self.owner_id
            case ScopeKind.PUBLISHED:
                return post.published
            case _:
                assert_never(self.kind)


# ---------------------------------------------------------------------------
# Policy
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Policy:
    """Decision table for posts and comments.

    Attributes:
        delete_post: Which variant of the post-deletion rule applies.
    """

    delete_post: DeletePostRule = DeletePostRule.OWNER_OR_ADMIN

    def allows_post(self, action: Action, actor: Actor | None, post: Post | None = None) -> bool:
        """Decide whether *actor* may perform *action* on *post*.

        *post* may be None for actions that do not target an existing
        record (``INDEX``, ``CREATE``).
        """
        owner_id = post.user_id if post is not None else None
        match action:
            case Action.INDEX:
                return True
            case Action.VIEW:
                if post is None:
                    return False
                return post.published or is_owner(actor, owner_id) or is_admin(actor)
            case Action.CREATE:
                return is_signed_in(actor)
            case Action.UPDATE | Action.PUBLISH | Action.UNPUBLISH:
                return post is not None and _manages(actor, owner_id)
            case Action.DESTROY:
                if post is None:
                    return False
                return self._may_destroy_post(actor, owner_id)
            case _:
                assert_never(action)

    def allows_comment(
        self,
        action: Action,
        actor: Actor | None,
        comment: Comment | None = None,
    ) -> bool:
        """Decide whether *actor* may perform *action* on *comment*."""
        match action:
            case Action.CREATE:
                return is_signed_in(actor)
            case Action.DESTROY:
                if comment is None:
                    return False
                return _manages(actor, comment.user_id)
            case Action.INDEX | Action.VIEW | Action.UPDATE | Action.PUBLISH | Action.UNPUBLISH:
                return False
            case _:
                assert_never(action)

    def scope_posts(self, actor: Actor | None) -> PostScope:
        """Narrow a post collection to what *actor* may see."""
        if is_admin(actor):
            return PostScope(ScopeKind.ALL)
        if actor is not None:
            return PostScope(ScopeKind.PUBLISHED_OR_OWNED, owner_id=actor.id)
        return PostScope(ScopeKind.PUBLISHED)

    def _may_destroy_post(self, actor: Actor | None, owner_id: int | None) -> bool:
        match self.delete_post:
            case DeletePostRule.OWNER_OR_ADMIN:
                return _manages(actor, owner_id)
            case DeletePostRule.ADMIN_ONLY:
                return is_admin(actor)
            case _:
                assert_never(self.delete_post)


DEFAULT_POLICY = Policy()
