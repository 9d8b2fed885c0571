"""Closed enums shared across the domain.

Roles, policy actions, and the machine-readable error codes carried by
every :class:`~pressctl.services.result.Outcome`.
"""

from __future__ import annotations

from enum import StrEnum


class Role(StrEnum):
    """Account roles. Exactly one per actor, never empty."""

    MEMBER = "member"
    ADMIN = "admin"


class Action(StrEnum):
    """Actions an actor may attempt against a post or comment."""

    INDEX = "index"
    VIEW = "view"
    CREATE = "create"
    UPDATE = "update"
    DESTROY = "destroy"
    PUBLISH = "publish"
    UNPUBLISH = "unpublish"


class DeletePostRule(StrEnum):
    """Configurable variants of the post-deletion rule."""

    OWNER_OR_ADMIN = "owner_or_admin"
    ADMIN_ONLY = "admin_only"


class ErrorCode(StrEnum):
    """Machine-readable failure codes returned in an Outcome."""

    INVALID = "invalid"
    SPAM_BLOCKED = "spam_blocked"
    ALREADY_PUBLISHED = "already_published"
    ALREADY_DRAFT = "already_draft"
    SLUG_CONFLICT = "slug_conflict"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    SELF_MODIFICATION = "self_modification"
    HAS_CONTENT = "has_content"
