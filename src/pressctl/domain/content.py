"""Entity models (actors, posts, comments) plus field validation.

Models are frozen pydantic snapshots of a stored row. They carry no
persistence behaviour; the store builds them and services pass them
around. Field rules (presence and length bounds) live here as plain
functions returning a :class:`ValidationResult`, so the same checks run
before any write regardless of which service performs it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from pydantic import BaseModel

from pressctl.domain.lifecycle import PostState, compute_post_state
from pressctl.domain.types import Role

GUEST_NAME = "Guest"

POST_TITLE_MIN = 5
POST_TITLE_MAX = 120
POST_BODY_MIN = 3
POST_BODY_MAX = 500
COMMENT_BODY_MIN = 3
COMMENT_BODY_MAX = 500


# ---------------------------------------------------------------------------
# Validation result
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ValidationResult:
    """Result of a field validation check."""

    valid: bool
    errors: list[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        """All errors joined for display."""
        return ", ".join(self.errors)


def is_blank(value: str | None) -> bool:
    """True for None, empty, or whitespace-only strings."""
    return value is None or not value.strip()


def check_text(label: str, value: str | None, *, minimum: int, maximum: int) -> list[str]:
    """Presence and length checks for a single text field.

    Examples:
        >>> check_text("Body", "ok", minimum=3, maximum=10)
        ['Body is too short (minimum is 3 characters)']
        >>> check_text("Body", "", minimum=3, maximum=10)
        ["Body can't be blank", 'Body is too short (minimum is 3 characters)']
    """
    errors: list[str] = []
    text = value or ""
    if is_blank(text):
        errors.append(f"{label} can't be blank")
    if len(text) < minimum:
        errors.append(f"{label} is too short (minimum is {minimum} characters)")
    elif len(text) > maximum:
        errors.append(f"{label} is too long (maximum is {maximum} characters)")
    return errors


def validate_post_fields(
    title: str | None,
    body: str | None,
    *,
    title_min: int = POST_TITLE_MIN,
    title_max: int = POST_TITLE_MAX,
    body_min: int = POST_BODY_MIN,
    body_max: int = POST_BODY_MAX,
) -> ValidationResult:
    """Validate a post's title and body."""
    errors = check_text("Title", title, minimum=title_min, maximum=title_max)
    errors += check_text("Body", body, minimum=body_min, maximum=body_max)
    return ValidationResult(valid=not errors, errors=errors)


def validate_comment_body(
    body: str | None,
    *,
    minimum: int = COMMENT_BODY_MIN,
    maximum: int = COMMENT_BODY_MAX,
) -> ValidationResult:
    """Validate a comment body against its length bounds."""
    errors = check_text("Body", body, minimum=minimum, maximum=maximum)
    return ValidationResult(valid=not errors, errors=errors)


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class Actor(BaseModel):
    """An identity attempting an action. Anonymous callers are ``None``."""

    model_config = {"frozen": True}

    id: int
    name: str
    email: str | None = None
    role: Role = Role.MEMBER


class Post(BaseModel):
    """A post owned by exactly one actor."""

    model_config = {"frozen": True}

    id: int
    user_id: int
    title: str
    body: str
    slug: str
    published_at: datetime | None = None
    published_by_id: int | None = None
    comments_count: int = 0
    created_at: datetime
    updated_at: datetime

    @property
    def published(self) -> bool:
        return self.published_at is not None

    @property
    def state(self) -> PostState:
        return compute_post_state(self.published_at)


class Comment(BaseModel):
    """A comment on a post, optionally attributed to an actor."""

    model_config = {"frozen": True}

    id: int
    post_id: int
    user_id: int | None = None
    body: str
    created_at: datetime
    user_name: str | None = None

    @property
    def author_name(self) -> str:
        """Display name of the author, ``"Guest"`` when anonymous."""
        if self.user_id is None or not self.user_name:
            return GUEST_NAME
        return self.user_name
