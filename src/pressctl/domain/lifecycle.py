"""Post publication lifecycle.

Two states, derived solely from ``published_at``:

- ``draft``: ``published_at`` is null.
- ``published``: ``published_at`` holds the publication timestamp.

State is never set directly; it is always computed from the timestamp.
Transitions happen through the publication service only.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum


class PostState(StrEnum):
    """Publication state of a post."""

    DRAFT = "draft"
    PUBLISHED = "published"


POST_TRANSITIONS: dict[str, list[str]] = {
    "draft": ["published"],
    "published": ["draft"],
}


def is_valid_transition(
    current: str,
    target: str,
    transitions: dict[str, list[str]] = POST_TRANSITIONS,
) -> bool:
    """Check if transitioning from *current* to *target* is allowed."""
    allowed = transitions.get(current, [])
    return target in allowed


def compute_post_state(published_at: datetime | None) -> PostState:
    """Derive the publication state from the timestamp alone."""
    if published_at is None:
        return PostState.DRAFT
    return PostState.PUBLISHED


def status_channel(post_id: int) -> str:
    """Name of the live status channel for a post."""
    return f"post_{post_id}_status"
