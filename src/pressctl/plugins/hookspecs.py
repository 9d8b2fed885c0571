"""Pluggy hook specifications for pressctl outbound events.

Both events are dispatched after the originating transaction commits,
through the outbox-backed :class:`~pressctl.plugins.event_bus.EventBus`.
"""

from __future__ import annotations

from typing import Any

import pluggy

hookspec = pluggy.HookspecMarker("pressctl")


class PressctlHookSpec:
    """Hook specifications for the pressctl plugin system."""

    @hookspec
    def deliver_comment_notification(
        self,
        recipient: dict[str, Any],
        context: dict[str, Any],
    ) -> None:
        """Hand a new-comment notification for *recipient* to delivery.

        *recipient* carries ``id``, ``name`` and ``email``. *context* carries
        ``post``, ``comment`` and ``commenter_name`` for the mail template.
        """

    @hookspec
    def post_status_changed(
        self,
        post_id: int,
        channel: str,
        state: str,
        published_at: str | None,
        published_by_id: int | None,
    ) -> None:
        """Called after a post is published or unpublished."""
