"""Built-in plugin: forward post status changes to live channel subscribers."""

from __future__ import annotations

import pluggy

from pressctl.plugins.channels import ChannelHub

hookimpl = pluggy.HookimplMarker("pressctl")


class StatusChannelPlugin:
    """Publishes every ``post_status_changed`` event on the post's channel."""

    def __init__(self, hub: ChannelHub) -> None:
        self._hub = hub

    @hookimpl
    def post_status_changed(
        self,
        post_id: int,
        channel: str,
        state: str,
        published_at: str | None,
        published_by_id: int | None,
    ) -> None:
        self._hub.publish(
            channel,
            {
                "post_id": post_id,
                "state": state,
                "published_at": published_at,
                "published_by_id": published_by_id,
            },
        )
