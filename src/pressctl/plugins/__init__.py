"""Notification layer: outbound events via pluggy.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints,
plus single-file plugins in ``.pressctl/plugins/``.
INVARIANT: Plugin failures are warnings, never errors.
"""

from pressctl.plugins.channels import ChannelHub
from pressctl.plugins.event_bus import EventBus
from pressctl.plugins.manager import PluginManager

__all__ = ["ChannelHub", "EventBus", "PluginManager"]
