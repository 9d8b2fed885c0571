"""BaseService: abstract foundation for all pressctl services.

Every service receives a :class:`Store` at construction time. The Store
provides transactional access to the database and the notification bus.
Services own their transaction boundaries via ``self._store.transaction()``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pressctl.infrastructure.store import Store

logger = logging.getLogger(__name__)


class BaseService:
    """Abstract base for all service-layer classes.

    Usage::

        class CommentService(BaseService):
            def submit(self, post, actor, body) -> Outcome:
                with self._store.transaction() as txn:
                    ...
    """

    def __init__(self, store: Store) -> None:
        self._store = store

    def _dispatch_event(self, hook_name: str, payload: dict[str, Any]) -> bool:
        """Hand an event to the bus. No-op if the bus is not initialized.

        Must be called after the originating transaction has committed.
        A dispatch failure is logged and never reaches the caller's
        outcome: the write it follows has already succeeded. Returns
        whether the event was queued.
        """
        bus = self._store.event_bus
        if bus is None:
            return False
        try:
            bus.dispatch(hook_name, payload)
        except Exception:
            logger.warning("Event dispatch failed for %s", hook_name, exc_info=True)
            return False
        return True
