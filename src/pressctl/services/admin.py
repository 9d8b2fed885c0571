"""AdminService: site totals and bulk moderation.

Callers check ``is_admin`` before reaching this service.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from pressctl.services.base import BaseService
from pressctl.services.result import Outcome
from pressctl.services.telemetry import traced

logger = logging.getLogger(__name__)


class AdminService(BaseService):
    """Dashboard numbers and comment purges."""

    @traced
    def stats(self) -> Outcome:
        with self._store.reader() as txn:
            totals = txn.stats()
        return Outcome.succeed("stats", data=totals)

    @traced
    def bulk_destroy_comments(self, comment_ids: Iterable[int]) -> Outcome:
        """Delete every listed comment in one transaction.

        Each parent counter is decremented once per removed comment.
        Unknown ids are reported as warnings and skipped.
        """
        op = "bulk_destroy_comments"
        warnings: list[str] = []
        removed: list[int] = []

        with self._store.transaction() as txn:
            for comment_id in dict.fromkeys(comment_ids):
                comment = txn.get_comment(comment_id)
                if comment is None:
                    warnings.append(f"No comment with id {comment_id}")
                    continue
                txn.delete_comment(comment)
                removed.append(comment_id)

        logger.info("Purged %d comment(s)", len(removed))
        return Outcome.succeed(
            op, warnings=warnings, data={"removed": removed, "count": len(removed)}
        )

    @traced
    def outbox(self, *, retry: bool = False) -> Outcome:
        """Report notification backlog; with *retry*, redeliver pending and failed rows first."""
        bus = self._store.event_bus
        if bus is None:
            self._store.init_event_bus(sync=True)
            bus = self._store.event_bus
        assert bus is not None

        retried = bus.drain() if retry else []
        if retried:
            logger.info("Redelivered %d outbox event(s)", len(retried))
        return Outcome.succeed("outbox", data={"backlog": bus.backlog(), "retried": retried})
