"""Notification delivery through a persisted outbox.

Every event lands in the ``outbox`` table first and is then handed to the
plugin hooks, either on a small worker pool or inline when ``sync`` is set.
The operation that raised the event has already committed by then, so a
hook failure only moves the row along ``pending -> failed -> dead_letter``
and is logged; it is never reported back to the caller.
"""

from __future__ import annotations

import json
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, insert, select, update

from pressctl.infrastructure.database.schema import outbox
from pressctl.services._helpers import now_iso

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from pressctl.plugins.manager import PluginManager

logger = logging.getLogger(__name__)

_FUTURE_TIMEOUT = 30


class OutboxStatus(StrEnum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    DEAD_LETTER = "dead_letter"


RETRYABLE = (OutboxStatus.PENDING, OutboxStatus.FAILED)


class EventBus:
    """Writes events to the outbox and runs the matching pluggy hook.

    ``max_retries`` is the number of failed attempts after which a row is
    parked as ``dead_letter`` and no longer picked up by :meth:`drain`.
    """

    def __init__(
        self,
        engine: Engine,
        plugin_manager: PluginManager,
        *,
        sync: bool = False,
        max_retries: int = 3,
        max_workers: int = 2,
    ) -> None:
        self._engine = engine
        self._pm = plugin_manager
        self._max_retries = max_retries
        self._pool = None if sync else ThreadPoolExecutor(max_workers=max_workers)
        self._inflight: list[Future[OutboxStatus]] = []

    @property
    def plugin_manager(self) -> PluginManager:
        return self._pm

    @property
    def max_retries(self) -> int:
        return self._max_retries

    def dispatch(self, hook_name: str, payload: dict[str, Any]) -> int:
        """Queue *hook_name* with *payload*; returns the outbox row id."""
        with self._engine.begin() as conn:
            event_id: int = conn.execute(
                insert(outbox).values(
                    hook_name=hook_name,
                    payload=json.dumps(payload, default=str),
                    status=OutboxStatus.PENDING,
                    retries=0,
                    created=now_iso(),
                )
            ).inserted_primary_key[0]

        if self._pool is None:
            self._deliver(event_id, hook_name, payload)
        else:
            self._inflight.append(
                self._pool.submit(self._deliver, event_id, hook_name, payload)
            )
        return event_id

    def backlog(self) -> dict[str, int]:
        """Row counts per outbox status, zero-filled."""
        counts = {status.value: 0 for status in OutboxStatus}
        with self._engine.connect() as conn:
            rows = conn.execute(
                select(outbox.c.status, func.count()).group_by(outbox.c.status)
            )
            for status, count in rows:
                counts[status] = count
        return counts

    def drain(self) -> list[dict[str, Any]]:
        """Wait for in-flight work, then redeliver every retryable row inline.

        Returns one ``{"id", "hook_name", "status"}`` entry per row retried,
        in outbox order.
        """
        self._settle()
        with self._engine.connect() as conn:
            rows = conn.execute(
                select(outbox.c.id, outbox.c.hook_name, outbox.c.payload)
                .where(outbox.c.status.in_(RETRYABLE))
                .order_by(outbox.c.id)
            ).all()

        return [
            {
                "id": row.id,
                "hook_name": row.hook_name,
                "status": str(self._deliver(row.id, row.hook_name, json.loads(row.payload))),
            }
            for row in rows
        ]

    def shutdown(self) -> None:
        self._settle()
        if self._pool is not None:
            self._pool.shutdown(wait=True)
            self._pool = None

    def _deliver(self, event_id: int, hook_name: str, payload: dict[str, Any]) -> OutboxStatus:
        caller = getattr(self._pm.hook, hook_name, None)
        try:
            if caller is not None:
                caller(**payload)
        except Exception as exc:
            logger.warning("Hook %s failed for event %d: %s", hook_name, event_id, exc)
            return self._record_failure(event_id, str(exc))

        self._set_status(event_id, status=OutboxStatus.COMPLETED, completed=now_iso())
        return OutboxStatus.COMPLETED

    def _record_failure(self, event_id: int, error: str) -> OutboxStatus:
        with self._engine.begin() as conn:
            retries = 1 + conn.execute(
                select(outbox.c.retries).where(outbox.c.id == event_id)
            ).scalar_one()
            exhausted = retries >= self._max_retries
            status = OutboxStatus.DEAD_LETTER if exhausted else OutboxStatus.FAILED
            conn.execute(
                update(outbox)
                .where(outbox.c.id == event_id)
                .values(
                    status=status,
                    error=error,
                    retries=retries,
                    completed=now_iso() if exhausted else None,
                )
            )
        if exhausted:
            logger.error("Event %d moved to dead_letter after %d attempts", event_id, retries)
        return status

    def _set_status(self, event_id: int, **values: Any) -> None:
        with self._engine.begin() as conn:
            conn.execute(update(outbox).where(outbox.c.id == event_id).values(**values))

    def _settle(self) -> None:
        pending, self._inflight = self._inflight, []
        for future in pending:
            try:
                future.result(timeout=_FUTURE_TIMEOUT)
            except Exception:
                logger.debug("Event worker ended with an error", exc_info=True)
