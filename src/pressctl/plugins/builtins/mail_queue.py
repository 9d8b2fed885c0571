"""Built-in mail plugin: render comment notifications and enqueue them.

Delivery itself belongs to a mail-queue collaborator. The default
:class:`LoggingMailQueue` only logs; deployments pass their own queue
to :meth:`Store.init_event_bus`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

import pluggy

from pressctl.infrastructure.templates import build_template_environment

hookimpl = pluggy.HookimplMarker("pressctl")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MailMessage:
    """A rendered notification email."""

    to: str
    sender: str
    subject: str
    body: str


class MailQueue(Protocol):
    """Fire-and-forget mail queue. Return values are never consulted."""

    def enqueue(self, recipient: dict[str, Any], message: MailMessage) -> None: ...


class LoggingMailQueue:
    """Mail queue that records each message in the log instead of sending it."""

    def enqueue(self, recipient: dict[str, Any], message: MailMessage) -> None:
        logger.info("Queued mail to %s: %s", message.to, message.subject)


class MailQueuePlugin:
    """Renders ``templates/mail/new_comment*.txt`` and hands the result to a queue."""

    def __init__(
        self,
        queue: MailQueue,
        *,
        site_name: str,
        sender: str,
        site_root: Path | None = None,
    ) -> None:
        self._queue = queue
        self._site_name = site_name
        self._sender = sender
        self._env = build_template_environment("mail", site_root=site_root)

    def render(self, recipient: dict[str, Any], context: dict[str, Any]) -> MailMessage:
        variables = {**context, "recipient": recipient, "site_name": self._site_name}
        subject = self._env.get_template("new_comment_subject.txt").render(**variables)
        body = self._env.get_template("new_comment.txt").render(**variables)
        return MailMessage(
            to=str(recipient["email"]),
            sender=self._sender,
            subject=subject.strip(),
            body=body,
        )

    @hookimpl
    def deliver_comment_notification(
        self,
        recipient: dict[str, Any],
        context: dict[str, Any],
    ) -> None:
        if not recipient.get("email"):
            logger.debug("Skipping notification for user %s without email", recipient.get("id"))
            return
        self._queue.enqueue(recipient, self.render(recipient, context))
