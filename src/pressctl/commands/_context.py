"""AppContext: shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``. Provides lazy Store initialization, actor
resolution from ``--as``, policy access, and centralized outcome
emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

import click

from pressctl.commands._base import EXIT_FAILURE
from pressctl.domain.types import ErrorCode
from pressctl.output.formatters import OutputSettings, format_result
from pressctl.services.result import Outcome

if TYPE_CHECKING:
    from pressctl.config.settings import PressSettings
    from pressctl.domain.content import Actor
    from pressctl.domain.policy import Policy
    from pressctl.infrastructure.store import Store

DENIED_MESSAGE = "You are not authorized to perform this action"
SIGN_IN_MESSAGE = "You need to sign in first (pass --as USER_ID)"

_UNRESOLVED = object()


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    Subcommands access it via ``@click.pass_obj``. The store is lazily
    initialized on first use so ``--help`` and ``--version`` never
    trigger database access.
    """

    def __init__(self, settings: PressSettings) -> None:
        self.settings = settings
        self._store: Store | None = None
        self._actor: Actor | None | object = _UNRESOLVED

        from pressctl.config.logging import configure_logging

        configure_logging(
            verbose=settings.verbose,
            log_json=settings.log_json,
            context={"actor_id": settings.actor_id} if settings.actor_id is not None else None,
        )

        if settings.verbose:
            from pressctl.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def store(self) -> Store:
        """The store instance (created lazily on first access)."""
        if self._store is None:
            from pressctl.infrastructure.store import Store

            self._store = Store(self.settings)
            self._store.init_event_bus(sync=self.settings.sync)
        return self._store

    @property
    def policy(self) -> Policy:
        return self.settings.build_policy()

    @property
    def actor(self) -> Actor | None:
        """The actor named by ``--as``, or None for an anonymous caller.

        An id that matches no account is a failure, not an anonymous call.
        """
        if self._actor is _UNRESOLVED:
            actor_id = self.settings.actor_id
            if actor_id is None:
                self._actor = None
            else:
                from pressctl.services.accounts import AccountService

                found = AccountService(self.store).get_actor(actor_id)
                if found is None:
                    msg = f"No user with id {actor_id}"
                    self.emit(Outcome.fail("resolve_actor", ErrorCode.NOT_FOUND, msg))
                self._actor = found
        return self._actor  # type: ignore[return-value]

    def emit(self, outcome: Outcome) -> None:
        """Format and output an Outcome with correct exit semantics.

        * Success: writes to stdout, returns normally. Warnings are
          emitted to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            verbose=self.settings.verbose,
        )
        output = format_result(outcome, settings=settings)
        if outcome.success:
            click.echo(output)
            if not settings.json_output:
                for warning in outcome.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(EXIT_FAILURE)

    def deny(self, op: str) -> NoReturn:
        """Report a policy denial for *op* and exit with code 1."""
        message = SIGN_IN_MESSAGE if self.actor is None else DENIED_MESSAGE
        self.emit(Outcome.fail(op, ErrorCode.FORBIDDEN, message))
        raise AssertionError("unreachable")  # emit() exits on failure

    def require(self, allowed: bool, op: str) -> None:
        """Continue only when the policy decision *allowed* is True."""
        if not allowed:
            self.deny(op)

    def close(self) -> None:
        """Wait for in-flight notifications and release the database."""
        if self._store is not None:
            self._store.close()
            self._store = None
