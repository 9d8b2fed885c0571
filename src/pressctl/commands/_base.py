"""Click classes shared by every pressctl command.

Any command or group built from these accepts ``examples="..."``; the
text is shown by an eager ``--examples`` flag instead of bloating
``--help``. :class:`RootGroup` turns database faults into exit code 2.
"""

from __future__ import annotations

import logging
from typing import Any

import click
from sqlalchemy.exc import SQLAlchemyError

EXIT_FAILURE = 1
EXIT_INFRASTRUCTURE = 2

logger = logging.getLogger(__name__)


class _ExamplesMixin:
    params: list[click.Parameter]

    def _install_examples(self, examples: str | None) -> None:
        self.examples = examples
        if not examples:
            return

        def _print(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
            if value:
                click.echo(f"Examples for '{ctx.command_path}':\n")
                click.echo(examples)
                ctx.exit(0)

        self.params.append(
            click.Option(
                ["--examples"],
                is_flag=True,
                is_eager=True,
                expose_value=False,
                callback=_print,
                help="Show usage examples.",
            )
        )


class PressCommand(_ExamplesMixin, click.Command):
    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._install_examples(examples)


class PressGroup(_ExamplesMixin, click.Group):
    """Subcommands default to :class:`PressCommand`, so they take ``examples=`` too."""

    command_class = PressCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._install_examples(examples)


class RootGroup(PressGroup):
    """Top-level group: a database failure anywhere below exits with code 2."""

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except SQLAlchemyError as exc:
            logger.error("Database failure: %s", exc, exc_info=True)
            click.echo(f"ERROR: database failure ({type(exc).__name__})", err=True)
            ctx.exit(EXIT_INFRASTRUCTURE)
