"""Rich Console factory and theme for pressctl output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_result() -> str`` contract. In non-TTY environments
(tests, pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

PRESS_THEME = Theme(
    {
        "press.ok": "bold green",
        "press.error": "bold red",
        "press.warning": "bold yellow",
        "press.op": "bold cyan",
        "press.key": "dim",
        "press.id": "bold blue",
        "press.title": "bold",
        "press.state.published": "green",
        "press.state.draft": "yellow",
        "press.role.admin": "magenta",
        "press.role.member": "",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=PRESS_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_state(state: str) -> str:
    return f"press.state.{state}" if state in ("published", "draft") else ""


def style_for_role(role: str) -> str:
    return f"press.role.{role}" if role in ("admin", "member") else ""
