"""Rich/JSON output helpers.

The CLI renders an Outcome for humans (Rich tables and panels) or for
machines (``--json``). The formatter layer picks the mode.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from pressctl.output.renderers import render_outcome

if TYPE_CHECKING:
    from pressctl.services.result import Outcome


@dataclass(frozen=True)
class OutputSettings:
    """Output switches taken from the global CLI flags."""

    json_output: bool = False
    verbose: bool = False


def format_result(outcome: Outcome, *, settings: OutputSettings | None = None) -> str:
    """Format an Outcome for display."""
    settings = settings or OutputSettings()
    if settings.json_output:
        return outcome.model_dump_json(indent=2)
    return render_outcome(outcome, verbose=settings.verbose)
