"""Which pressctl.toml governs a directory.

A blog site is the directory holding ``pressctl.toml``; commands run
anywhere below it (``.pressctl/plugins`` included) act on that site.
"""

from __future__ import annotations

import os
from pathlib import Path

CONFIG_FILENAME = "pressctl.toml"
CONFIG_ENV_VAR = "PRESSCTL_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Return the site config for *start* (default: cwd), or None.

    ``PRESSCTL_CONFIG`` names the file outright; a relative value is taken
    from *start* and ``~`` is expanded. Otherwise the nearest
    ``pressctl.toml`` in *start* or one of its parents wins.
    """
    here = (start or Path.cwd()).resolve()

    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        named = here / Path(override).expanduser()
        return named if named.is_file() else None

    for directory in (here, *here.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None
