"""Jinja2 environments for pressctl's plain-text templates.

Packaged defaults live in ``pressctl/templates/<group>/``. A site replaces
one by dropping a file of the same name into ``.pressctl/templates/<group>/``.
Rendering is strict: a variable the template names but the caller does not
pass raises ``jinja2.UndefinedError`` instead of rendering as empty text.
"""

from __future__ import annotations

from pathlib import Path

from jinja2 import (
    BaseLoader,
    ChoiceLoader,
    Environment,
    FileSystemLoader,
    PackageLoader,
    StrictUndefined,
)

from pressctl.infrastructure.database.engine import DATA_DIRNAME


def site_template_dir(site_root: Path, group: str) -> Path:
    return site_root / DATA_DIRNAME / "templates" / group


def build_template_environment(group: str, *, site_root: Path | None = None) -> Environment:
    """Environment for *group*, preferring the site's overrides when *site_root* is set."""
    loader: BaseLoader = PackageLoader("pressctl", f"templates/{group}")
    if site_root is not None:
        overrides = FileSystemLoader(str(site_template_dir(site_root, group)))
        loader = ChoiceLoader([overrides, loader])
    return Environment(
        loader=loader,
        autoescape=False,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )
