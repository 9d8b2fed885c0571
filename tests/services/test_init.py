"""Tests for InitService."""

from __future__ import annotations

import tomllib
from pathlib import Path

from pressctl.config.discovery import CONFIG_FILENAME
from pressctl.domain.types import ErrorCode
from pressctl.infrastructure.database.migrations import head_revision
from pressctl.services.init import InitService


def test_creates_config_and_database(tmp_path: Path) -> None:
    site = tmp_path / "blog"
    outcome = InitService.init_site(site, name='My "Blog"')

    assert outcome.success
    config = tomllib.loads((site / CONFIG_FILENAME).read_text(encoding="utf-8"))
    assert config["site"]["name"] == 'My "Blog"'
    assert "database" not in config
    assert Path(outcome.data["db_path"]).is_file()
    assert outcome.data["revision"] == head_revision()


def test_custom_db_filename(tmp_path: Path) -> None:
    outcome = InitService.init_site(tmp_path, name="Blog", db_filename="blog.db")
    config = tomllib.loads((tmp_path / CONFIG_FILENAME).read_text(encoding="utf-8"))
    assert config["database"]["filename"] == "blog.db"
    assert outcome.data["db_path"].endswith("blog.db")


def test_refuses_existing_site(tmp_path: Path) -> None:
    InitService.init_site(tmp_path, name="Blog")
    outcome = InitService.init_site(tmp_path, name="Blog")
    assert outcome.error_code is ErrorCode.INVALID
