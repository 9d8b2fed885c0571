"""Tests for PressSettings: unified settings with TOML source."""

from pathlib import Path

import click
import pytest
from pydantic import ValidationError

from pressctl.config.settings import PressSettings
from pressctl.domain.types import DeletePostRule


class TestPressSettingsDefaults:
    def test_all_defaults(self, tmp_path: Path) -> None:
        """With no TOML and no env vars, all fields use code defaults."""
        settings = PressSettings.from_cli(site_root=tmp_path)
        assert settings.site_root == tmp_path
        assert settings.config_path is None
        assert settings.json_output is False
        assert settings.verbose is False
        assert settings.actor_id is None
        assert settings.site.name == "pressctl"

    def test_frozen(self, tmp_path: Path) -> None:
        settings = PressSettings.from_cli(site_root=tmp_path)
        with pytest.raises(ValidationError):
            settings.verbose = True  # type: ignore[misc]

    def test_build_policy(self, tmp_path: Path) -> None:
        policy = PressSettings.from_cli(site_root=tmp_path).build_policy()
        assert policy.delete_post is DeletePostRule.OWNER_OR_ADMIN


class TestTomlSource:
    def test_loads_from_toml(self, tmp_path: Path) -> None:
        (tmp_path / "pressctl.toml").write_text(
            '[site]\nname = "my-blog"\n[policy]\ndelete_post = "admin_only"\n'
        )
        settings = PressSettings.from_cli(site_root=tmp_path)
        assert settings.site.name == "my-blog"
        assert settings.build_policy().delete_post is DeletePostRule.ADMIN_ONLY
        assert settings.posts.title_min_length == 5  # default preserved

    def test_empty_toml_uses_defaults(self, tmp_path: Path) -> None:
        (tmp_path / "pressctl.toml").write_text("")
        settings = PressSettings.from_cli(site_root=tmp_path)
        assert settings.site.name == "pressctl"

    def test_invalid_toml(self, tmp_path: Path) -> None:
        (tmp_path / "pressctl.toml").write_text("[site\n")
        with pytest.raises(click.ClickException, match="Invalid TOML"):
            PressSettings.from_cli(site_root=tmp_path)

    def test_explicit_config_path(self, tmp_path: Path) -> None:
        custom = tmp_path / "custom" / "my.toml"
        custom.parent.mkdir(parents=True)
        custom.write_text('[site]\nname = "custom"\n')
        settings = PressSettings.from_cli(config_path=str(custom), site_root=tmp_path)
        assert settings.site.name == "custom"
        assert settings.config_path == custom


class TestCliFlags:
    def test_cli_flags_override(self, tmp_path: Path) -> None:
        settings = PressSettings.from_cli(
            site_root=tmp_path, json_output=True, verbose=True, actor_id=3
        )
        assert settings.json_output is True
        assert settings.verbose is True
        assert settings.actor_id == 3

    def test_none_flags_are_dropped(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PRESSCTL_ACTOR_ID", "5")
        settings = PressSettings.from_cli(site_root=tmp_path, actor_id=None)
        assert settings.actor_id == 5

    def test_cli_flags_override_toml(self, tmp_path: Path) -> None:
        (tmp_path / "pressctl.toml").write_text("sync = true\n")
        settings = PressSettings.from_cli(site_root=tmp_path, sync=False)
        assert settings.sync is False


class TestSiteRootResolution:
    def test_site_root_from_toml_location(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """When no explicit root, use the parent of the discovered pressctl.toml."""
        subdir = tmp_path / "sub" / "deep"
        subdir.mkdir(parents=True)
        (tmp_path / "pressctl.toml").write_text("")
        monkeypatch.chdir(subdir)
        settings = PressSettings.from_cli()
        assert settings.site_root.resolve() == tmp_path.resolve()


class TestEnvVars:
    def test_env_var_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PRESSCTL_VERBOSE", "true")
        assert PressSettings.from_cli(site_root=tmp_path).verbose is True

    def test_nested_env_var_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PRESSCTL_POLICY__DELETE_POST", "admin_only")
        settings = PressSettings.from_cli(site_root=tmp_path)
        assert settings.policy.delete_post is DeletePostRule.ADMIN_ONLY

    def test_env_beats_toml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "pressctl.toml").write_text('[site]\nname = "toml"\n')
        monkeypatch.setenv("PRESSCTL_SITE__NAME", "env")
        assert PressSettings.from_cli(site_root=tmp_path).site.name == "env"
