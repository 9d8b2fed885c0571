"""PressSettings: one frozen object for CLI flags, env vars and pressctl.toml.

Later sources lose to earlier ones:

  1. keyword arguments (CLI flags)
  2. ``PRESSCTL_*`` environment variables, ``__`` between nested keys
  3. the discovered ``pressctl.toml``
  4. defaults on the section models in :mod:`pressctl.config.models`
"""

from __future__ import annotations

import tomllib
from contextvars import ContextVar
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

from pressctl.config.discovery import find_config
from pressctl.config.models import (
    CommentsConfig,
    DatabaseConfig,
    NotificationsConfig,
    PolicyConfig,
    PostsConfig,
    SiteConfig,
)
from pressctl.domain.policy import Policy

# pydantic-settings builds sources from the class, so the file chosen by
# from_cli() is handed over through this variable.
_active_toml: ContextVar[Path | None] = ContextVar("_active_toml", default=None)


class SiteTomlSource(TomlConfigSettingsSource):
    """Reads ``pressctl.toml``; a syntax error becomes a ClickException."""

    def _read_file(self, file_path: Path) -> dict[str, Any]:
        try:
            return super()._read_file(file_path)
        except tomllib.TOMLDecodeError as exc:
            msg = f"Invalid TOML in {file_path}: {exc}"
            raise click.ClickException(msg) from exc


class PressSettings(BaseSettings):
    """Everything a command needs to know about the site and the invocation.

    ``site_root`` is the directory holding ``pressctl.toml`` (or the working
    directory when there is none); the database lives under it.
    """

    model_config = SettingsConfigDict(
        frozen=True,
        env_prefix="PRESSCTL_",
        env_nested_delimiter="__",
    )

    site_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    json_output: bool = False
    verbose: bool = False
    log_json: bool = False
    sync: bool = False
    actor_id: int | None = None

    site: SiteConfig = Field(default_factory=SiteConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    posts: PostsConfig = Field(default_factory=PostsConfig)
    comments: CommentsConfig = Field(default_factory=CommentsConfig)
    policy: PolicyConfig = Field(default_factory=PolicyConfig)
    notifications: NotificationsConfig = Field(default_factory=NotificationsConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return init_settings, env_settings, SiteTomlSource(settings_cls, _active_toml.get())

    def build_policy(self) -> Policy:
        return Policy(delete_post=self.policy.delete_post)

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        site_root: Path | None = None,
        **cli_flags: Any,
    ) -> PressSettings:
        """Resolve the config file and site root, then build settings.

        An explicit *config_path* that does not exist is ignored rather than
        searched around. Flags passed as ``None`` are left out so lower
        sources still apply.
        """
        if config_path:
            toml_path = Path(config_path) if Path(config_path).is_file() else None
        else:
            toml_path = find_config(site_root)

        if site_root is None:
            site_root = toml_path.parent if toml_path else Path.cwd()

        overrides = {key: value for key, value in cli_flags.items() if value is not None}
        token = _active_toml.set(toml_path)
        try:
            return cls(site_root=site_root, config_path=toml_path, **overrides)
        finally:
            _active_toml.reset(token)
