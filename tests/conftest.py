"""Shared pytest fixtures and test helpers for pressctl tests."""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest
import structlog
from click.testing import CliRunner
from sqlalchemy.engine import Engine

from pressctl.config.settings import PressSettings
from pressctl.domain.content import Actor, Comment, Post
from pressctl.domain.types import Role
from pressctl.infrastructure.database.engine import init_database
from pressctl.infrastructure.store import Store


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's PRESSCTL_* environment out of the tests."""
    monkeypatch.delenv("PRESSCTL_CONFIG", raising=False)
    monkeypatch.delenv("PRESSCTL_ACTOR_ID", raising=False)


@pytest.fixture(autouse=True)
def _restore_root_logging() -> Iterator[None]:
    """CLI invocations reconfigure logging; put the root handlers back afterwards."""
    import logging

    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    logging.getLogger("pressctl").setLevel(logging.NOTSET)
    structlog.contextvars.clear_contextvars()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def db_engine(tmp_path: Path) -> Iterator[Engine]:
    """Initialized SQLite engine with all tables created."""
    engine = init_database(tmp_path)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def site_root(tmp_path: Path) -> Path:
    """Temporary site directory.

    Single source of truth for the site layout; ``store`` and
    ``_isolated_site`` both build on it.
    """
    return tmp_path


@pytest.fixture
def store(site_root: Path) -> Iterator[Store]:
    """Fully initialized store on a temp directory, without an event bus."""
    s = Store(PressSettings.from_cli(site_root=site_root))
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def _isolated_site(site_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp site root so the CLI creates an isolated site.

    Use via ``@pytest.mark.usefixtures("_isolated_site")`` on command test
    classes.
    """
    monkeypatch.chdir(site_root)


# ---------------------------------------------------------------------------
# Shared test helpers (used across test modules)
# ---------------------------------------------------------------------------


def create_user(
    store: Store,
    name: str,
    email: str | None = None,
    role: Role = Role.MEMBER,
) -> Actor:
    """Register an account via AccountService, asserting success."""
    from pressctl.services.accounts import AccountService

    outcome = AccountService(store).register(name, email, role)
    assert outcome.success, outcome.error
    assert isinstance(outcome.payload, Actor)
    return outcome.payload


def create_post(
    store: Store,
    author: Actor,
    title: str = "My Post",
    body: str = "Some body text",
    **kwargs: Any,
) -> Post:
    """Create a post via PostService, asserting success."""
    from pressctl.services.posts import PostService

    outcome = PostService(store).create(author, title, body, **kwargs)
    assert outcome.success, outcome.error
    assert isinstance(outcome.payload, Post)
    return outcome.payload


def add_comment(store: Store, post: Post, actor: Actor | None, body: str = "Nice post!") -> Comment:
    """Submit a comment via CommentService, asserting success."""
    from pressctl.services.comments import CommentService

    outcome = CommentService(store).submit(post, actor, body)
    assert outcome.success, outcome.error
    assert isinstance(outcome.payload, Comment)
    return outcome.payload


def reload_post(store: Store, post: Post) -> Post:
    """Fresh snapshot of *post* from the database."""
    with store.reader() as txn:
        fresh = txn.get_post(post.id)
    assert fresh is not None
    return fresh


def run_cli(runner: CliRunner, *args: str) -> Any:
    """Invoke the root CLI group and return the Click ``Result``."""
    from pressctl.cli import cli

    return runner.invoke(cli, list(args))


def run_json(runner: CliRunner, *args: str) -> dict[str, Any]:
    """Invoke the CLI with ``--json`` and parse the emitted Outcome."""
    result = run_cli(runner, "--json", *args)
    assert result.output, result.exception
    parsed: dict[str, Any] = json.loads(result.output)
    parsed["_exit_code"] = result.exit_code
    return parsed


def bootstrap_site(runner: CliRunner) -> None:
    """Initialize a site in CWD with an admin (id 1) and two members (ids 2, 3)."""
    assert run_cli(runner, "init", "--name", "Test Blog").exit_code == 0
    admin = ("user", "add", "Ada", "--email", "ada@example.com", "--role", "admin")
    assert run_cli(runner, *admin).exit_code == 0
    for name in ("Ann", "Ben"):
        email = f"{name.lower()}@example.com"
        assert run_cli(runner, "--as", "1", "user", "add", name, "--email", email).exit_code == 0
