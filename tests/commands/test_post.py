"""Tests for the post CLI group."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from tests.conftest import bootstrap_site, run_cli, run_json


@pytest.fixture
def site(cli_runner: CliRunner, _isolated_site: None) -> CliRunner:
    bootstrap_site(cli_runner)
    return cli_runner


def _create(runner: CliRunner, actor: str, title: str, *extra: str) -> dict:
    return run_json(runner, "--as", actor, "post", "create", title, "-b", "Some body", *extra)


class TestCreate:
    def test_hello_world(self, site: CliRunner) -> None:
        data = _create(site, "2", "Hello World")
        assert data["success"] is True
        assert data["payload"]["slug"] == "hello-world"
        assert data["payload"]["published_at"] is None

    def test_anonymous_refused(self, site: CliRunner) -> None:
        data = run_json(site, "post", "create", "Hello World", "-b", "Some body")
        assert data["_exit_code"] == 1
        assert data["error_code"] == "forbidden"

    def test_validation_failure(self, site: CliRunner) -> None:
        result = run_cli(site, "--as", "2", "post", "create", "Hey", "-b", "Some body")
        assert result.exit_code == 1
        assert "Title is too short (minimum is 5 characters)" in result.output

    def test_publish_flag(self, site: CliRunner) -> None:
        data = _create(site, "2", "Hello World", "--publish")
        assert data["payload"]["published_at"] is not None
        assert data["payload"]["published_by_id"] is None

    def test_human_output(self, site: CliRunner) -> None:
        result = run_cli(site, "--as", "2", "post", "create", "Hello World", "-b", "Body")
        assert result.exit_code == 0
        assert "slug: hello-world" in result.output


class TestEdit:
    def test_owner_edits(self, site: CliRunner) -> None:
        _create(site, "2", "Hello World")
        data = run_json(site, "--as", "2", "post", "edit", "hello-world", "--title", "Hello Again")
        assert data["payload"]["slug"] == "hello-again"

    def test_other_member_refused(self, site: CliRunner) -> None:
        _create(site, "2", "Hello World", "--publish")
        data = run_json(site, "--as", "3", "post", "edit", "hello-world", "-b", "Mine now")
        assert data["error_code"] == "forbidden"

    def test_admin_edits(self, site: CliRunner) -> None:
        _create(site, "2", "Hello World")
        data = run_json(site, "--as", "1", "post", "edit", "1", "-b", "Admin edit")
        assert data["payload"]["body"] == "Admin edit"

    def test_nothing_to_change(self, site: CliRunner) -> None:
        _create(site, "2", "Hello World")
        result = run_cli(site, "--as", "2", "post", "edit", "hello-world")
        assert result.exit_code == 2
        assert "Nothing to change" in result.output

    def test_unknown_post(self, site: CliRunner) -> None:
        data = run_json(site, "--as", "2", "post", "edit", "nope", "-b", "Body")
        assert data["error_code"] == "not_found"
        assert data["op"] == "update_post"


class TestPublication:
    def test_publish_and_unpublish(self, site: CliRunner) -> None:
        _create(site, "2", "Hello World")
        published = run_json(site, "--as", "1", "post", "publish", "1")
        assert published["payload"]["published_by_id"] == 1
        again = run_json(site, "--as", "1", "post", "publish", "1")
        assert again["error_code"] == "already_published"
        draft = run_json(site, "--as", "2", "post", "unpublish", "hello-world")
        assert draft["payload"]["published_at"] is None

    def test_unpublish_draft_conflict(self, site: CliRunner) -> None:
        _create(site, "2", "Hello World")
        data = run_json(site, "--as", "2", "post", "unpublish", "hello-world")
        assert data["error_code"] == "already_draft"

    def test_member_cannot_publish_others(self, site: CliRunner) -> None:
        _create(site, "2", "Hello World")
        data = run_json(site, "--as", "3", "post", "publish", "1")
        assert data["error_code"] == "forbidden"


class TestDelete:
    def test_owner_deletes(self, site: CliRunner) -> None:
        _create(site, "2", "Hello World", "--publish")
        run_cli(site, "--as", "3", "comment", "add", "1", "Nice post")
        data = run_json(site, "--as", "2", "post", "delete", "1")
        assert data["data"]["comments_removed"] == 1

    def test_admin_only_rule(self, site: CliRunner) -> None:
        with open("pressctl.toml", "a", encoding="utf-8") as fh:
            fh.write('\n[policy]\ndelete_post = "admin_only"\n')
        _create(site, "2", "Hello World")
        refused = run_json(site, "--as", "2", "post", "delete", "1")
        assert refused["error_code"] == "forbidden"
        assert run_json(site, "--as", "1", "post", "delete", "1")["success"] is True


class TestListAndShow:
    def test_scopes(self, site: CliRunner) -> None:
        _create(site, "2", "Public post", "--publish")
        _create(site, "2", "Ann draft")
        _create(site, "3", "Ben draft")

        def titles(*args: str) -> set[str]:
            return {p["title"] for p in run_json(site, *args, "post", "list")["data"]["posts"]}

        assert titles() == {"Public post"}
        assert titles("--as", "3") == {"Public post", "Ben draft"}
        assert titles("--as", "1") == {"Public post", "Ann draft", "Ben draft"}

    def test_admin_status_filter(self, site: CliRunner) -> None:
        _create(site, "2", "Public post", "--publish")
        _create(site, "2", "Ann draft")
        data = run_json(site, "--as", "1", "post", "list", "--status", "drafts")
        assert [p["title"] for p in data["data"]["posts"]] == ["Ann draft"]

    def test_show_draft_hidden_from_others(self, site: CliRunner) -> None:
        _create(site, "2", "Ann draft")
        data = run_json(site, "--as", "3", "post", "show", "1")
        assert data["error_code"] == "forbidden"
        assert run_json(site, "--as", "2", "post", "show", "1")["success"] is True

    def test_show_prefers_own_slug(self, site: CliRunner) -> None:
        _create(site, "2", "Same Title", "--publish")
        _create(site, "3", "Same Title", "--publish")
        data = run_json(site, "--as", "3", "post", "show", "same-title")
        assert data["payload"]["user_id"] == 3
        anonymous = run_json(site, "post", "show", "same-title")
        assert anonymous["payload"]["user_id"] == 2

    def test_show_skips_hidden_draft_with_same_slug(self, site: CliRunner) -> None:
        _create(site, "2", "My Post")
        _create(site, "3", "My Post", "--publish")
        anonymous = run_json(site, "post", "show", "my-post")
        assert anonymous["success"] is True
        assert anonymous["payload"]["user_id"] == 3
        assert run_json(site, "--as", "2", "post", "show", "my-post")["payload"]["user_id"] == 2

    def test_show_comments(self, site: CliRunner) -> None:
        _create(site, "2", "Hello World", "--publish")
        run_cli(site, "--as", "3", "comment", "add", "hello-world", "Great read")
        result = run_cli(site, "post", "show", "hello-world", "--comments")
        assert result.exit_code == 0
        assert "Great read" in result.output
        assert "Ben" in result.output
