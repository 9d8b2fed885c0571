"""Single-file plugins dropped into a site's .pressctl/plugins directory."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from pressctl.plugins.manager import PluginManager

_HEADER = 'import pluggy\n\nhookimpl = pluggy.HookimplMarker("pressctl")\n\n\n'

_AUDIT_PLUGIN = (
    _HEADER
    + """\
calls = []


class AuditTrail:
    @hookimpl
    def deliver_comment_notification(self, recipient, context):
        calls.append(recipient["name"])

    @hookimpl
    def post_status_changed(self, post_id, channel, state, published_at, published_by_id):
        calls.append(f"{channel}:{state}")
"""
)

_PICKY_PLUGINS = (
    _HEADER
    + """\
class NeedsSmtp:
    def __init__(self):
        raise RuntimeError("SMTP_HOST not set")

    @hookimpl
    def deliver_comment_notification(self, recipient, context):
        pass


class Quiet:
    @hookimpl
    def deliver_comment_notification(self, recipient, context):
        pass
"""
)

_HELPER_ONLY = """\
class SlugHelper:
    def clean(self, text):
        return text.lower()
"""


def _write(directory: Path, name: str, source: str) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_text(source, encoding="utf-8")
    return path


@pytest.fixture
def plugin_dir(tmp_path: Path) -> Path:
    return tmp_path / ".pressctl" / "plugins"


def test_hooks_of_a_local_plugin_fire(plugin_dir: Path) -> None:
    _write(plugin_dir, "audit.py", _AUDIT_PLUGIN)
    pm = PluginManager()

    assert "local:audit.AuditTrail" in pm.discover_and_load(local_dir=plugin_dir)

    pm.hook.deliver_comment_notification(recipient={"name": "Ann"}, context={})
    pm.hook.post_status_changed(
        post_id=4,
        channel="post_4_status",
        state="published",
        published_at=None,
        published_by_id=1,
    )
    assert sys.modules["_pressctl_local_audit"].calls == ["Ann", "post_4_status:published"]


def test_constructor_error_skips_only_that_class(plugin_dir: Path) -> None:
    _write(plugin_dir, "picky.py", _PICKY_PLUGINS)
    names = PluginManager().discover_and_load(local_dir=plugin_dir)
    assert "local:picky.Quiet" in names
    assert "local:picky.NeedsSmtp" not in names


def test_syntax_error_is_logged_and_skipped(
    plugin_dir: Path, caplog: pytest.LogCaptureFixture
) -> None:
    broken = _write(plugin_dir, "broken.py", "def broken(:\n")
    _write(plugin_dir, "audit.py", _AUDIT_PLUGIN)

    with caplog.at_level("WARNING", logger="pressctl.plugins.manager"):
        names = PluginManager().discover_and_load(local_dir=plugin_dir)

    assert names == ["local:audit.AuditTrail"]
    assert "_pressctl_local_broken" not in sys.modules
    assert str(broken) in caplog.text


@pytest.mark.parametrize(
    ("filename", "source"),
    [("_private.py", _AUDIT_PLUGIN), ("helpers.py", _HELPER_ONLY), ("notes.txt", _AUDIT_PLUGIN)],
)
def test_files_that_register_nothing(plugin_dir: Path, filename: str, source: str) -> None:
    _write(plugin_dir, filename, source)
    assert PluginManager().discover_and_load(local_dir=plugin_dir) == []


@pytest.mark.parametrize("local_dir", [None, Path("/nonexistent/pressctl/plugins")])
def test_missing_directory_still_marks_loaded(local_dir: Path | None) -> None:
    pm = PluginManager()
    assert pm.discover_and_load(local_dir=local_dir) == []
    assert pm.is_loaded
