"""Tests for the Rich console factory and style helpers."""

from __future__ import annotations

from pressctl.output.console import create_console, get_output, style_for_role, style_for_state


def test_console_renders_to_buffer() -> None:
    console = create_console()
    console.print("[press.ok]OK[/press.ok] done")
    assert get_output(console) == "OK done\n"


def test_state_styles() -> None:
    assert style_for_state("published") == "press.state.published"
    assert style_for_state("draft") == "press.state.draft"
    assert style_for_state("archived") == ""


def test_role_styles() -> None:
    assert style_for_role("admin") == "press.role.admin"
    assert style_for_role("guest") == ""
