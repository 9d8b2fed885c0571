"""Operation-specific Rich renderers for Outcome.

Each renderer writes to a Rich Console (backed by StringIO). The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``outcome.op`` in :func:`render_outcome`.
Unknown ops fall through to a generic renderer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from pressctl.domain.content import Actor, Comment, Post
from pressctl.output.console import create_console, get_output, style_for_role, style_for_state

if TYPE_CHECKING:
    from collections.abc import Callable

    from rich.console import Console

    from pressctl.services.result import Outcome


# ── Public API ────────────────────────────────────────────────────────


def render_outcome(outcome: Outcome, *, verbose: bool = False) -> str:
    """Render an Outcome to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal, which is
    the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if outcome.success:
        renderer = _OP_RENDERERS.get(outcome.op, _render_generic)
        renderer(outcome, console)
        if verbose:
            _render_meta(console, outcome)
    else:
        _render_error(outcome, console)

    return get_output(console).rstrip("\n")


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, outcome: Outcome) -> None:
    console.print(Text("OK", style="press.ok"), Text(f"  {outcome.op}", style="press.op"))


def _field(console: Console, key: str, value: Any) -> None:
    k = Text(f"  {key}:", style="press.key")
    if key == "id" or key.endswith("_id"):
        v = Text(str(value), style="press.id")
    elif key == "title":
        v = Text(str(value), style="press.title")
    elif key == "state":
        v = Text(str(value), style=style_for_state(str(value)))
    else:
        v = Text(str(value))
    console.print(k, v)


def _render_meta(console: Console, outcome: Outcome) -> None:
    """Print the meta block, including the telemetry span tree."""
    if not outcome.meta:
        return
    console.print()
    console.print(Text("  meta:", style="dim"))
    for key, value in outcome.meta.items():
        if key == "telemetry":
            _render_telemetry_tree(console, value, indent=4)
        else:
            console.print(f"    {key}: {value}")


def _render_telemetry_tree(console: Console, span: dict[str, Any], indent: int = 4) -> None:
    prefix = " " * indent
    duration = span.get("duration_ms", 0.0)
    if duration > 1000:
        style = "bold red"
    elif duration > 100:
        style = "yellow"
    else:
        style = "dim"

    line = f"{prefix}[{style}]{duration:>8.2f}ms[/{style}]  {span.get('name', '?')}"
    if span.get("annotations"):
        extras = [f"{k}={v}" for k, v in span["annotations"].items()]
        line += f"  ({', '.join(extras)})"
    console.print(line)

    for child in span.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


def _post_fields(console: Console, post: Post) -> None:
    _field(console, "id", post.id)
    _field(console, "title", post.title)
    _field(console, "slug", post.slug)
    _field(console, "state", post.state)
    if post.published_at is not None:
        _field(console, "published_at", post.published_at.isoformat())
    if post.published_by_id is not None:
        _field(console, "published_by_id", post.published_by_id)
    _field(console, "comments_count", post.comments_count)


def _post_table(items: list[Post]) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="press.id", no_wrap=True)
    table.add_column("Title", style="press.title")
    table.add_column("Slug")
    table.add_column("Author", justify="right")
    table.add_column("State")
    table.add_column("Comments", justify="right")
    for post in items:
        table.add_row(
            str(post.id),
            post.title,
            post.slug,
            str(post.user_id),
            Text(str(post.state), style=style_for_state(str(post.state))),
            str(post.comments_count),
        )
    return table


def _comment_line(console: Console, comment: Comment) -> None:
    stamp = comment.created_at.strftime("%Y-%m-%d %H:%M")
    console.print(
        f"  [press.id]#{comment.id}[/press.id] "
        f"[bold]{comment.author_name}[/bold] [dim]{stamp}[/dim]"
    )
    console.print(Text(f"    {comment.body}"))


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(outcome: Outcome, console: Console) -> None:
    label = Text("ERROR", style="press.error")
    op = Text(f"  {outcome.op}", style="press.op")
    code = Text(f" [{outcome.error_code}]", style="dim") if outcome.error_code else Text("")
    console.print(label, op, code, Text(f": {outcome.error or 'Unknown error'}"))


# ── Entity renderers ──────────────────────────────────────────────────


def _render_post(outcome: Outcome, console: Console) -> None:
    _status_line(console, outcome)
    if isinstance(outcome.payload, Post):
        _post_fields(console, outcome.payload)
    if "comments_removed" in outcome.data:
        _field(console, "comments_removed", outcome.data["comments_removed"])


def _render_post_detail(outcome: Outcome, console: Console) -> None:
    post = outcome.payload
    if not isinstance(post, Post):
        _render_generic(outcome, console)
        return
    meta = [f"slug: {post.slug}", f"state: {post.state}", f"author: {post.user_id}"]
    if post.published_at is not None:
        meta.append(f"published: {post.published_at:%Y-%m-%d %H:%M}")
    meta.append(f"comments: {post.comments_count}")
    content = "\n".join(meta) + f"\n\n{post.body.strip()}"
    console.print(
        Panel(
            content,
            title=f"{post.id}: {post.title}",
            border_style=style_for_state(str(post.state)) or "dim",
            expand=False,
        )
    )


def _render_post_list(outcome: Outcome, console: Console) -> None:
    items = outcome.data.get("posts", [])
    console.print(_post_table(items))
    console.print(f"\n{outcome.data.get('count', len(items))} posts")


def _render_comments(outcome: Outcome, console: Console) -> None:
    if isinstance(outcome.payload, Post):
        console.print(f"Comments on [press.title]{outcome.payload.title}[/press.title]")
    found = outcome.data.get("comments", [])
    for comment in found:
        _comment_line(console, comment)
    console.print(f"\n{outcome.data.get('count', len(found))} comments")


def _render_comment(outcome: Outcome, console: Console) -> None:
    _status_line(console, outcome)
    comment = outcome.payload
    if isinstance(comment, Comment):
        _field(console, "id", comment.id)
        _field(console, "post_id", comment.post_id)
        _field(console, "author", comment.author_name)
    if "comments_count" in outcome.data:
        _field(console, "comments_count", outcome.data["comments_count"])


def _render_user(outcome: Outcome, console: Console) -> None:
    _status_line(console, outcome)
    actor = outcome.payload
    if isinstance(actor, Actor):
        _field(console, "id", actor.id)
        _field(console, "name", actor.name)
        _field(console, "email", actor.email or "-")
        _field(console, "role", actor.role)


def _render_user_list(outcome: Outcome, console: Console) -> None:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("ID", style="press.id", no_wrap=True)
    table.add_column("Name", style="press.title")
    table.add_column("Email")
    table.add_column("Role")
    for actor in outcome.data.get("users", []):
        table.add_row(
            str(actor.id),
            actor.name,
            actor.email or "-",
            Text(str(actor.role), style=style_for_role(str(actor.role))),
        )
    console.print(table)
    console.print(f"\n{outcome.data.get('count', 0)} users")


def _render_stats(outcome: Outcome, console: Console) -> None:
    table = Table(show_header=False, pad_edge=False, expand=False, box=None)
    table.add_column("Metric", style="press.key")
    table.add_column("Count", justify="right")
    for key, value in outcome.data.items():
        table.add_row(key.replace("_", " "), str(value))
    console.print(table)


def _render_outbox(outcome: Outcome, console: Console) -> None:
    backlog = outcome.data.get("backlog", {})
    table = Table(show_header=False, pad_edge=False, expand=False, box=None)
    table.add_column("Status", style="press.key")
    table.add_column("Events", justify="right")
    for status, count in backlog.items():
        table.add_row(status.replace("_", " "), str(count))
    console.print(table)
    for row in outcome.data.get("retried", []):
        console.print(f"  retried #{row['id']} {row['hook_name']}: {row['status']}")


def _render_generic(outcome: Outcome, console: Console) -> None:
    _status_line(console, outcome)
    for key, value in outcome.data.items():
        _field(console, key, value)


_OP_RENDERERS: dict[str, Callable[[Outcome, Console], None]] = {
    "create_post": _render_post,
    "update_post": _render_post,
    "destroy_post": _render_post,
    "publish_post": _render_post,
    "unpublish_post": _render_post,
    "get_post": _render_post_detail,
    "list_posts": _render_post_list,
    "list_comments": _render_comments,
    "submit_comment": _render_comment,
    "destroy_comment": _render_comment,
    "register_user": _render_user,
    "update_user": _render_user,
    "change_role": _render_user,
    "remove_user": _render_user,
    "list_users": _render_user_list,
    "stats": _render_stats,
    "outbox": _render_outbox,
}
