"""Keyword spam heuristic for comment bodies.

Case-insensitive substring match against a fixed keyword list. Blunt on
purpose: false positives are accepted, nothing external is consulted.
"""

from __future__ import annotations

from collections.abc import Iterable

DEFAULT_SPAM_KEYWORDS: tuple[str, ...] = (
    "casino",
    "lottery",
    "winner",
    "bitcoin",
    "crypto",
    "click-here",
    "buy-now",
    "limited-time",
    "act-now",
)


def find_spam_keyword(
    body: str | None, keywords: Iterable[str] = DEFAULT_SPAM_KEYWORDS
) -> str | None:
    """Return the first keyword contained in *body*, or None."""
    if not body or not body.strip():
        return None
    normalized = body.casefold()
    for keyword in keywords:
        if keyword and keyword.casefold() in normalized:
            return keyword
    return None
