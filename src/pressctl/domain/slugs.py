"""Slug derivation rules.

A slug is the URL-safe form of a post title. Uniqueness is scoped to the
owning author: the first free entry of ``base, base-1, base-2, ...`` wins.
The collision search itself needs the store and lives in
:mod:`pressctl.services.slugs`.
"""

from __future__ import annotations

import itertools
import re
import unicodedata
from collections.abc import Iterator

FALLBACK_SLUG = "post"

_SEPARATOR_RUNS = re.compile(r"[^a-z0-9_-]+")
_REPEATED_DASHES = re.compile(r"-{2,}")
_NUMBERED = re.compile(r"^(?P<base>.+)-(?P<n>\d+)$")


def parameterize(title: str) -> str:
    """Normalize *title* to a lowercase, hyphen-separated token sequence.

    Examples:
        >>> parameterize("Hello World")
        'hello-world'
        >>> parameterize("  Café -- Crème brûlée!  ")
        'cafe-creme-brulee'
        >>> parameterize("!!!")
        'post'
    """
    text = unicodedata.normalize("NFKD", title)
    text = text.encode("ascii", "ignore").decode("ascii").lower()
    text = _SEPARATOR_RUNS.sub("-", text)
    text = _REPEATED_DASHES.sub("-", text).strip("-")
    return text or FALLBACK_SLUG


def slug_candidates(base: str) -> Iterator[str]:
    """Yield ``base``, then ``base-1``, ``base-2``, ... without end."""
    yield base
    for n in itertools.count(1):
        yield f"{base}-{n}"


def belongs_to_base(slug: str, base: str) -> bool:
    """True when *slug* is *base* itself or one of its numbered variants."""
    if slug == base:
        return True
    match = _NUMBERED.match(slug)
    return match is not None and match.group("base") == base
