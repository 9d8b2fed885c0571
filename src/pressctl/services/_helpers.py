"""Shared service-layer helper functions."""

from __future__ import annotations

from datetime import UTC, datetime


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def now_iso() -> str:
    """Current UTC time as standard ISO 8601 (for the outbox audit trail)."""
    return utcnow().isoformat()


def iso_or_none(value: datetime | None) -> str | None:
    """ISO 8601 rendering for event payloads, keeping None as None."""
    return value.isoformat() if value is not None else None
