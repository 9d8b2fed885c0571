"""Outcome: the uniform result of every domain operation.

INVARIANT: Domain operations return an Outcome for every expected
failure (validation, spam, state conflict, missing record). Only
infrastructure faults (``SQLAlchemyError`` and friends) are raised.
The CLI and any other caller consume this type.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from pressctl.domain.content import Actor, Comment, Post
from pressctl.domain.types import ErrorCode


class Outcome(BaseModel):
    """Success/failure envelope crossing the service boundary.

    Attributes:
        success: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"publish_post"``).
        payload: The resulting entity, also present on most failures so the
            caller can redisplay it.
        error: Human-readable message if ``success`` is False.
        error_code: Machine-readable :class:`ErrorCode` if ``success`` is False.
        warnings: Non-fatal issues (e.g. unknown ids skipped by a bulk purge).
        data: Operation-specific extras (lists, counts).
        meta: Optional metadata (telemetry).
    """

    model_config = {"frozen": True}

    success: bool
    op: str
    payload: Post | Comment | Actor | None = None
    error: str | None = None
    error_code: ErrorCode | None = None
    warnings: list[str] = Field(default_factory=list)
    data: dict[str, Any] = Field(default_factory=dict)
    meta: dict[str, Any] | None = None

    @property
    def failure(self) -> bool:
        return not self.success

    @classmethod
    def succeed(
        cls,
        op: str,
        payload: Post | Comment | Actor | None = None,
        *,
        warnings: list[str] | None = None,
        data: dict[str, Any] | None = None,
    ) -> Outcome:
        return cls(
            success=True,
            op=op,
            payload=payload,
            warnings=warnings or [],
            data=data or {},
        )

    @classmethod
    def fail(
        cls,
        op: str,
        code: ErrorCode,
        message: str,
        *,
        payload: Post | Comment | Actor | None = None,
    ) -> Outcome:
        return cls(success=False, op=op, payload=payload, error=message, error_code=code)
