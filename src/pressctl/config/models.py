"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, pressctl.toml only contains
overrides. A fresh site needs nothing but ``[site] name``.
"""

from __future__ import annotations

from pydantic import BaseModel

from pressctl.domain.content import (
    COMMENT_BODY_MAX,
    COMMENT_BODY_MIN,
    POST_BODY_MAX,
    POST_BODY_MIN,
    POST_TITLE_MAX,
    POST_TITLE_MIN,
)
from pressctl.domain.spam import DEFAULT_SPAM_KEYWORDS
from pressctl.domain.types import DeletePostRule


class SiteConfig(BaseModel):
    """[site] section."""

    model_config = {"frozen": True}

    name: str = "pressctl"


class DatabaseConfig(BaseModel):
    """[database] section."""

    model_config = {"frozen": True}

    filename: str = "press.db"


class PostsConfig(BaseModel):
    """[posts] section."""

    model_config = {"frozen": True}

    title_min_length: int = POST_TITLE_MIN
    title_max_length: int = POST_TITLE_MAX
    body_min_length: int = POST_BODY_MIN
    body_max_length: int = POST_BODY_MAX
    slug_max_attempts: int = 50


class CommentsConfig(BaseModel):
    """[comments] section."""

    model_config = {"frozen": True}

    body_min_length: int = COMMENT_BODY_MIN
    body_max_length: int = COMMENT_BODY_MAX
    spam_keywords: tuple[str, ...] = DEFAULT_SPAM_KEYWORDS


class PolicyConfig(BaseModel):
    """[policy] section."""

    model_config = {"frozen": True}

    delete_post: DeletePostRule = DeletePostRule.OWNER_OR_ADMIN


class NotificationsConfig(BaseModel):
    """[notifications] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    sender: str = "notifications@pressctl.local"
    max_retries: int = 3
    max_workers: int = 2
