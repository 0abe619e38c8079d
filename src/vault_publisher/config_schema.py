"""Unified configuration schema for vault_publisher.

Defines Pydantic models for the unified config structure with dedicated
sections for the GitHub connection, publishing behaviour and logging.

Usage:
    from vault_publisher.config_schema import UnifiedConfig, build_config

    raw = load_hierarchical_config()
    unified = build_config(raw)
    settings = unified.publishing
"""

from __future__ import annotations

import logging
from typing import Literal

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


class GitHubConfig(BaseModel):
    """GitHub repository identity and credentials.

    All fields are optional to support zero-config: env vars and CLI args
    can supply them at runtime instead.
    """

    owner: str | None = Field(
        default=None, description="Repository owner"
    )
    repo: str | None = Field(default=None, description="Repository name")
    branch: str | None = Field(
        default=None, description="Working branch (default: main)"
    )
    token: str | None = Field(
        default=None, description="Personal access token"
    )
    api_url: str | None = Field(
        default=None, description="GitHub API base URL"
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    model_config = {"frozen": True}


class PublishingConfig(BaseModel):
    """What gets published, where it lands, and what pruning may touch.

    Attributes:
        share_key: Frontmatter key whose boolean ``true`` opts a note in.
        excluded_folders: Comma-separated folder substrings never published.
        default_folder: Remote folder for notes with fixed placement.
        placement: ``fixed`` or ``yaml`` (folder read from frontmatter).
        root_folder: Remote root prepended in ``yaml`` placement.
        folder_key: Frontmatter key holding the remote folder.
        image_folder: Remote folder for attachments (falls back to
            ``default_folder``).
        transfer_embeds: Upload embedded images alongside the note.
        autoclean_excluded: Rules (substring or ``/regex/flags``) for
            remote paths that pruning never deletes.
        workflow_name: Workflow file to dispatch after publishing.
        workflow_poll_interval: Seconds between workflow status polls.
        workflow_max_wait: Upper bound on the workflow wait, in seconds.
            ``None`` waits until the run completes.
    """

    share_key: str = Field(default="share", description="Share key")
    excluded_folders: str = Field(
        default="", description="Comma-separated excluded folders"
    )
    default_folder: str = Field(
        default="docs", description="Default remote folder"
    )
    placement: Literal["fixed", "yaml"] = Field(
        default="fixed", description="Remote folder placement mode"
    )
    root_folder: str = Field(
        default="", description="Root folder for yaml placement"
    )
    folder_key: str = Field(
        default="category", description="Frontmatter folder key"
    )
    image_folder: str = Field(
        default="", description="Remote attachment folder"
    )
    transfer_embeds: bool = Field(
        default=True, description="Upload embedded images"
    )
    autoclean_excluded: list[str] = Field(
        default_factory=list,
        description="Remote paths protected from pruning",
    )
    workflow_name: str = Field(
        default="", description="Workflow file to dispatch"
    )
    workflow_poll_interval: float = Field(
        default=10.0,
        gt=0,
        description="Seconds between workflow status polls",
    )
    workflow_max_wait: float | None = Field(
        default=None,
        gt=0,
        description="Maximum seconds to wait for the workflow",
    )

    model_config = {"frozen": True}


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file: Optional log file path.
    """

    level: str = Field(default="INFO", description="Log level")
    file: str | None = Field(default=None, description="Log file path")

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Top-level unified config
# ---------------------------------------------------------------------------


class UnifiedConfig(BaseModel):
    """Top-level unified configuration.

    Aggregates all config sections. Every section has sensible defaults,
    so ``UnifiedConfig()`` (zero-config) is always valid.
    """

    github: GitHubConfig = Field(default_factory=GitHubConfig)
    publishing: PublishingConfig = Field(
        default_factory=PublishingConfig
    )
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Factory function
# ---------------------------------------------------------------------------


def build_config(raw_data: dict) -> UnifiedConfig:
    """Construct a ``UnifiedConfig`` from the raw dict returned by
    ``load_hierarchical_config()``.

    Handles missing sections gracefully; anything absent gets defaults.

    Args:
        raw_data: Merged configuration dictionary.

    Returns:
        Validated ``UnifiedConfig`` instance.
    """
    if not raw_data:
        return UnifiedConfig()

    return UnifiedConfig(**raw_data)
