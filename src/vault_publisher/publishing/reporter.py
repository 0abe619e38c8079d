"""Summary formatting for publish and prune batches.

Provides the user-facing report channel and its messages:

- ``log_reporter`` -- default report channel (INFO log records).
- ``format_publish_summary`` -- one line per upload batch.
- ``format_deletion_summary`` -- one line per pruned repository.
- ``format_scope_error`` -- actionable message for an undefined prune scope.
- ``outcome_to_json`` -- structured dict for machine-readable output.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from vault_publisher.config_schema import PublishingConfig

    from .models import OutcomeCounters, RepoAttribution

logger = logging.getLogger(__name__)

Reporter = Callable[[str], None]


def log_reporter(message: str) -> None:
    """Default report channel: one INFO record per summary."""
    logger.info("%s", message)


# ------------------------------------------------------------------
# Publish batches
# ------------------------------------------------------------------


def format_publish_summary(
    counters: OutcomeCounters,
    repo: RepoAttribution | None = None,
) -> str:
    """Summarise an upload batch.

    Args:
        counters: Outcome of the batch.
        repo: Target repository, included in the message when given.

    Returns:
        Single-line summary.
    """
    target = f" to {repo}" if repo is not None else ""
    if counters.total == 0:
        return f"No notes to publish{target}."
    message = f"Published {counters.succeeded} of {counters.total} notes{target}."
    if counters.failed:
        message += f" {counters.failed} failed; see the log for details."
    return message


# ------------------------------------------------------------------
# Prune batches
# ------------------------------------------------------------------


def format_deletion_summary(
    counters: OutcomeCounters, repo: RepoAttribution
) -> str:
    """Summarise the deletions applied to one repository."""
    if counters.succeeded == 0 and counters.failed == 0:
        return f"No files to delete from {repo}."
    parts: list[str] = []
    if counters.succeeded:
        parts.append(
            f"Deleted {counters.succeeded} file(s) from {repo}."
        )
    if counters.failed:
        parts.append(f"Failed to delete {counters.failed} file(s).")
    return " ".join(parts)


def format_scope_error(settings: PublishingConfig) -> str:
    """Explain which setting leaves the prune scope undefined."""
    if not settings.default_folder:
        return (
            "Cannot prune: publishing.default_folder is empty, so every "
            "file in the repository would be eligible. Set a default folder."
        )
    if settings.placement == "yaml" and not settings.root_folder:
        return (
            "Cannot prune: publishing.root_folder is empty while placement "
            "is 'yaml'. Set a root folder for frontmatter-placed notes."
        )
    return "Cannot prune: the managed folder scope is undefined."


# ------------------------------------------------------------------
# JSON output
# ------------------------------------------------------------------


def outcome_to_json(
    operation: str,
    counters: OutcomeCounters | None,
    repo: RepoAttribution | None = None,
) -> dict:
    """Convert a batch outcome to a dict for JSON serialisation.

    ``counters`` is ``None`` when the batch refused to run (for example
    an undefined prune scope); this is reported as ``"status": "no_scope"``
    rather than as zero counts.
    """
    result: dict = {
        "operation": operation,
        "repo": str(repo) if repo is not None else None,
    }
    if counters is None:
        result["status"] = "no_scope"
        return result
    result["status"] = "ok" if counters.failed == 0 else "partial"
    result["counts"] = {
        "succeeded": counters.succeeded,
        "failed": counters.failed,
        "total": counters.total,
    }
    return result
