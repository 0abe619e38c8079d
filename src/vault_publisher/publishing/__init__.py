"""Publish shared vault notes to GitHub and prune what is no longer shared.

Public API for mirroring the curated part of a local vault into one or
more GitHub repositories.

Architecture
------------
The local vault is authoritative for what *should* be published; each
target repository is authoritative for what *is* published. Publishing
is an upsert per file (probe the current blob, then create or update).
Pruning diffs the remote tree of each target against every path the
vault still shares, across all targets, so a file wanted by another
target sharing the same tree is never removed.

Modules:

- ``selection``  -- ``SelectionEngine``: share rules, attribution, embeds.
- ``mapper``     -- ``PathResolver``: settings-driven remote paths.
- ``publisher``  -- ``UpsertPublisher``: probe + write per file.
- ``inventory``  -- ``list_repo_files``: remote tree listing.
- ``reconciler`` -- ``DeletionReconciler``: scoped, protected pruning.
- ``exclusion``  -- ``is_excluded``: regex/substring keep rules.
- ``workflow``   -- ``BuildWaiter``: dispatch and await the site build.
- ``models``     -- ``LocalDocument``, ``RepoAttribution``,
  ``ShareDecision``, ``RemoteFile``, ``ProtectionFlags``, probe results,
  ``OutcomeCounters``: core data contracts.
- ``reporter``   -- Summary formatting and the default report channel.

Usage example
-------------
::

    from vault_publisher.config_schema import PublishingConfig
    from vault_publisher.core.client import GitHubClient
    from vault_publisher.publishing import (
        DeletionReconciler,
        RepoAttribution,
        SelectionEngine,
        UpsertPublisher,
    )
    from vault_publisher.vault import FileSystemVault

    settings = PublishingConfig(default_folder="docs")
    repo = RepoAttribution(owner="octocat", repo="garden")
    vault = FileSystemVault("~/notes")
    selection = SelectionEngine(settings, repo, store=vault)

    documents = vault.list_documents()
    publisher = UpsertPublisher(github_client, settings, selection, vault)
    counters = await publisher.publish_batch(documents)

    reconciler = DeletionReconciler(github_client, settings, selection)
    await reconciler.reconcile(repo, None, documents)
"""

from .exclusion import is_excluded, parse_rule
from .inventory import list_repo_files
from .mapper import PathResolver
from .models import (
    NOT_FOUND,
    Found,
    LocalDocument,
    NotFound,
    OutcomeCounters,
    ProbeResult,
    ProtectionFlags,
    RemoteFile,
    RepoAttribution,
    ShareDecision,
)
from .publisher import UpsertPublisher
from .reconciler import DeletionReconciler
from .reporter import (
    format_deletion_summary,
    format_publish_summary,
    log_reporter,
    outcome_to_json,
)
from .selection import SelectionEngine, is_attachment
from .workflow import BuildWaiter

__all__ = [
    "BuildWaiter",
    "DeletionReconciler",
    "Found",
    "LocalDocument",
    "NOT_FOUND",
    "NotFound",
    "OutcomeCounters",
    "PathResolver",
    "ProbeResult",
    "ProtectionFlags",
    "RemoteFile",
    "RepoAttribution",
    "SelectionEngine",
    "ShareDecision",
    "UpsertPublisher",
    "format_deletion_summary",
    "format_publish_summary",
    "is_attachment",
    "is_excluded",
    "list_repo_files",
    "log_reporter",
    "outcome_to_json",
    "parse_rule",
]
