"""Deletion reconciler: prune remote files no longer shared from the vault.

The vault knows what *should* be published; each target repository
knows what *is* published. For one target the reconciler:

1. **Scopes** the remote inventory to folders this tool manages, and
   refuses to run at all when that scope is undefined.
2. **Diffs** it against every ``(remote_path, attribution)`` pair the
   vault still shares, across all targets.
3. **Protects** index pages whose own remote frontmatter opts out of
   cleanup.
4. **Deletes** what remains, one call at a time, counting outcomes.

Each delete is an independent call that may fail on its own; failures
are counted and the batch continues. ``asyncio.CancelledError`` is the
cancellation signal and always propagates uncounted.
"""

from __future__ import annotations

import base64
import binascii
import logging
from typing import TYPE_CHECKING, Iterable, Sequence

import requests
import yaml

from vault_publisher.config_schema import PublishingConfig
from vault_publisher.core.async_utils import run_sync
from vault_publisher.errors import GitHubApiError
from vault_publisher.frontmatter import parse_fenced_block
from vault_publisher.publishing.exclusion import is_excluded
from vault_publisher.publishing.inventory import list_repo_files
from vault_publisher.publishing.models import (
    LocalDocument,
    OutcomeCounters,
    ProtectionFlags,
    RemoteFile,
    RepoAttribution,
)
from vault_publisher.publishing.publisher import require_repo
from vault_publisher.publishing.reporter import (
    Reporter,
    format_deletion_summary,
    format_scope_error,
    log_reporter,
)
from vault_publisher.publishing.selection import SelectionEngine, is_attachment

if TYPE_CHECKING:
    from vault_publisher.core.client import GitHubClient

logger = logging.getLogger(__name__)

CONTENTS_PATH = "/repos/{owner}/{repo}/contents/{path}"

SharedPair = tuple[str, RepoAttribution]


class DeletionReconciler:
    """Prune files from target repositories.

    Args:
        client: GitHub transport.
        settings: The publishing section of the configuration.
        selection: Share rules used to rebuild the shared pairs.
        reporter: Report channel for per-target summaries.
        silent: Suppress summaries and scope errors.
    """

    def __init__(
        self,
        client: GitHubClient,
        settings: PublishingConfig,
        selection: SelectionEngine,
        reporter: Reporter = log_reporter,
        silent: bool = False,
    ) -> None:
        self.client = client
        self.settings = settings
        self.selection = selection
        self.reporter = reporter
        self.silent = silent

    # ------------------------------------------------------------------
    # Scope
    # ------------------------------------------------------------------

    def scope_defined(self) -> bool:
        settings = self.settings
        if not settings.default_folder:
            return False
        if settings.placement == "yaml" and not settings.root_folder:
            return False
        return True

    def in_scope(self, path: str) -> bool:
        settings = self.settings
        managed = (
            settings.default_folder in path
            or (settings.placement == "yaml" and settings.root_folder in path)
            or (bool(settings.image_folder) and settings.image_folder in path)
        )
        if not managed:
            return False
        if not (is_attachment(path) or path.endswith("md")):
            return False
        return not is_excluded(path, self.settings.autoclean_excluded)

    def filter_remote_files(
        self, files: Iterable[RemoteFile]
    ) -> list[RemoteFile] | None:
        """Keep the remote files this tool manages.

        Returns:
            The in-scope files, or ``None`` when the scope is undefined.
            ``None`` is distinct from an empty list: it means "refuse to
            prune", never "nothing to prune".
        """
        if not self.scope_defined():
            return None
        return [f for f in files if self.in_scope(f.path)]

    # ------------------------------------------------------------------
    # Diff
    # ------------------------------------------------------------------

    def shared_pairs(self, documents: Iterable[LocalDocument]) -> list[SharedPair]:
        """Every ``(remote_path, attribution)`` the vault still publishes.

        Images linked from shared notes are included alongside the notes,
        so an attachment that is still embedded somewhere is kept.
        """
        documents = list(documents)
        pairs: list[SharedPair] = self.selection.all_shared_paths(documents)
        resolver = self.selection.resolver
        for decision in self.selection.select_shared_documents(documents):
            for attachment in self.selection.linked_attachments(decision.document):
                pairs.append(
                    (
                        resolver.resolve_attachment_path(attachment),
                        decision.target_repo,
                    )
                )
        return pairs

    @staticmethod
    def needs_deletion(
        file: RemoteFile,
        pairs: Sequence[SharedPair],
        repo: RepoAttribution,
    ) -> bool:
        """Decide whether *file* is stale in *repo*.

        A file no shared pair points at is always stale. A Markdown file
        some pair points at is stale only when no pair points at it for
        this very target. Attachments still referenced anywhere are kept.
        """
        in_vault = any(path == file.path for path, _ in pairs)
        if not in_vault:
            return True
        if not file.is_markdown:
            return False
        return not any(
            path == file.path and target == repo for path, target in pairs
        )

    # ------------------------------------------------------------------
    # Index protection
    # ------------------------------------------------------------------

    async def check_index_protection(
        self,
        file: RemoteFile,
        repo: RepoAttribution,
        branch: str | None = None,
    ) -> bool:
        """Return True if *file* must be kept on account of its frontmatter.

        The copy on *branch* (default: ``repo.branch``) is read, the same
        branch the deletion would apply to. A file without a frontmatter
        block is not protected. A fetch or parse failure is logged and
        also keeps the file; this includes any non-text file whose path
        merely contains ``index`` (``index.png``), which is never pruned.
        """
        try:
            response = await run_sync(
                self.client.request,
                "GET",
                CONTENTS_PATH,
                owner=repo.owner,
                repo=repo.repo,
                path=file.path,
                ref=branch or repo.branch,
            )
            data = response.data if isinstance(response.data, dict) else {}
            raw = base64.b64decode(data.get("content", ""))
            frontmatter = parse_fenced_block(raw.decode("utf-8"))
        except (
            GitHubApiError,
            requests.RequestException,
            binascii.Error,
            yaml.YAMLError,
            ValueError,
        ) as exc:
            logger.warning(
                "Cannot check index protection of %s in %s, keeping it: %s",
                file.path,
                repo,
                exc,
            )
            return True

        if frontmatter is None:
            return False
        flags = ProtectionFlags.from_frontmatter(frontmatter)
        if flags.is_protected:
            logger.info("Keeping protected index %s in %s", file.path, repo)
        return flags.is_protected

    # ------------------------------------------------------------------
    # Apply
    # ------------------------------------------------------------------

    async def delete_file(
        self, file: RemoteFile, repo: RepoAttribution, branch: str
    ) -> bool:
        """Delete one file. True only on a 200 answer."""
        logger.info("Deleting %s from %s", file.path, repo)
        try:
            response = await run_sync(
                self.client.request,
                "DELETE",
                CONTENTS_PATH,
                owner=repo.owner,
                repo=repo.repo,
                path=file.path,
                message="Delete file",
                sha=file.sha,
                branch=branch,
            )
        except (GitHubApiError, requests.RequestException) as exc:
            logger.error("Failed to delete %s from %s: %s", file.path, repo, exc)
            return False
        return response.status == 200

    async def reconcile(
        self,
        repo: RepoAttribution,
        branch: str | None,
        documents: Iterable[LocalDocument],
    ) -> OutcomeCounters | None:
        """Prune *repo* on *branch* (default: ``repo.branch``).

        Returns:
            Outcome counts, or ``None`` when the scope is undefined and
            nothing was attempted.

        Raises:
            ConfigurationError: If *repo* lacks an owner or repository.
            GitHubApiError: If the remote inventory cannot be listed.
            asyncio.CancelledError: If the task is cancelled.
        """
        if not self.scope_defined():
            if not self.silent:
                self.reporter(format_scope_error(self.settings))
            return None
        require_repo(repo)

        branch = branch or repo.branch
        remote = self.filter_remote_files(
            await list_repo_files(self.client, repo, branch)
        ) or []
        pairs = self.shared_pairs(documents)

        counters = OutcomeCounters()
        for file in remote:
            if not self.needs_deletion(file, pairs, repo):
                continue
            if "index" in file.path and await self.check_index_protection(
                file, repo, branch
            ):
                continue
            counters.record(await self.delete_file(file, repo, branch))

        if not self.silent:
            self.reporter(format_deletion_summary(counters, repo))
        return counters

    async def reconcile_all(
        self,
        repos: Iterable[RepoAttribution],
        branch: str | None,
        documents: Iterable[LocalDocument],
    ) -> dict[RepoAttribution, OutcomeCounters | None]:
        """Reconcile each distinct target in turn.

        Every target is checked for an owner and repository before the
        first one is pruned.

        Raises:
            ConfigurationError: If any target lacks an owner or repository.
        """
        documents = list(documents)
        targets = list(dict.fromkeys(repos))
        if self.scope_defined():
            for repo in targets:
                require_repo(repo)

        results: dict[RepoAttribution, OutcomeCounters | None] = {}
        for repo in targets:
            results[repo] = await self.reconcile(repo, branch, documents)
        return results
