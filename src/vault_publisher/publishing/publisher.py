"""Upsert publisher: place shared notes and their images in GitHub.

Publishing one file is a two-call protocol against the contents API:

1. **Probe** -- ``GET /repos/{owner}/{repo}/contents/{path}``. A file
   answer yields its blob SHA (``Found``); anything else, including the
   404 of a first publish, yields ``NotFound``.
2. **Write** -- ``PUT`` the base64 content. The SHA is included only
   when the probe found the file; its presence is what makes the call an
   update rather than a create.

A missing repository identity raises ``ConfigurationError`` before any
call is made and aborts the whole batch. Any other failure is confined
to the file it happened on: it is logged, counted, and the batch moves
on to the next note.
"""

from __future__ import annotations

import base64
import json
import logging
from typing import TYPE_CHECKING, Iterable

import requests

from vault_publisher.config_schema import PublishingConfig
from vault_publisher.core.async_utils import run_sync
from vault_publisher.errors import ConfigurationError, GitHubApiError
from vault_publisher.publishing.mapper import PathResolver
from vault_publisher.publishing.models import (
    NOT_FOUND,
    Found,
    LocalDocument,
    OutcomeCounters,
    ProbeResult,
    RepoAttribution,
    ShareDecision,
)
from vault_publisher.publishing.reporter import (
    Reporter,
    format_publish_summary,
    log_reporter,
)
from vault_publisher.publishing.selection import SelectionEngine
from vault_publisher.validators import validate_content, validate_remote_path

if TYPE_CHECKING:
    from vault_publisher.core.client import GitHubClient
    from vault_publisher.vault.store import FileSystemVault

logger = logging.getLogger(__name__)

CONTENTS_PATH = "/repos/{owner}/{repo}/contents/{path}"
MANIFEST_NAME = "vault_published.json"

# Per-file failures: the file is skipped, the batch continues.
ITEM_ERRORS = (GitHubApiError, requests.RequestException, OSError, ValueError)


def require_repo(repo: RepoAttribution) -> None:
    """Raise ``ConfigurationError`` unless *repo* names owner and repository."""
    if not repo.repo:
        raise ConfigurationError(
            "github.repo",
            "You need to define a GitHub repository in the settings "
            "(GITHUB_REPO or github.repo).",
        )
    if not repo.owner:
        raise ConfigurationError(
            "github.owner",
            "You need to define your GitHub username in the settings "
            "(GITHUB_OWNER or github.owner).",
        )


class UpsertPublisher:
    """Publish shared notes and their embedded images.

    Args:
        client: GitHub transport.
        settings: The publishing section of the configuration.
        selection: Share rules and embed resolution.
        store: Vault the note contents are read from.
        reporter: Report channel for batch summaries.
        silent: Suppress batch summaries.
    """

    def __init__(
        self,
        client: GitHubClient,
        settings: PublishingConfig,
        selection: SelectionEngine,
        store: FileSystemVault,
        reporter: Reporter = log_reporter,
        silent: bool = False,
    ) -> None:
        self.client = client
        self.settings = settings
        self.selection = selection
        self.store = store
        self.reporter = reporter
        self.silent = silent
        self.resolver = PathResolver(settings)

    # ------------------------------------------------------------------
    # Probe + write
    # ------------------------------------------------------------------

    async def probe(self, repo: RepoAttribution, path: str) -> ProbeResult:
        """Look up the current blob SHA at *path*.

        Returns ``NotFound`` for every outcome other than an existing
        file; a 404 here is the normal first-publish case.
        """
        try:
            response = await run_sync(
                self.client.request,
                "GET",
                CONTENTS_PATH,
                owner=repo.owner,
                repo=repo.repo,
                path=path,
                ref=repo.branch,
            )
        except GitHubApiError as exc:
            if exc.is_not_found:
                logger.debug("%s does not exist yet in %s", path, repo)
            else:
                logger.warning("Probe of %s in %s failed: %s", path, repo, exc)
            return NOT_FOUND
        except requests.RequestException as exc:
            logger.warning("Probe of %s in %s failed: %s", path, repo, exc)
            return NOT_FOUND

        data = response.data
        if (
            response.status == 200
            and isinstance(data, dict)
            and data.get("type") == "file"
            and data.get("sha")
        ):
            return Found(sha=data["sha"])
        return NOT_FOUND

    async def publish(
        self,
        local_path: str,
        content: str,
        remote_path: str,
        repo: RepoAttribution,
        title: str = "",
    ) -> bool:
        """Create or update one file.

        Args:
            local_path: Vault path of the source, for log messages.
            content: Base64-encoded file content.
            remote_path: Destination path in the repository.
            repo: Target repository.
            title: Name used in the commit message.

        Returns:
            True once the write has been accepted.

        Raises:
            ConfigurationError: If *repo* lacks an owner or repository.
            ValueError: If the remote path or content is invalid.
            GitHubApiError: If the write is rejected.
        """
        require_repo(repo)

        is_valid, error_msg = validate_remote_path(remote_path)
        if not is_valid:
            raise ValueError(f"Invalid remote path: {error_msg}")
        is_valid, error_msg = validate_content(content)
        if not is_valid:
            raise ValueError(f"Invalid content: {error_msg}")

        existing = await self.probe(repo, remote_path)

        payload = {
            "message": f"Update note {title or local_path}",
            "content": content,
            "branch": repo.branch,
        }
        if isinstance(existing, Found):
            payload["sha"] = existing.sha

        logger.info("Uploading %s -> %s (%s)", local_path, remote_path, repo)
        await run_sync(
            self.client.request,
            "PUT",
            CONTENTS_PATH,
            owner=repo.owner,
            repo=repo.repo,
            path=remote_path,
            **payload,
        )
        return True

    async def upload_text(
        self,
        local_path: str,
        text: str,
        remote_path: str,
        repo: RepoAttribution,
        title: str = "",
    ) -> bool:
        encoded = base64.b64encode(text.encode("utf-8")).decode("ascii")
        return await self.publish(local_path, encoded, remote_path, repo, title)

    async def upload_attachment(
        self, attachment: LocalDocument, repo: RepoAttribution
    ) -> bool:
        data = await run_sync(self.store.read_binary, attachment)
        encoded = base64.b64encode(data).decode("ascii")
        return await self.publish(
            attachment.path,
            encoded,
            self.resolver.resolve_attachment_path(attachment),
            repo,
            attachment.name,
        )

    async def upload_folder(
        self, decisions: Iterable[ShareDecision], repo: RepoAttribution
    ) -> bool:
        """Rewrite the manifest listing every note shared with *repo*.

        Returns False (and writes nothing) when no note targets *repo*.
        """
        names = [d.document.name for d in decisions if d.target_repo == repo]
        if not names:
            return False
        return await self.upload_text(
            MANIFEST_NAME,
            json.dumps(names),
            self.resolver.default_path(MANIFEST_NAME),
            repo,
            MANIFEST_NAME,
        )

    # ------------------------------------------------------------------
    # Notes
    # ------------------------------------------------------------------

    async def publish_decision(self, decision: ShareDecision) -> bool:
        """Upload one shared note and, if enabled, its images.

        Returns False when the note is not shared or an upload failed.

        Raises:
            ConfigurationError: If the note's target is incomplete.
        """
        if not decision.is_shared:
            return False

        document = decision.document
        repo = decision.target_repo
        try:
            text = await run_sync(self.store.read_text, document)
            await self.upload_text(
                document.path, text, decision.remote_path, repo, document.name
            )
            if self.settings.transfer_embeds:
                for attachment in self.selection.linked_attachments(document):
                    await self.upload_attachment(attachment, repo)
        except ITEM_ERRORS as exc:
            logger.error("Failed to publish %s: %s", document.path, exc)
            return False
        return True

    async def publish_document(
        self,
        document: LocalDocument,
        one_file: bool = False,
        documents: Iterable[LocalDocument] = (),
    ) -> bool:
        """Publish a single note.

        With *one_file*, the manifest of the note's target is rewritten
        afterwards from the shared notes among *documents* (the note
        itself is always included).
        """
        decision = self.selection.decide(document)
        if decision.is_shared:
            require_repo(decision.target_repo)
        published = await self.publish_decision(decision)
        if published and one_file:
            decisions = self.selection.select_shared_documents(
                [d for d in documents if d.path != document.path]
            )
            decisions.append(decision)
            try:
                await self.upload_folder(decisions, decision.target_repo)
            except ITEM_ERRORS as exc:
                logger.error(
                    "Failed to update manifest in %s: %s",
                    decision.target_repo,
                    exc,
                )
        return published

    async def publish_batch(
        self, documents: Iterable[LocalDocument]
    ) -> OutcomeCounters:
        """Publish every shared note in the vault, one after another.

        Every target is checked for a complete identity before the first
        upload, so a configuration error never leaves a partial batch.
        The manifest of each target is rewritten after its notes.

        Returns:
            Success/failure counts over the shared notes.
        """
        decisions = self.selection.select_shared_documents(documents)
        targets = list(dict.fromkeys(d.target_repo for d in decisions))
        for repo in targets:
            require_repo(repo)

        counters = OutcomeCounters()
        for decision in decisions:
            counters.record(await self.publish_decision(decision))

        for repo in targets:
            try:
                await self.upload_folder(decisions, repo)
            except ITEM_ERRORS as exc:
                logger.error("Failed to update manifest in %s: %s", repo, exc)

        if not self.silent:
            repo = targets[0] if len(targets) == 1 else None
            self.reporter(format_publish_summary(counters, repo))
        return counters
