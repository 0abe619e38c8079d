"""Decide which vault notes are shared, and with which repository.

Sharing is decided from local frontmatter alone. Missing or malformed
frontmatter always means "not shared"; selection never raises for a bad
note.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any, Iterable

from vault_publisher.config_schema import PublishingConfig
from vault_publisher.publishing.mapper import PathResolver
from vault_publisher.publishing.models import (
    LocalDocument,
    RepoAttribution,
    ShareDecision,
)

if TYPE_CHECKING:
    from vault_publisher.vault.store import FileSystemVault

logger = logging.getLogger(__name__)

PUBLISHABLE_EXTENSION = "md"
ATTACHMENT_PATTERN = re.compile(r"\.(png|jpe?g|svg|bmp|gif)$", re.IGNORECASE)

# Frontmatter key that redirects a note to another repository.
REPO_KEY = "repo"


def is_attachment(path: str) -> bool:
    """True if *path* has one of the publishable image extensions."""
    return ATTACHMENT_PATTERN.search(path.strip()) is not None


class SelectionEngine:
    """Compute share decisions for vault documents.

    Args:
        settings: The publishing section of the configuration.
        default_repo: Target used when a note does not name its own.
        store: Vault used to resolve embeds; optional for callers that
            only need decisions.
    """

    def __init__(
        self,
        settings: PublishingConfig,
        default_repo: RepoAttribution,
        store: FileSystemVault | None = None,
    ) -> None:
        self.settings = settings
        self.default_repo = default_repo
        self.store = store
        self.resolver = PathResolver(settings)

    # ------------------------------------------------------------------
    # Share rules
    # ------------------------------------------------------------------

    def excluded_folders(self) -> list[str]:
        return [
            folder.strip()
            for folder in self.settings.excluded_folders.split(",")
            if folder.strip()
        ]

    def is_excluded_folder(self, document: LocalDocument) -> bool:
        return any(
            folder in document.path for folder in self.excluded_folders()
        )

    def is_shared(self, document: LocalDocument) -> bool:
        """True iff the share key is exactly ``true``, the note is outside
        every excluded folder, and it is a Markdown note."""
        frontmatter = document.frontmatter
        if not isinstance(frontmatter, dict):
            return False
        if frontmatter.get(self.settings.share_key) is not True:
            return False
        if self.is_excluded_folder(document):
            return False
        return document.extension == PUBLISHABLE_EXTENSION

    # ------------------------------------------------------------------
    # Attribution
    # ------------------------------------------------------------------

    def resolve_attribution(self, document: LocalDocument) -> RepoAttribution:
        """Return the repository a note targets.

        The ``repo`` frontmatter key may be ``"name"``, ``"owner/name"``,
        ``"owner/name/branch"`` or a mapping with ``owner``, ``repo`` and
        ``branch`` keys. Anything else falls back to the default target.
        """
        value: Any = (document.frontmatter or {}).get(REPO_KEY)
        default = self.default_repo

        if isinstance(value, str) and value.strip():
            parts = [p for p in value.strip().split("/") if p]
            if len(parts) == 1:
                return default.model_copy(update={"repo": parts[0]})
            if len(parts) == 2:
                return RepoAttribution(
                    owner=parts[0], repo=parts[1], branch=default.branch
                )
            return RepoAttribution(
                owner=parts[0], repo=parts[1], branch="/".join(parts[2:])
            )

        if isinstance(value, dict):
            return RepoAttribution(
                owner=str(value.get("owner") or default.owner),
                repo=str(value.get("repo") or default.repo),
                branch=str(value.get("branch") or default.branch),
            )

        return default

    # ------------------------------------------------------------------
    # Decisions
    # ------------------------------------------------------------------

    def decide(self, document: LocalDocument) -> ShareDecision:
        return ShareDecision(
            document=document,
            is_shared=self.is_shared(document),
            target_repo=self.resolve_attribution(document),
            remote_path=self.resolver.resolve_remote_path(document),
        )

    def decide_all(
        self, documents: Iterable[LocalDocument]
    ) -> list[ShareDecision]:
        """Return one decision per document, shared or not."""
        return [self.decide(doc) for doc in documents]

    def select_shared_documents(
        self, documents: Iterable[LocalDocument]
    ) -> list[ShareDecision]:
        """Return the decisions of shared documents, in input order."""
        return [d for d in self.decide_all(documents) if d.is_shared]

    def all_shared_paths(
        self, documents: Iterable[LocalDocument]
    ) -> list[tuple[str, RepoAttribution]]:
        """``(remote_path, attribution)`` of every shared note, all targets."""
        return [
            (d.remote_path, d.target_repo)
            for d in self.select_shared_documents(documents)
        ]

    # ------------------------------------------------------------------
    # Embeds
    # ------------------------------------------------------------------

    def linked_attachments(
        self, document: LocalDocument
    ) -> list[LocalDocument]:
        """Resolve a note's embeds, keeping image files only.

        An embed that cannot be resolved is logged and skipped.
        """
        if self.store is None or not document.embeds:
            return []

        attachments: list[LocalDocument] = []
        for link in document.embeds:
            try:
                target = self.store.resolve_embed(link, document.path)
            except (OSError, ValueError) as exc:
                logger.warning(
                    "Skipping embed %r in %s: %s", link, document.path, exc
                )
                continue
            if is_attachment(target.path):
                attachments.append(target)
        return attachments
