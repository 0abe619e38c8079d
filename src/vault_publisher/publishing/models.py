"""Pydantic models for the publishing and pruning pipeline.

Defines the data contracts shared across the publishing modules:

- ``LocalDocument``: A note (or attachment) in the local vault.
- ``RepoAttribution``: One remote target (owner, repo, branch).
- ``ShareDecision``: Whether a note is published, and where.
- ``RemoteFile``: One blob from the remote inventory.
- ``ProtectionFlags``: Frontmatter flags that veto pruning an index page.
- ``Found`` / ``NotFound``: Outcome of probing a remote path.
- ``OutcomeCounters``: Success/failure tally for one batch.

Value models are frozen; ``RepoAttribution`` in particular compares and
hashes by its fields, so two targets naming the same repository and
branch are the same target.
"""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Any, Union

from pydantic import BaseModel


class LocalDocument(BaseModel):
    """A file in the local vault.

    Attributes:
        path: Vault-relative POSIX path (identity).
        frontmatter: Parsed frontmatter mapping, or ``None`` when the
            note has no (or an unparseable) frontmatter block.
        embeds: Raw embed link targets found in the note body.
    """

    path: str
    frontmatter: dict[str, Any] | None = None
    embeds: list[str] = []

    model_config = {"frozen": True}

    @property
    def name(self) -> str:
        """File name including extension."""
        return PurePosixPath(self.path).name

    @property
    def extension(self) -> str:
        """Extension without the dot, lower-cased."""
        return PurePosixPath(self.path).suffix.lstrip(".").lower()


class RepoAttribution(BaseModel):
    """Identity of one remote publishing target."""

    owner: str
    repo: str
    branch: str = "main"

    model_config = {"frozen": True}

    def __str__(self) -> str:
        return f"{self.owner}/{self.repo}@{self.branch}"


class ShareDecision(BaseModel):
    """Per-document publication decision, recomputed on every pass.

    Attributes:
        document: The local note the decision is about.
        is_shared: True when the note is published.
        target_repo: Where the note is published.
        remote_path: Repository path the note maps to.
    """

    document: LocalDocument
    is_shared: bool
    target_repo: RepoAttribution
    remote_path: str

    model_config = {"frozen": True}


class RemoteFile(BaseModel):
    """A file currently present in a remote repository tree.

    Attributes:
        path: Repository-relative path.
        sha: Blob SHA, required to update or delete the file.
        content_type: Git object type reported by the tree API.
    """

    path: str
    sha: str
    content_type: str = "blob"

    model_config = {"frozen": True}

    @property
    def is_markdown(self) -> bool:
        return self.path.strip().endswith(".md")


def _flag(value: Any, default: bool) -> bool:
    """Interpret a frontmatter value as a boolean, tolerating strings."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1", "on")
    return bool(value)


class ProtectionFlags(BaseModel):
    """Remote frontmatter flags that can veto deletion of an index page."""

    index: bool = False
    autoclean: bool = True
    share: bool = False

    model_config = {"frozen": True}

    @classmethod
    def from_frontmatter(
        cls, frontmatter: dict[str, Any] | None
    ) -> ProtectionFlags:
        fm = frontmatter or {}
        return cls(
            index=_flag(fm.get("index"), False),
            autoclean=_flag(fm.get("autoclean"), True),
            share=_flag(fm.get("share"), False),
        )

    @property
    def is_protected(self) -> bool:
        """True when the file must not be deleted."""
        return self.index or not self.autoclean or not self.share


class Found(BaseModel):
    """The probed path exists as a file; ``sha`` is its version token."""

    sha: str

    model_config = {"frozen": True}


class NotFound(BaseModel):
    """The probed path does not exist yet (or is not a file)."""

    model_config = {"frozen": True}


ProbeResult = Union[Found, NotFound]

NOT_FOUND = NotFound()


class OutcomeCounters(BaseModel):
    """Success/failure tally for one upload or delete batch."""

    succeeded: int = 0
    failed: int = 0

    def record(self, success: bool) -> None:
        if success:
            self.succeeded += 1
        else:
            self.failed += 1

    @property
    def total(self) -> int:
        return self.succeeded + self.failed
