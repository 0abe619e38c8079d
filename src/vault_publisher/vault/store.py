"""Filesystem-backed vault: note discovery, encoding-aware reads, embed lookup.

The publishing core only needs four things from the local store:
enumerate notes, read their text or bytes, and resolve an embed link to
a concrete file. ``FileSystemVault`` provides those over a directory of
Markdown notes.
"""

from __future__ import annotations

import logging
import posixpath
import re
from pathlib import Path, PurePosixPath
from urllib.parse import unquote

from charset_normalizer import from_bytes

from ..frontmatter import split_frontmatter
from ..publishing.models import LocalDocument

logger = logging.getLogger(__name__)

# ![[target]], ![[target|alias]], ![[target#heading]]
_WIKI_EMBED = re.compile(r"!\[\[([^\]|#]+)(?:[|#][^\]]*)?\]\]")
# ![alt](target) and ![alt](target "title")
_MD_EMBED = re.compile(r"!\[[^\]]*\]\(\s*<?([^)\s>]+)>?(?:\s+\"[^\"]*\")?\s*\)")

_IGNORED_DIRS = frozenset({".obsidian", ".git", ".trash"})


# =============================================================================
# File Read
# =============================================================================


def read_file_with_encoding(path: Path) -> tuple[str, str]:
    """Read a file with automatic encoding detection.

    Reads raw bytes first, then uses charset-normalizer to detect encoding.
    Defaults to UTF-8 for empty files or when detection fails.

    Args:
        path: Path to the file to read.

    Returns:
        Tuple of (content_string, detected_encoding).
    """
    raw = path.read_bytes()
    if not raw:
        return ("", "utf-8")

    result = from_bytes(raw).best()
    if result is None:
        encoding = "utf-8"
        content = raw.decode(encoding, errors="replace")
    else:
        encoding = result.encoding
        # ascii is a strict subset of utf-8
        if encoding == "ascii":
            encoding = "utf-8"
        content = str(result)
    return (content, encoding)


def extract_embeds(body: str) -> list[str]:
    """Return embed link targets in order of appearance, without duplicates."""
    found: list[tuple[int, str]] = []
    for match in _WIKI_EMBED.finditer(body):
        found.append((match.start(), match.group(1).strip()))
    for match in _MD_EMBED.finditer(body):
        target = unquote(match.group(1).strip())
        if "://" in target:
            continue
        found.append((match.start(), target))

    seen: set[str] = set()
    embeds: list[str] = []
    for _, target in sorted(found):
        if target and target not in seen:
            seen.add(target)
            embeds.append(target)
    return embeds


# =============================================================================
# Vault
# =============================================================================


class FileSystemVault:
    """Read-only view over a vault directory.

    Args:
        root: Vault root directory.
    """

    def __init__(self, root: Path) -> None:
        self.root = root

    def _iter_files(self):
        for path in sorted(self.root.rglob("*")):
            if not path.is_file():
                continue
            rel = path.relative_to(self.root)
            if any(part in _IGNORED_DIRS for part in rel.parts):
                continue
            yield rel.as_posix()

    def list_documents(self) -> list[LocalDocument]:
        """Enumerate every Markdown note with its frontmatter and embeds.

        A note that cannot be read is logged and skipped.
        """
        documents: list[LocalDocument] = []
        for rel in self._iter_files():
            if not rel.lower().endswith(".md"):
                continue
            try:
                documents.append(self.load_document(rel))
            except OSError as exc:
                logger.error("Cannot read note %s: %s", rel, exc)
        return documents

    def load_document(self, rel_path: str) -> LocalDocument:
        """Build the ``LocalDocument`` for one vault-relative note path."""
        text, _ = read_file_with_encoding(self.root / rel_path)
        frontmatter, body = split_frontmatter(text)
        return LocalDocument(
            path=rel_path,
            frontmatter=frontmatter,
            embeds=extract_embeds(body),
        )

    def read_text(self, document: LocalDocument) -> str:
        content, _ = read_file_with_encoding(self.root / document.path)
        return content

    def read_binary(self, document: LocalDocument) -> bytes:
        return (self.root / document.path).read_bytes()

    def resolve_embed(self, link: str, source_path: str) -> LocalDocument:
        """Resolve an embed link to a concrete vault file.

        Lookup order: relative to the embedding note, then from the vault
        root, then by file name anywhere in the vault (a match in the
        note's own folder wins, otherwise the first in path order). Links
        without an extension name notes, so ``.md`` is appended.

        Raises:
            FileNotFoundError: If nothing matches.
        """
        link = link.strip().lstrip("/")
        source_dir = PurePosixPath(source_path).parent

        if not PurePosixPath(link).suffix:
            link = f"{link}.md"

        for raw in (str(source_dir / link), link):
            candidate = PurePosixPath(posixpath.normpath(raw))
            full = self.root / candidate
            if full.is_file() and self._inside_root(full):
                return LocalDocument(path=candidate.as_posix())

        name = PurePosixPath(link).name
        matches = [
            rel for rel in self._iter_files() if PurePosixPath(rel).name == name
        ]
        if not matches:
            raise FileNotFoundError(
                f"Embed '{link}' in {source_path} not found in vault"
            )
        for rel in matches:
            if PurePosixPath(rel).parent == source_dir:
                return LocalDocument(path=rel)
        return LocalDocument(path=matches[0])

    def _inside_root(self, path: Path) -> bool:
        return path.resolve().is_relative_to(self.root.resolve())
