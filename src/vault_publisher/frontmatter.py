"""YAML frontmatter parsing for local notes and fetched remote files."""

from __future__ import annotations

import logging
from typing import Any

import yaml

logger = logging.getLogger(__name__)

FENCE = "---"


def _trim(data: Any) -> Any:
    """Strip whitespace from string keys and values, recursively."""
    if isinstance(data, str):
        return data.strip()
    if isinstance(data, dict):
        return {
            (k.strip() if isinstance(k, str) else k): _trim(v)
            for k, v in data.items()
        }
    if isinstance(data, list):
        return [_trim(item) for item in data]
    return data


def split_frontmatter(text: str) -> tuple[dict[str, Any] | None, str]:
    """Split a note into its frontmatter mapping and body.

    The frontmatter block must open on the first line. A missing block,
    invalid YAML, or a non-mapping root yields ``None``; this never
    raises.

    Returns:
        ``(frontmatter, body)``.
    """
    stripped = text.lstrip("\ufeff")
    lines = stripped.splitlines(keepends=True)
    if not lines or lines[0].strip() != FENCE:
        return None, text

    for idx in range(1, len(lines)):
        if lines[idx].strip() == FENCE:
            block = "".join(lines[1:idx])
            body = "".join(lines[idx + 1 :])
            try:
                data = yaml.safe_load(block)
            except yaml.YAMLError as exc:
                logger.debug("Unparseable frontmatter: %s", exc)
                return None, body
            if not isinstance(data, dict):
                return None, body
            return _trim(data), body

    return None, text


def parse_fenced_block(contents: str) -> dict[str, Any] | None:
    """Parse the YAML between the first two ``---`` fences of *contents*.

    Used on files fetched back from the remote, where the content is
    expected to be one of our own published notes.

    Returns:
        The trimmed mapping, ``{}`` for an empty block, or ``None`` when
        the file has no fenced block at all.

    Raises:
        ValueError: If the block is not a mapping.
        yaml.YAMLError: If the block is not valid YAML.
    """
    parts = contents.split(FENCE)
    if len(parts) < 3:
        return None
    data = yaml.safe_load(parts[1])
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError("Frontmatter is not a mapping")
    return _trim(data)
