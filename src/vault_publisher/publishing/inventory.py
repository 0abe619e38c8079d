"""Remote inventory: the files currently present in a target repository."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from vault_publisher.core.async_utils import run_sync
from vault_publisher.publishing.models import RemoteFile, RepoAttribution

if TYPE_CHECKING:
    from vault_publisher.core.client import GitHubClient

logger = logging.getLogger(__name__)

TREE_PATH = "/repos/{owner}/{repo}/git/trees/{tree_sha}"


async def list_repo_files(
    client: GitHubClient, repo: RepoAttribution, branch: str | None = None
) -> list[RemoteFile]:
    """List every blob in the tree of *branch* (default: ``repo.branch``).

    Directories and submodules are left out. Failures propagate; an
    incomplete inventory must never be mistaken for an empty one.

    Raises:
        GitHubApiError: If the tree cannot be read.
        requests.RequestException: On network failures.
    """
    ref = branch or repo.branch
    response = await run_sync(
        client.request,
        "GET",
        TREE_PATH,
        owner=repo.owner,
        repo=repo.repo,
        tree_sha=ref,
        recursive="1",
    )
    data = response.data if isinstance(response.data, dict) else {}
    if data.get("truncated"):
        logger.warning(
            "Tree listing of %s@%s is truncated; some files will not be pruned",
            f"{repo.owner}/{repo.repo}",
            ref,
        )

    files = [
        RemoteFile(
            path=entry["path"],
            sha=entry["sha"],
            content_type=entry.get("type", "blob"),
        )
        for entry in data.get("tree", [])
        if entry.get("type") == "blob"
    ]
    logger.debug("%d blob(s) in %s@%s", len(files), repo.repo, ref)
    return files
