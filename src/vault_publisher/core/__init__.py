"""GitHub transport and async helpers shared by the CLI and publishing code."""

from .async_utils import run_sync
from .client import GitHubClient, GitHubResponse

__all__ = ["GitHubClient", "GitHubResponse", "run_sync"]
