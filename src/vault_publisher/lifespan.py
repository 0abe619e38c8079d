"""Session management for one publisher run."""

import logging
import os
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import requests
from dotenv import load_dotenv

from .config import load_config
from .config_loader import discover_config_files, load_hierarchical_config
from .config_schema import build_config
from .core.async_utils import run_sync
from .core.client import GitHubClient
from .errors import ConfigurationError, GitHubApiError
from .logger import setup_logging
from .publishing.models import RepoAttribution
from .vault import FileSystemVault

logger = logging.getLogger(__name__)


def _stderr_print(msg: str) -> None:
    """Print message to stderr so stdout stays free for command output."""
    print(msg, file=sys.stderr, flush=True)


@asynccontextmanager
async def publisher_session(
    config_overrides: dict[str, Any] | None = None,
) -> AsyncIterator[dict[str, Any]]:
    """
    Build everything one publisher command needs.

    On startup:
    - Load .env file (so values are available for env var lookups and YAML interpolation)
    - Load YAML config files if present (as fallback values)
    - Merge all sources via load_config(): CLI > env vars > .env > YAML > defaults
    - Configure logging from CLI flags and the ``logging`` section
    - Create GitHubClient and check the default repository is reachable
    - Open the vault directory

    Args:
        config_overrides: Optional dict with values from the CLI (owner, repo,
            branch, token, debug, vault, log_file, log_format)

    Yields:
        Dict with 'config', 'settings', 'client', 'vault' and 'default_repo'

    Raises:
        RuntimeError: If configuration is invalid or GitHub is unreachable.
        ConfigurationError: If the vault directory does not exist.
    """
    overrides = config_overrides or {}

    try:
        # 1. Load .env early (before YAML, so ${VAR} interpolation can use .env values)
        load_dotenv()

        # 2. Load YAML config files, extract the github section as fallbacks
        raw = load_hierarchical_config()
        unified = build_config(raw)
        yaml_fallbacks = {
            k: v
            for k, v in unified.github.model_dump().items()
            if v is not None
        }

        # 3. Single call to load_config with all sources merged
        config = load_config(
            owner=overrides.get("owner"),
            repo=overrides.get("repo"),
            token=overrides.get("token"),
            branch=overrides.get("branch"),
            debug=overrides.get("debug", False),
            yaml_fallbacks=yaml_fallbacks,
        )
    except ValueError as e:
        _stderr_print(f"ERROR: Configuration error: {e}")
        raise RuntimeError(f"Configuration error: {e}") from e

    setup_logging(
        debug=config.debug,
        log_file=overrides.get("log_file") or unified.logging.file,
        debug_format=overrides.get("log_format", "text"),
        level=unified.logging.level,
    )

    config_files = discover_config_files()
    sources = [f"config file: {config_files[0]}"] if config_files else []
    if overrides:
        sources.append("CLI arguments")
    sources.append("environment variables")
    logger.info("Configuration loaded from: %s", ", ".join(sources))

    vault_root = Path(
        overrides.get("vault") or os.getenv("VAULT_PUBLISHER_VAULT") or "."
    ).expanduser()
    if not vault_root.is_dir():
        raise ConfigurationError(
            "vault", f"Vault directory {vault_root} does not exist"
        )

    client = GitHubClient(config)
    if config.owner and config.repo:
        try:
            full_name = await run_sync(client.validate_connection)
        except (GitHubApiError, requests.RequestException) as e:
            logger.error("Failed to reach GitHub: %s", e)
            _stderr_print("ERROR: GitHub connection failed.")
            _stderr_print(f"  {e}")
            _stderr_print("  Check GITHUB_OWNER, GITHUB_REPO, GITHUB_TOKEN.")
            raise RuntimeError(f"GitHub connection failed: {e}") from e
        logger.info("Connected to %s", full_name)

    yield {
        "config": config,
        "settings": unified.publishing,
        "client": client,
        "vault": FileSystemVault(vault_root),
        "default_repo": RepoAttribution(
            owner=config.owner, repo=config.repo, branch=config.branch
        ),
    }

    logger.debug("Publisher session closed")
