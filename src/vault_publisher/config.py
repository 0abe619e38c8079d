"""GitHub connection configuration for the publisher.

Reads repository identity and credentials from CLI args, environment
variables, .env files, and YAML config file fallbacks.

Precedence (highest to lowest):
    CLI args > Environment variables > .env file > YAML config > Built-in defaults

Environment variables:
    GITHUB_TOKEN: Personal access token (required for writes)
    GITHUB_OWNER: Repository owner (user or organisation)
    GITHUB_REPO: Repository name
    GITHUB_BRANCH: Working branch (optional, default: main)
    GITHUB_API_URL: API base URL (optional, default: https://api.github.com)
"""

import logging
import os
from dataclasses import dataclass
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_BRANCH = "main"


@dataclass
class Config:
    owner: str
    repo: str
    token: str
    branch: str = DEFAULT_BRANCH
    api_url: str = DEFAULT_API_URL
    debug: bool = False


def validate_config(config: Config) -> None:
    """Validate configuration values and raise ValueError if invalid.

    Owner and repo are deliberately not checked here: a missing
    repository identity is reported by the publisher as a
    ``ConfigurationError`` so that it aborts the batch with an
    actionable message.

    Args:
        config: Config instance to validate.

    Raises:
        ValueError: If the API URL is malformed or the branch is empty.
    """
    config.api_url = config.api_url.strip()

    if not config.api_url.startswith(("http://", "https://")):
        raise ValueError(
            f"Invalid GitHub API URL '{config.api_url}': must start with http:// or https://"
        )

    parsed = urlparse(config.api_url)
    if not parsed.hostname:
        raise ValueError(
            f"Invalid GitHub API URL '{config.api_url}': URL must include a hostname"
        )

    config.api_url = config.api_url.removesuffix("/")

    if not config.branch.strip():
        raise ValueError(
            "GitHub branch cannot be empty. Set GITHUB_BRANCH or remove it to use 'main'."
        )

    if not config.token.strip():
        logger.warning(
            "No GitHub token configured; only public read access will work."
        )


def load_config(
    owner: str | None = None,
    repo: str | None = None,
    token: str | None = None,
    branch: str | None = None,
    debug: bool = False,
    yaml_fallbacks: dict | None = None,
) -> Config:
    """Load configuration with unified precedence.

    Resolution order for each field (highest to lowest):
        CLI arg > env var / .env > yaml_fallbacks > built-in default

    The caller is responsible for calling ``load_dotenv()`` before this
    function so that .env values are available via ``os.getenv()``.

    Args:
        owner: Override repository owner.
        repo: Override repository name.
        token: Override access token.
        branch: Override working branch.
        debug: Enable debug logging (CLI flag).
        yaml_fallbacks: Dict of values from the YAML ``github`` section.

    Returns:
        Validated Config instance.

    Raises:
        ValueError: If a value is present but invalid.
    """
    fb = yaml_fallbacks or {}

    final_owner = owner or os.getenv("GITHUB_OWNER") or fb.get("owner") or ""
    final_repo = repo or os.getenv("GITHUB_REPO") or fb.get("repo") or ""
    final_token = token or os.getenv("GITHUB_TOKEN") or fb.get("token") or ""
    final_branch = (
        branch
        or os.getenv("GITHUB_BRANCH")
        or fb.get("branch")
        or DEFAULT_BRANCH
    )
    final_api_url = (
        os.getenv("GITHUB_API_URL") or fb.get("api_url") or DEFAULT_API_URL
    )

    if debug:
        final_debug = True
    else:
        env_debug = os.getenv("VAULT_PUBLISHER_DEBUG")
        if env_debug is not None:
            final_debug = env_debug.lower() in ("true", "1", "yes", "on")
        else:
            final_debug = bool(fb.get("debug", False))

    config = Config(
        owner=final_owner.strip(),
        repo=final_repo.strip(),
        token=final_token.strip(),
        branch=final_branch.strip(),
        api_url=final_api_url,
        debug=final_debug,
    )

    validate_config(config)

    return config
