"""Exception hierarchy for vault_publisher.

Configuration errors abort a whole batch; API errors are per-item
failures that callers log, count, and move past.
"""


class PublisherError(Exception):
    """Base class for all vault_publisher errors."""


class ConfigurationError(PublisherError):
    """A required setting is missing or unusable.

    Args:
        setting: Name of the setting the user must fix.
        message: Human-readable, actionable description.
    """

    def __init__(self, setting: str, message: str) -> None:
        super().__init__(message)
        self.setting = setting
        self.message = message

    def __str__(self) -> str:
        return f"Config error ({self.setting}): {self.message}"


class GitHubApiError(PublisherError):
    """The GitHub API answered with an HTTP error status."""

    def __init__(
        self, status: int, message: str, verb: str = "", path: str = ""
    ) -> None:
        super().__init__(message)
        self.status = status
        self.message = message
        self.verb = verb
        self.path = path

    @property
    def is_not_found(self) -> bool:
        return self.status == 404

    def __str__(self) -> str:
        where = f" ({self.verb} {self.path})" if self.verb else ""
        return f"GitHub API error {self.status}{where}: {self.message}"


class WorkflowTimeoutError(PublisherError):
    """The downstream workflow did not complete within the wait bound."""
