import logging
import re
import threading
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import requests

from ..config import Config
from ..errors import GitHubApiError

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\{(\w+)\}")

# Path parameters that may legitimately contain slashes.
_SLASH_PARAMS = frozenset({"path", "tree_sha"})


@dataclass(frozen=True)
class GitHubResponse:
    status: int
    data: Any = None


class GitHubClient:
    """Thin GitHub REST transport keyed by verb + path template.

    ``client.request("GET", "/repos/{owner}/{repo}/contents/{path}",
    owner=..., repo=..., path=...)`` fills the placeholders, sends the
    leftover parameters as a query string (GET) or JSON body (anything
    else), and returns a ``GitHubResponse``. HTTP error statuses raise
    ``GitHubApiError``; connection failures raise ``requests`` errors.
    """

    def __init__(self, config: Config):
        self.config = config
        self._thread_local = threading.local()
        self.base_url = config.api_url.rstrip("/")

    @property
    def session(self) -> requests.Session:
        """Accessor for the current thread's session."""
        return self._get_session()

    def _get_session(self) -> requests.Session:
        """Get or create a thread-local requests.Session."""
        if not hasattr(self._thread_local, "session"):
            self._thread_local.session = self._create_session()
        return self._thread_local.session

    def _create_session(self) -> requests.Session:
        session = requests.Session()
        session.headers.update(
            {
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            }
        )
        if self.config.token:
            session.headers["Authorization"] = f"token {self.config.token}"
        return session

    @staticmethod
    def expand_template(
        template: str, params: dict[str, Any]
    ) -> tuple[str, dict[str, Any]]:
        """Fill ``{name}`` placeholders and return the unused parameters.

        Raises:
            ValueError: If a placeholder has no matching parameter.
        """
        remaining = dict(params)

        def _fill(match: re.Match) -> str:
            name = match.group(1)
            if name not in remaining:
                raise ValueError(
                    f"Missing path parameter '{name}' for {template}"
                )
            value = str(remaining.pop(name))
            safe = "/" if name in _SLASH_PARAMS else ""
            return quote(value, safe=safe)

        return _PLACEHOLDER.sub(_fill, template), remaining

    def request(
        self, verb: str, template: str, **params: Any
    ) -> GitHubResponse:
        """
        Issue one API call.

        Args:
            verb: HTTP method (GET, PUT, POST, DELETE).
            template: Path template such as ``/repos/{owner}/{repo}``.
            **params: Path parameters plus query/body fields.

        Returns:
            GitHubResponse with the status code and decoded JSON body
            (``None`` for empty bodies).

        Raises:
            GitHubApiError: If the API answers with status >= 400.
            requests.RequestException: On network failures.
        """
        verb = verb.upper()
        path, extra = self.expand_template(template, params)
        url = f"{self.base_url}{path}"

        kwargs: dict[str, Any] = {"timeout": (10, 60)}
        if extra:
            if verb == "GET":
                kwargs["params"] = extra
            else:
                kwargs["json"] = extra

        logger.debug("%s %s", verb, path)
        response = self._get_session().request(verb, url, **kwargs)

        data: Any = None
        if response.content:
            try:
                data = response.json()
            except ValueError:
                data = response.text

        if response.status_code >= 400:
            message = (
                data.get("message", "")
                if isinstance(data, dict)
                else str(data or response.reason)
            )
            raise GitHubApiError(
                response.status_code, message, verb=verb, path=path
            )

        return GitHubResponse(status=response.status_code, data=data)

    def validate_connection(self) -> str:
        """
        Check that the configured repository is reachable.

        Returns the repository's full name if successful.
        """
        response = self.request(
            "GET",
            "/repos/{owner}/{repo}",
            owner=self.config.owner,
            repo=self.config.repo,
        )
        data = response.data or {}
        return str(data.get("full_name", ""))
