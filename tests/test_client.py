from unittest.mock import Mock, patch

import pytest
import requests

from vault_publisher.config import Config
from vault_publisher.core.client import GitHubClient, GitHubResponse
from vault_publisher.errors import GitHubApiError


def _response(status=200, payload=None, content=None):
    response = Mock()
    response.status_code = status
    response.reason = "Reason"
    if content is None:
        content = b"" if payload is None else b"{}"
    response.content = content
    response.json.return_value = payload
    response.text = content.decode() if isinstance(content, bytes) else content
    return response


def test_base_url_strips_trailing_slash():
    config = Config(
        owner="o", repo="r", token="t", api_url="https://ghe.example.com/api/v3/"
    )
    assert GitHubClient(config).base_url == "https://ghe.example.com/api/v3"


def test_session_headers(mock_config):
    """Session carries the token and the GitHub media type."""
    session = GitHubClient(mock_config).session
    assert session.headers["Authorization"] == "token ghp_test"
    assert session.headers["Accept"] == "application/vnd.github+json"


def test_session_without_token_has_no_auth_header():
    client = GitHubClient(Config(owner="o", repo="r", token=""))
    assert "Authorization" not in client.session.headers


def test_session_is_reused_within_thread(mock_config):
    client = GitHubClient(mock_config)
    assert client.session is client.session


class TestExpandTemplate:
    def test_fills_placeholders_and_returns_rest(self):
        path, rest = GitHubClient.expand_template(
            "/repos/{owner}/{repo}/contents/{path}",
            {"owner": "octocat", "repo": "garden", "path": "docs/a b.md", "sha": "1"},
        )
        assert path == "/repos/octocat/garden/contents/docs/a%20b.md"
        assert rest == {"sha": "1"}

    def test_slash_quoted_outside_path_params(self):
        path, _ = GitHubClient.expand_template(
            "/repos/{owner}/{repo}/actions/workflows/{workflow_id}/dispatches",
            {"owner": "o", "repo": "r", "workflow_id": "ci/build.yml"},
        )
        assert path == "/repos/o/r/actions/workflows/ci%2Fbuild.yml/dispatches"

    def test_missing_parameter_raises(self):
        with pytest.raises(ValueError, match="Missing path parameter 'repo'"):
            GitHubClient.expand_template("/repos/{owner}/{repo}", {"owner": "o"})


@patch("vault_publisher.core.client.requests.Session.request")
def test_get_sends_query_params(mock_request, mock_config):
    mock_request.return_value = _response(200, {"type": "file", "sha": "abc"})
    client = GitHubClient(mock_config)

    result = client.request(
        "get",
        "/repos/{owner}/{repo}/contents/{path}",
        owner="octocat",
        repo="garden",
        path="docs/a.md",
        ref="main",
    )

    assert result == GitHubResponse(200, {"type": "file", "sha": "abc"})
    args, kwargs = mock_request.call_args
    assert args == (
        "GET",
        "https://api.github.com/repos/octocat/garden/contents/docs/a.md",
    )
    assert kwargs["params"] == {"ref": "main"}
    assert "json" not in kwargs
    assert kwargs["timeout"] == (10, 60)


@patch("vault_publisher.core.client.requests.Session.request")
def test_put_sends_json_body(mock_request, mock_config):
    mock_request.return_value = _response(201, {"content": {"sha": "new"}})
    client = GitHubClient(mock_config)

    result = client.request(
        "PUT",
        "/repos/{owner}/{repo}/contents/{path}",
        owner="octocat",
        repo="garden",
        path="docs/a.md",
        message="Update note a.md",
        content="aGk=",
        branch="main",
    )

    assert result.status == 201
    kwargs = mock_request.call_args[1]
    assert kwargs["json"] == {
        "message": "Update note a.md",
        "content": "aGk=",
        "branch": "main",
    }
    assert "params" not in kwargs


@patch("vault_publisher.core.client.requests.Session.request")
def test_empty_body_gives_none(mock_request, mock_config):
    mock_request.return_value = _response(204)

    result = GitHubClient(mock_config).request(
        "POST",
        "/repos/{owner}/{repo}/actions/workflows/{workflow_id}/dispatches",
        owner="o",
        repo="r",
        workflow_id="ci.yml",
        ref="main",
    )

    assert result == GitHubResponse(204, None)


@patch("vault_publisher.core.client.requests.Session.request")
def test_error_status_raises_with_api_message(mock_request, mock_config):
    mock_request.return_value = _response(404, {"message": "Not Found"})

    with pytest.raises(GitHubApiError) as exc_info:
        GitHubClient(mock_config).request(
            "GET", "/repos/{owner}/{repo}", owner="o", repo="r"
        )

    err = exc_info.value
    assert err.status == 404
    assert err.is_not_found
    assert err.message == "Not Found"
    assert str(err) == "GitHub API error 404 (GET /repos/o/r): Not Found"


@patch("vault_publisher.core.client.requests.Session.request")
def test_non_json_error_body(mock_request, mock_config):
    response = _response(502, content=b"<html>Bad gateway</html>")
    response.json.side_effect = ValueError("not json")
    mock_request.return_value = response

    with pytest.raises(GitHubApiError) as exc_info:
        GitHubClient(mock_config).request(
            "GET", "/repos/{owner}/{repo}", owner="o", repo="r"
        )

    assert exc_info.value.status == 502
    assert "Bad gateway" in exc_info.value.message


@patch("vault_publisher.core.client.requests.Session.request")
def test_network_error_propagates(mock_request, mock_config):
    mock_request.side_effect = requests.ConnectionError("unreachable")

    with pytest.raises(requests.ConnectionError):
        GitHubClient(mock_config).request(
            "GET", "/repos/{owner}/{repo}", owner="o", repo="r"
        )


@patch("vault_publisher.core.client.requests.Session.request")
def test_validate_connection(mock_request, mock_config):
    mock_request.return_value = _response(200, {"full_name": "octocat/garden"})

    assert GitHubClient(mock_config).validate_connection() == "octocat/garden"
    assert mock_request.call_args[0][1].endswith("/repos/octocat/garden")


@pytest.mark.live
def test_live_connection():
    """Requires GITHUB_OWNER, GITHUB_REPO and GITHUB_TOKEN in the environment."""
    from vault_publisher.config import load_config

    config = load_config()
    client = GitHubClient(config)
    assert client.validate_connection().lower() == (
        f"{config.owner}/{config.repo}".lower()
    )
