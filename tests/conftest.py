"""Shared pytest fixtures for vault-publisher tests."""

from __future__ import annotations

import base64
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pytest
from dotenv import load_dotenv

from vault_publisher.config import Config
from vault_publisher.config_schema import PublishingConfig
from vault_publisher.core.client import GitHubClient, GitHubResponse
from vault_publisher.errors import GitHubApiError
from vault_publisher.publishing.models import RepoAttribution
from vault_publisher.vault import FileSystemVault

load_dotenv()


def pytest_addoption(parser):
    """Add custom CLI options for test filtering."""
    parser.addoption(
        "--run-live",
        action="store_true",
        default=False,
        help="Run tests that require a live GitHub repository",
    )


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "live: mark test as requiring a live GitHub repository"
    )


def pytest_collection_modifyitems(config, items):
    """Skip live tests unless --run-live is passed."""
    if config.getoption("--run-live"):
        return
    skip_live = pytest.mark.skip(reason="need --run-live option to run")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


class FakeGitHubClient:
    """Minimal GitHubClient replacement for testing.

    Simulates the contents, trees and actions endpoints over an in-memory
    ``{"owner/repo": {path: bytes}}`` store and records every call.
    """

    def __init__(self, files: Optional[Dict[str, Dict[str, bytes]]] = None) -> None:
        self.files: Dict[str, Dict[str, bytes]] = {
            repo: dict(entries) for repo, entries in (files or {}).items()
        }
        self.shas: Dict[tuple, str] = {}
        self.calls: List[tuple] = []
        self.runs: List[dict] = []
        self.failures: Dict[tuple, Exception] = {}
        self.delete_status = 200
        self._counter = 0
        for repo, entries in self.files.items():
            for path in entries:
                self.shas[(repo, path)] = self._next_sha()

    def _next_sha(self) -> str:
        self._counter += 1
        return f"sha{self._counter}"

    def sha_of(self, repo: str, path: str) -> str:
        return self.shas[(repo, path)]

    def calls_for(self, verb: str) -> List[tuple]:
        return [call for call in self.calls if call[0] == verb]

    def fail(self, verb: str, path: str, exc: Exception) -> None:
        """Make the next matching call raise *exc*."""
        self.failures[(verb, path)] = exc

    def request(self, verb: str, template: str, **params: Any) -> GitHubResponse:
        path, extra = GitHubClient.expand_template(template, params)
        self.calls.append((verb, path, extra))

        exc = self.failures.pop((verb, params.get("path", path)), None)
        if exc is not None:
            raise exc

        repo = f"{params.get('owner')}/{params.get('repo')}"
        store = self.files.setdefault(repo, {})

        if template.endswith("/contents/{path}"):
            return self._contents(verb, repo, store, params["path"], extra, path)
        if template.endswith("/git/trees/{tree_sha}"):
            tree = [
                {"path": p, "type": "blob", "sha": self.shas[(repo, p)]}
                for p in sorted(store)
            ]
            dirs = sorted({p.rsplit("/", 1)[0] for p in store if "/" in p})
            tree += [{"path": d, "type": "tree", "sha": f"tree-{d}"} for d in dirs]
            return GitHubResponse(200, {"tree": tree, "truncated": False})
        if template.endswith("/dispatches"):
            return GitHubResponse(204, None)
        if template.endswith("/actions/runs"):
            run = self.runs.pop(0) if len(self.runs) > 1 else (self.runs or [{}])[0]
            return GitHubResponse(200, {"workflow_runs": [run] if run else []})
        if template == "/repos/{owner}/{repo}":
            return GitHubResponse(200, {"full_name": repo})
        raise AssertionError(f"Unexpected call {verb} {path}")

    def _contents(self, verb, repo, store, file_path, body, url_path):
        key = (repo, file_path)
        if verb == "GET":
            if file_path not in store:
                raise GitHubApiError(404, "Not Found", verb, url_path)
            return GitHubResponse(
                200,
                {
                    "type": "file",
                    "path": file_path,
                    "sha": self.shas[key],
                    "content": base64.b64encode(store[file_path]).decode("ascii"),
                },
            )
        if verb == "PUT":
            if file_path in store and body.get("sha") != self.shas[key]:
                raise GitHubApiError(409, "sha does not match", verb, url_path)
            created = file_path not in store
            store[file_path] = base64.b64decode(body["content"])
            self.shas[key] = self._next_sha()
            return GitHubResponse(201 if created else 200, {"content": {"sha": self.shas[key]}})
        if verb == "DELETE":
            if file_path not in store:
                raise GitHubApiError(404, "Not Found", verb, url_path)
            if self.delete_status == 200:
                del store[file_path]
                del self.shas[key]
            return GitHubResponse(self.delete_status, None)
        raise AssertionError(f"Unexpected verb {verb}")


@pytest.fixture
def mock_config():
    """Create a Config instance for testing."""
    return Config(owner="octocat", repo="garden", token="ghp_test")


@pytest.fixture
def default_repo() -> RepoAttribution:
    return RepoAttribution(owner="octocat", repo="garden", branch="main")


@pytest.fixture
def settings() -> PublishingConfig:
    return PublishingConfig(default_folder="docs", image_folder="assets")


@pytest.fixture
def fake_client() -> Callable[..., FakeGitHubClient]:
    """Factory fixture: ``fake_client({"octocat/garden": {"docs/a.md": b"..."}})``."""
    return FakeGitHubClient


@pytest.fixture
def write_vault(tmp_path: Path) -> Callable[[Dict[str, Any]], FileSystemVault]:
    """Factory fixture writing ``{relative_path: str | bytes}`` into a vault."""

    def _write(files: Dict[str, Any]) -> FileSystemVault:
        root = tmp_path / "vault"
        root.mkdir(exist_ok=True)
        for rel, content in files.items():
            target = root / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                target.write_bytes(content)
            else:
                target.write_text(content, encoding="utf-8")
        return FileSystemVault(root)

    return _write
