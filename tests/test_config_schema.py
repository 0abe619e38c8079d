"""Tests for vault_publisher.config_schema -- Pydantic config models."""

import pytest
from pydantic import ValidationError

from vault_publisher.config_schema import (
    GitHubConfig,
    LoggingConfig,
    PublishingConfig,
    UnifiedConfig,
    build_config,
)


class TestPublishingConfig:
    def test_defaults(self):
        settings = PublishingConfig()
        assert settings.share_key == "share"
        assert settings.default_folder == "docs"
        assert settings.placement == "fixed"
        assert settings.transfer_embeds is True
        assert settings.autoclean_excluded == []
        assert settings.workflow_poll_interval == 10.0
        assert settings.workflow_max_wait is None

    def test_placement_restricted(self):
        with pytest.raises(ValidationError):
            PublishingConfig(placement="frontmatter")

    def test_poll_interval_must_be_positive(self):
        with pytest.raises(ValidationError):
            PublishingConfig(workflow_poll_interval=0)

    def test_max_wait_must_be_positive(self):
        with pytest.raises(ValidationError):
            PublishingConfig(workflow_max_wait=-1)

    def test_frozen(self):
        settings = PublishingConfig()
        with pytest.raises(ValidationError):
            settings.default_folder = "site"


class TestGitHubConfig:
    def test_all_optional(self):
        cfg = GitHubConfig()
        assert cfg.owner is None
        assert cfg.debug is False

    def test_dump_drops_nothing(self):
        cfg = GitHubConfig(owner="octocat", repo="garden")
        dumped = {k: v for k, v in cfg.model_dump().items() if v is not None}
        assert dumped == {"owner": "octocat", "repo": "garden", "debug": False}


class TestBuildConfig:
    def test_empty_gives_defaults(self):
        assert build_config({}) == UnifiedConfig()

    def test_sections_parsed(self):
        unified = build_config(
            {
                "github": {"owner": "octocat", "repo": "garden"},
                "publishing": {
                    "placement": "yaml",
                    "root_folder": "site",
                    "autoclean_excluded": ["docs/index.md", "/\\.keep$/"],
                },
                "logging": {"level": "DEBUG", "file": "/tmp/vp.log"},
            }
        )
        assert unified.github.repo == "garden"
        assert unified.publishing.placement == "yaml"
        assert unified.publishing.autoclean_excluded[1] == "/\\.keep$/"
        assert unified.logging == LoggingConfig(level="DEBUG", file="/tmp/vp.log")

    def test_missing_sections_defaulted(self):
        unified = build_config({"github": {"owner": "octocat"}})
        assert unified.publishing == PublishingConfig()

    def test_invalid_section_raises(self):
        with pytest.raises(ValidationError):
            build_config({"publishing": {"transfer_embeds": "sometimes"}})
