"""Tests for frontmatter parsing of local notes and fetched remote files."""

import pytest
import yaml

from vault_publisher.frontmatter import parse_fenced_block, split_frontmatter


class TestSplitFrontmatter:
    def test_mapping_and_body(self):
        fm, body = split_frontmatter("---\nshare: true\ntitle: Rose \n---\nBody\n")
        assert fm == {"share": True, "title": "Rose"}
        assert body == "Body\n"

    def test_no_block(self):
        text = "# Heading\nshare: true\n"
        assert split_frontmatter(text) == (None, text)

    def test_block_must_open_first_line(self):
        text = "\n---\nshare: true\n---\n"
        assert split_frontmatter(text)[0] is None

    def test_unclosed_block(self):
        text = "---\nshare: true\n"
        assert split_frontmatter(text) == (None, text)

    def test_invalid_yaml_is_none(self):
        fm, body = split_frontmatter("---\nshare: [oops\n---\nBody")
        assert fm is None
        assert body == "Body"

    def test_scalar_root_is_none(self):
        assert split_frontmatter("---\njust text\n---\n")[0] is None

    def test_empty_block_is_none(self):
        assert split_frontmatter("---\n---\nBody")[0] is None

    def test_byte_order_mark_ignored(self):
        fm, _ = split_frontmatter("\ufeff---\nshare: true\n---\n")
        assert fm == {"share": True}

    def test_share_string_stays_string(self):
        fm, _ = split_frontmatter("---\nshare: 'true'\n---\n")
        assert fm == {"share": "true"}

    def test_nested_values_trimmed(self):
        fm, _ = split_frontmatter(
            "---\nrepo:\n  owner: ' octocat '\ntags: [' a ', b]\n---\n"
        )
        assert fm == {"repo": {"owner": "octocat"}, "tags": ["a", "b"]}


class TestParseFencedBlock:
    def test_mapping(self):
        assert parse_fenced_block("---\nshare: false\nindex: true\n---\nHome") == {
            "share": False,
            "index": True,
        }

    def test_no_fences(self):
        assert parse_fenced_block("plain body") is None

    def test_single_fence(self):
        assert parse_fenced_block("---\nshare: true") is None

    def test_empty_block(self):
        assert parse_fenced_block("---\n---\nbody") == {}

    def test_non_mapping_raises(self):
        with pytest.raises(ValueError, match="not a mapping"):
            parse_fenced_block("---\n- a\n- b\n---\n")

    def test_invalid_yaml_raises(self):
        with pytest.raises(yaml.YAMLError):
            parse_fenced_block("---\nshare: [oops\n---\n")
