import pytest

from vault_publisher.validators import (
    format_validation_error,
    validate_content,
    validate_remote_path,
)


def test_format_validation_error():
    assert format_validation_error("Remote path", "cannot be empty") == (
        "Remote path cannot be empty"
    )


@pytest.mark.parametrize(
    "path",
    ["docs/a.md", "a.md", "docs/assets/pic.png", "docs/..hidden.md"],
)
def test_valid_remote_paths(path):
    assert validate_remote_path(path) == (True, "")


@pytest.mark.parametrize(
    "path,reason",
    [
        ("", "cannot be empty"),
        ("   ", "cannot be empty"),
        ("/docs/a.md", "must be relative"),
        ("docs/../a.md", "cannot contain '..'"),
        ("docs//a.md", "empty path segments"),
    ],
)
def test_invalid_remote_paths(path, reason):
    is_valid, message = validate_remote_path(path)
    assert not is_valid
    assert reason in message


def test_content_within_limit():
    assert validate_content("aGk=") == (True, "")
    assert validate_content("") == (True, "")


def test_content_over_limit():
    is_valid, message = validate_content("a" * 11, max_size=10)
    assert not is_valid
    assert "exceeds maximum size of 10 bytes" in message
