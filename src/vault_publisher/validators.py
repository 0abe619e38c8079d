"""
Input validation functions for vault_publisher.

Checks remote paths and payload sizes before they are sent to the
GitHub contents API.
"""

# The contents API rejects files above 100 MB; base64 inflates by 4/3.
MAX_CONTENT_BYTES = 100 * 1024 * 1024


# ---------------------------------------------------------------------------
# Error message formatting helpers
# ---------------------------------------------------------------------------


def format_validation_error(field_name: str, reason: str) -> str:
    """
    Generate consistent error message for validation failures.

    Args:
        field_name: Human-readable field name (e.g., "Remote path")
        reason: Description of validation failure (e.g., "cannot be empty")

    Returns:
        Formatted error message string
    """
    return f"{field_name} {reason}"


def validate_remote_path(path: str) -> tuple[bool, str]:
    """
    Validate a repository-relative path.

    Args:
        path: The path to validate

    Returns:
        Tuple of (is_valid, error_message).
        Returns (True, "") if valid, (False, reason) if invalid.

    Validation rules:
        - Cannot be empty or whitespace-only
        - Cannot start with '/'
        - Cannot contain '..' segments
        - Cannot have empty path segments (e.g., 'docs//note.md')
    """
    if not path or not path.strip():
        return (
            False,
            format_validation_error("Remote path", "cannot be empty"),
        )

    if path.startswith("/"):
        return (
            False,
            format_validation_error(
                "Remote path", "must be relative to the repository root"
            ),
        )

    if ".." in path.split("/"):
        return (
            False,
            format_validation_error("Remote path", "cannot contain '..'"),
        )

    if "//" in path:
        return (
            False,
            format_validation_error(
                "Remote path", "cannot have empty path segments"
            ),
        )

    return (True, "")


def validate_content(
    content: str, max_size: int = MAX_CONTENT_BYTES
) -> tuple[bool, str]:
    """
    Validate base64-encoded file content.

    Empty content is allowed: an empty note is a legitimate file.

    Args:
        content: The encoded content to validate
        max_size: Maximum size in bytes

    Returns:
        Tuple of (is_valid, error_message).
    """
    if len(content) > max_size:
        return (
            False,
            format_validation_error(
                "Content", f"exceeds maximum size of {max_size} bytes"
            ),
        )

    return (True, "")
