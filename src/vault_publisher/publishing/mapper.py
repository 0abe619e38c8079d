"""Settings-driven path resolver for published notes and attachments.

Translates a vault document into the repository path it is published
at, using the ``PublishingConfig`` placement settings.

Resolution:

1. **Fixed placement** -- ``<default_folder>/<file name>``.
2. **Frontmatter placement** (``placement: yaml``) -- when the note's
   frontmatter holds ``folder_key``, the path becomes
   ``<root_folder>/<frontmatter folder>/<file name>``; otherwise the
   fixed path is used.
3. **Attachments** -- ``<image_folder>/<file name>``, falling back to
   ``<default_folder>`` when no image folder is set. An attachment's
   path never depends on the note embedding it.

The resolver is pure: it never touches the vault or the network.
"""

from __future__ import annotations

from vault_publisher.config_schema import PublishingConfig
from vault_publisher.publishing.models import LocalDocument


class PathResolver:
    """Map vault documents to remote repository paths.

    Args:
        settings: The publishing section of the configuration.
    """

    def __init__(self, settings: PublishingConfig) -> None:
        self._settings = settings

    def default_path(self, name: str) -> str:
        return self._clean_remote_path(
            f"{self._settings.default_folder}/{name}"
        )

    def resolve_remote_path(self, document: LocalDocument) -> str:
        """Return the repository path a shared note is published at.

        Args:
            document: The note to place.

        Returns:
            Repository-relative path without leading or doubled slashes.
        """
        settings = self._settings
        if settings.placement == "yaml":
            frontmatter = document.frontmatter or {}
            folder = frontmatter.get(settings.folder_key)
            if folder:
                root = settings.root_folder
                if root:
                    root = f"{root}/"
                return self._clean_remote_path(
                    f"{root}{folder}/{document.name}"
                )

        return self.default_path(document.name)

    def resolve_attachment_path(self, attachment: LocalDocument) -> str:
        """Return the repository path for an embedded attachment."""
        if self._settings.image_folder:
            return self._clean_remote_path(
                f"{self._settings.image_folder}/{attachment.name}"
            )
        return self.default_path(attachment.name)

    @staticmethod
    def _clean_remote_path(raw: str) -> str:
        """Collapse repeated slashes and strip leading/trailing ones."""
        while "//" in raw:
            raw = raw.replace("//", "/")
        return raw.strip("/")
