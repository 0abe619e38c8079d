"""Local vault access: note discovery, encoding-aware reads, embed resolution."""

from .store import FileSystemVault, extract_embeds, read_file_with_encoding

__all__ = [
    "FileSystemVault",
    "extract_embeds",
    "read_file_with_encoding",
]
