"""Publish a curated subset of vault notes to GitHub repositories."""

__version__ = "0.4.0"
