from __future__ import annotations
"""Maps virtual paths to storage keys under a root prefix."""
import re

SEPARATORS = "\\/"


def normalize_path(path: str, separator: str = "/") -> str:
    """Strip leading separators and collapse repeated ones."""

    collapsed = re.sub(r"[\\/]{2,}", separator, path)
    return collapsed.lstrip(SEPARATORS)


class PathPrefixer:
    def __init__(self, prefix: str = "", separator: str = "/"):
        self._separator = separator
        prefix = prefix.rstrip(SEPARATORS)
        self._prefix = f"{prefix}{separator}" if prefix else ""

    @property
    def prefix(self) -> str:
        return self._prefix

    def prefix_path(self, path: str) -> str:
        return self._prefix + normalize_path(path, self._separator)

    def prefix_directory_path(self, path: str) -> str:
        prefixed = self.prefix_path(path)
        if prefixed in ("", self._separator):
            return prefixed
        return prefixed.rstrip(SEPARATORS) + self._separator

    def strip_prefix(self, key: str) -> str:
        if self._prefix and key.startswith(self._prefix):
            return key[len(self._prefix):]
        return key

    def strip_directory_prefix(self, key: str) -> str:
        return self.strip_prefix(key).rstrip(SEPARATORS)
