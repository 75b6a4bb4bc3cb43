from __future__ import annotations
"""MIME type detection used when a write does not declare a content type."""
import mimetypes
from typing import Any, Optional, Protocol


class MimeTypeDetector(Protocol):
    def detect_mime_type(self, path: str, contents: Any) -> Optional[str]: ...


class ExtensionMimeTypeDetector:
    """Guesses the MIME type from the key's file extension.

    The contents are never inspected; plug in a sniffing detector where the
    extension cannot be trusted.
    """

    def __init__(self, fallback: Optional[str] = None):
        self._fallback = fallback

    def detect_mime_type(self, path: str, contents: Any) -> Optional[str]:
        mime_type, _encoding = mimetypes.guess_type(path, strict=False)
        return mime_type or self._fallback
