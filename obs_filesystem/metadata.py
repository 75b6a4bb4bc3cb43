from __future__ import annotations
"""Maps raw object descriptors onto file and directory attributes."""
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Mapping, Optional

from .models import DirectoryAttributes, ExtraMetadataField, FileAttributes, StorageAttributes
from .prefixer import SEPARATORS, PathPrefixer


def map_object_metadata(
    metadata: Mapping[str, Any],
    prefixer: PathPrefixer,
    path: Optional[str] = None,
) -> StorageAttributes:
    """Build attributes from a listing entry or a ``head_object`` response.

    When ``path`` is omitted it is derived from the descriptor's ``Key`` (or
    ``Prefix``) with the root prefix removed. A path ending in a separator is
    always reported as a directory, whatever size the store declared.
    """
    if path is None:
        path = prefixer.strip_prefix(metadata.get("Key") or metadata.get("Prefix") or "")

    path = path or "/"

    if path[-1] in SEPARATORS:
        return DirectoryAttributes(path=path.rstrip(SEPARATORS))

    file_size = metadata.get("ContentLength")
    return FileAttributes(
        path=path,
        file_size=None if file_size is None else int(file_size),
        last_modified=to_timestamp(metadata.get("LastModified")),
        mime_type=metadata.get("ContentType"),
        extra_metadata=extract_extra_metadata(metadata),
    )


def extract_extra_metadata(metadata: Mapping[str, Any]) -> dict[str, Any]:
    extracted: dict[str, Any] = {}
    for field in ExtraMetadataField:
        value = metadata.get(field.value)
        if value is None or value == "" or value == {}:
            continue
        extracted[field.value] = value
    return extracted


def to_timestamp(value: Any) -> Optional[int]:
    """Convert a ``LastModified`` value to a Unix timestamp."""

    if value is None or value == "":
        return None
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, datetime):
        moment = value
    else:
        text = str(value).strip()
        try:
            moment = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            moment = parsedate_to_datetime(text)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp())
