from __future__ import annotations
"""Data models for storage attributes, listing pages and per-call options."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Union


class Visibility(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"


class MetaOption(str, Enum):
    """Per-call options forwarded to the remote write calls."""

    CACHE_CONTROL = "CacheControl"
    EXPIRES = "Expires"
    SSE_KMS_KEY_ID = "SSEKMSKeyId"
    METADATA_DIRECTIVE = "MetadataDirective"
    ACL = "ACL"
    CONTENT_TYPE = "ContentType"
    CONTENT_DISPOSITION = "ContentDisposition"
    CONTENT_LANGUAGE = "ContentLanguage"
    CONTENT_ENCODING = "ContentEncoding"


class ExtraMetadataField(str, Enum):
    STORAGE_CLASS = "StorageClass"
    ETAG = "ETag"
    VERSION_ID = "VersionId"
    METADATA = "Metadata"


OPTION_VISIBILITY = "visibility"
OPTION_MIMETYPE = "mimetype"
OPTION_CONTENT_LENGTH = "ContentLength"

CONFIG_KEYS = frozenset(
    [option.value for option in MetaOption]
    + [OPTION_VISIBILITY, OPTION_MIMETYPE, OPTION_CONTENT_LENGTH]
)


@dataclass(frozen=True)
class FileAttributes:
    """Attributes of a single stored object."""

    path: str
    file_size: Optional[int] = None
    last_modified: Optional[int] = None
    mime_type: Optional[str] = None
    visibility: Optional[Visibility] = None
    extra_metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def is_file(self) -> bool:
        return True

    @property
    def is_dir(self) -> bool:
        return False


@dataclass(frozen=True)
class DirectoryAttributes:
    """A virtual directory derived from a common prefix or placeholder key."""

    path: str

    @property
    def is_file(self) -> bool:
        return False

    @property
    def is_dir(self) -> bool:
        return True


StorageAttributes = Union[FileAttributes, DirectoryAttributes]


@dataclass
class ListingPage:
    """One page of a ``list_objects`` round-trip."""

    marker: Optional[str] = None
    common_prefixes: list[dict[str, Any]] = field(default_factory=list)
    contents: list[dict[str, Any]] = field(default_factory=list)
    is_truncated: bool = False

    @classmethod
    def from_response(cls, response: Mapping[str, Any]) -> "ListingPage":
        contents = list(response.get("Contents") or [])
        common_prefixes = list(response.get("CommonPrefixes") or [])
        marker = response.get("NextMarker")
        if not marker:
            # S3 only returns NextMarker when a delimiter was sent.
            last_prefix = common_prefixes[-1]["Prefix"] if common_prefixes else ""
            last_key = contents[-1]["Key"] if contents else ""
            marker = max(last_prefix, last_key) or None
        return cls(
            marker=marker,
            common_prefixes=common_prefixes,
            contents=contents,
            is_truncated=response.get("IsTruncated") is True,
        )


class Config:
    """Per-call configuration restricted to the known option keys."""

    def __init__(self, options: Mapping[str, Any] | None = None):
        values: dict[str, Any] = {}
        for key, value in (options or {}).items():
            name = key.value if isinstance(key, Enum) else key
            if name not in CONFIG_KEYS:
                raise ValueError(f"Unknown config option '{name}'")
            values[name] = value
        self._options = values

    def get(self, key: str | Enum, default: Any = None) -> Any:
        name = key.value if isinstance(key, Enum) else key
        return self._options.get(name, default)

    def has(self, key: str | Enum) -> bool:
        name = key.value if isinstance(key, Enum) else key
        return name in self._options

    def extend(self, options: Mapping[str, Any]) -> "Config":
        return Config({**self._options, **options})

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Config):
            return NotImplemented
        return self._options == other._options

    def __repr__(self) -> str:
        return f"Config({self._options!r})"
