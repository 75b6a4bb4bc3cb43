from __future__ import annotations
"""Filesystem adapter mapping file operations onto an OBS bucket."""
from contextlib import contextmanager
from datetime import datetime, timedelta
import logging
from typing import Any, BinaryIO, Callable, Iterator, Mapping, Union
from urllib.parse import quote

from botocore.exceptions import ClientError

from .client import APPEND_POSITION_PARAM
from .deletion import DEFAULT_BATCH_SIZE, delete_tree
from .errors import (
    CopyError,
    CreateDirectoryError,
    DeleteError,
    DirectoryExistenceCheckError,
    ExistenceCheckError,
    FilesystemOperationError,
    ListContentsError,
    MoveError,
    PublicUrlError,
    ReadError,
    RetrieveMetadataError,
    SetVisibilityError,
    TemporaryUrlError,
    TreeDeletionError,
    WriteError,
    remote_message,
    status_code,
)
from .listing import DEFAULT_MAX_KEYS, iter_listing
from .metadata import map_object_metadata
from .mime import ExtensionMimeTypeDetector, MimeTypeDetector
from .models import (
    OPTION_CONTENT_LENGTH,
    OPTION_MIMETYPE,
    OPTION_VISIBILITY,
    Config,
    FileAttributes,
    MetaOption,
    StorageAttributes,
    Visibility,
)
from .prefixer import SEPARATORS, PathPrefixer
from .visibility import PortableVisibilityConverter, VisibilityConverter, grants_to_acl

LOGGER = logging.getLogger(__name__)

ConfigLike = Union[Config, Mapping[str, Any], None]

SIGNED_URL_METHODS = {
    "GET": "get_object",
    "PUT": "put_object",
    "HEAD": "head_object",
    "DELETE": "delete_object",
}


class ObsAdapter:
    """Implements the filesystem operations against a single OBS bucket."""

    def __init__(
        self,
        client,
        bucket: str,
        hostname: str,
        ssl: bool = True,
        is_cname: bool = False,
        internal_endpoint: str = "",
        prefix: str = "",
        visibility: VisibilityConverter | None = None,
        mime_type_detector: MimeTypeDetector | None = None,
        options: Mapping[str, Any] | None = None,
        max_keys: int = DEFAULT_MAX_KEYS,
        delete_batch_size: int = DEFAULT_BATCH_SIZE,
    ):
        self._client = client
        self._bucket = bucket
        self._hostname = hostname
        self._ssl = ssl
        self._is_cname = is_cname
        self._internal_endpoint = internal_endpoint or hostname
        self._prefixer = PathPrefixer(prefix)
        self._visibility = visibility or PortableVisibilityConverter()
        self._mime_type_detector = mime_type_detector or ExtensionMimeTypeDetector()
        self._options: dict[str, Any] = dict(options or {})
        self._max_keys = max_keys
        self._delete_batch_size = delete_batch_size
        self._domain = hostname if is_cname else f"{bucket}.{hostname}"

    @property
    def bucket(self) -> str:
        return self._bucket

    @property
    def domain(self) -> str:
        return self._domain

    def file_exists(self, path: str) -> bool:
        key = self._prefixer.prefix_path(path)
        try:
            response = self._client.head_object(Bucket=self._bucket, Key=key)
        except ClientError as exc:
            status = status_code(exc)
            if status is not None and (status // 100 == 2 or status == 404):
                return status == 200
            LOGGER.debug("Existence check for '%s' failed with status %s", key, status)
            raise ExistenceCheckError(path, remote_message(exc)) from exc
        except Exception as exc:
            raise ExistenceCheckError(path) from exc
        return _response_status(response) == 200

    def directory_exists(self, path: str) -> bool:
        with self._failures(lambda reason: DirectoryExistenceCheckError(path, reason)):
            response = self._client.list_objects(
                Bucket=self._bucket,
                Delimiter="/",
                Marker="",
                MaxKeys=1,
                Prefix=self._prefixer.prefix_directory_path(path),
            )
            return bool(response.get("Contents")) or bool(response.get("CommonPrefixes"))

    def write(self, path: str, contents: Union[str, bytes], config: ConfigLike = None) -> None:
        self._upload(path, contents, config)

    def write_stream(self, path: str, contents: BinaryIO, config: ConfigLike = None) -> None:
        self._upload(path, contents, config)

    def read(self, path: str) -> bytes:
        with self._failures(lambda reason: ReadError(path, reason)):
            response = self._client.get_object(Bucket=self._bucket, Key=self._prefixer.prefix_path(path))
            return response["Body"].read()

    def read_stream(self, path: str):
        """Return the response's streaming body; the caller owns closing it."""

        with self._failures(lambda reason: ReadError(path, reason)):
            response = self._client.get_object(Bucket=self._bucket, Key=self._prefixer.prefix_path(path))
            return response["Body"]

    def delete(self, path: str) -> None:
        with self._failures(lambda reason: DeleteError(path, reason)):
            self._client.delete_object(Bucket=self._bucket, Key=self._prefixer.prefix_path(path))

    def delete_directory(self, path: str) -> None:
        """Delete every object below ``path`` plus the directory marker.

        The removal is not atomic: a failing batch leaves already deleted keys
        deleted.
        """
        dirname = (self._prefixer.prefix_path(path).rstrip(SEPARATORS) + "/").lstrip(SEPARATORS)
        with self._failures(lambda reason: DeleteError(path, reason)):
            delete_tree(
                self._client,
                self._bucket,
                dirname,
                max_keys=self._max_keys,
                batch_size=self._delete_batch_size,
            )

    def create_directory(self, path: str, config: ConfigLike = None) -> None:
        """Write the zero-byte ``dir/`` marker.

        Without an explicit visibility or ACL the marker gets the converter's
        directory default.
        """
        with self._failures(lambda reason: CreateDirectoryError(path, reason or "Unknown")):
            config = _as_config(config)
            acl = MetaOption.ACL.value
            if not (config.has(OPTION_VISIBILITY) or config.has(acl) or acl in self._options):
                config = config.extend({OPTION_VISIBILITY: self._visibility.default_for_directories()})
            options = {**self._options, **self._options_from_config(config)}
            self._client.put_object(
                Bucket=self._bucket,
                Key=self._prefixer.prefix_directory_path(path),
                Body=b"",
                **_without_copy_options(options),
            )

    def set_visibility(self, path: str, visibility: Visibility | str) -> None:
        with self._failures(lambda reason: SetVisibilityError(path, reason)):
            self._client.put_object_acl(
                Bucket=self._bucket,
                Key=self._prefixer.prefix_path(path),
                ACL=self._visibility.visibility_to_acl(visibility),
            )

    def visibility(self, path: str) -> FileAttributes:
        with self._failures(lambda reason: RetrieveMetadataError(path, "visibility", reason)):
            acl = self._client.get_object_acl(Bucket=self._bucket, Key=self._prefixer.prefix_path(path))
        visibility = self._visibility.acl_to_visibility(grants_to_acl(acl.get("Grants")))
        return FileAttributes(path=path, visibility=visibility)

    def mime_type(self, path: str) -> FileAttributes:
        attributes = self._fetch_file_metadata(path, "mime_type")
        if attributes.mime_type is None:
            raise RetrieveMetadataError(path, "mime_type")
        return attributes

    def last_modified(self, path: str) -> FileAttributes:
        attributes = self._fetch_file_metadata(path, "last_modified")
        if attributes.last_modified is None:
            raise RetrieveMetadataError(path, "last_modified")
        return attributes

    def file_size(self, path: str) -> FileAttributes:
        attributes = self._fetch_file_metadata(path, "file_size")
        if attributes.file_size is None:
            raise RetrieveMetadataError(path, "file_size")
        return attributes

    def list_contents(self, path: str = "", deep: bool = False) -> Iterator[StorageAttributes]:
        """Lazily list files and directories under ``path``.

        Failures surface while iterating, as :class:`ListContentsError`.
        """
        prefix = self._prefixer.prefix_path(path).strip(SEPARATORS)
        prefix = f"{prefix}/" if prefix else ""
        listing = iter_listing(
            self._client,
            self._bucket,
            prefix=prefix,
            delimiter=None if deep else "/",
            max_keys=self._max_keys,
        )
        try:
            for item in listing:
                yield map_object_metadata(item, self._prefixer)
        except ClientError as exc:
            raise ListContentsError(path, deep, remote_message(exc)) from exc
        except Exception as exc:
            raise ListContentsError(path, deep) from exc

    def move(self, source: str, destination: str, config: ConfigLike = None) -> None:
        """Copy then delete; a failed delete leaves both objects in place."""

        with self._failures(lambda reason: MoveError(source, destination, reason)):
            self.copy(source, destination, config)
            self.delete(source)

    def copy(self, source: str, destination: str, config: ConfigLike = None) -> None:
        with self._failures(lambda reason: CopyError(source, destination, reason)):
            visibility = self.visibility(source).visibility
            options = self._get_options(
                {MetaOption.ACL.value: self._visibility.visibility_to_acl(visibility)},
                config,
            )
            self._client.copy_object(
                Bucket=self._bucket,
                CopySource={"Bucket": self._bucket, "Key": self._prefixer.prefix_path(source)},
                Key=self._prefixer.prefix_path(destination),
                **options,
            )

    def append_file(self, path: str, file: BinaryIO, position: int, config: ConfigLike = None) -> None:
        """Append an open file's contents at ``position`` (appendable buckets only)."""

        with self._failures(lambda reason: WriteError(path, reason or "Unknown")):
            key = self._prefixer.prefix_path(path)
            options = self._with_detected_mime_type(key, file, self._get_options(self._options, config))
            self._client.put_object(
                Bucket=self._bucket,
                Key=key,
                Body=file,
                **{APPEND_POSITION_PARAM: position},
                **_without_copy_options(options),
            )

    def append_object(self, path: str, content: Union[str, bytes], position: int, config: ConfigLike = None) -> None:
        with self._failures(lambda reason: WriteError(path, reason or "Unknown")):
            options = self._get_options(self._options, config)
            self._client.put_object(
                Bucket=self._bucket,
                Key=self._prefixer.prefix_path(path),
                Body=content,
                **{APPEND_POSITION_PARAM: position},
                **_without_copy_options(options),
            )

    def get_url(self, path: str) -> str:
        """Return the public URL of ``path``.

        The root prefix is applied and the key is URL-quoted, so the URL
        addresses the stored object rather than the raw ``path`` text.
        """
        with self._failures(lambda reason: PublicUrlError(path, reason)):
            scheme = "https" if self._ssl else "http"
            return f"{scheme}://{self._domain}/{quote(self._prefixer.prefix_path(path))}"

    def get_temporary_url(
        self,
        path: str,
        expiration: datetime | timedelta | int,
        options: Mapping[str, Any] | None = None,
    ) -> str:
        """Return a presigned URL valid until ``expiration``.

        ``options["Method"]`` selects the HTTP method (GET by default); every
        other option is passed through as a request parameter, for example
        ``ResponseContentDisposition``.
        """
        extra = dict(options or {})
        with self._failures(lambda reason: TemporaryUrlError(path, reason)):
            method = str(extra.pop("Method", "GET")).strip().upper()
            if method not in SIGNED_URL_METHODS:
                raise ValueError(f"method must be one of {', '.join(SIGNED_URL_METHODS)}")
            expires_in = _seconds_until(expiration)
            if expires_in <= 0:
                raise ValueError("expiration must be in the future")

            url = self._client.generate_presigned_url(
                SIGNED_URL_METHODS[method],
                Params={"Bucket": self._bucket, "Key": self._prefixer.prefix_path(path), **extra},
                ExpiresIn=expires_in,
                HttpMethod=method,
            )
            if self._internal_endpoint == self._hostname:
                return url
            return url.replace(f"{self._bucket}.{self._internal_endpoint}", self._domain, 1)

    def _upload(self, path: str, body: Any, config: ConfigLike) -> None:
        with self._failures(lambda reason: WriteError(path, reason or "Unknown")):
            key = self._prefixer.prefix_path(path)
            options = self._with_detected_mime_type(key, body, self._get_options(self._options, config))
            LOGGER.debug("Uploading '%s' to bucket '%s'", key, self._bucket)
            self._client.put_object(
                Bucket=self._bucket,
                Key=key,
                Body=body,
                **_without_copy_options(options),
            )

    def _with_detected_mime_type(self, key: str, body: Any, options: dict[str, Any]) -> dict[str, Any]:
        content_type = MetaOption.CONTENT_TYPE.value
        if _is_empty(body) or content_type in options:
            return options
        mime_type = self._mime_type_detector.detect_mime_type(key, body)
        if mime_type:
            options[content_type] = mime_type
        return options

    def _fetch_file_metadata(self, path: str, metadata_type: str) -> FileAttributes:
        with self._failures(lambda reason: RetrieveMetadataError(path, metadata_type, reason)):
            response = self._client.head_object(Bucket=self._bucket, Key=self._prefixer.prefix_path(path))
            attributes = map_object_metadata(response, self._prefixer, path)
        if not isinstance(attributes, FileAttributes):
            raise RetrieveMetadataError(path, metadata_type)
        return attributes

    def _get_options(self, options: Mapping[str, Any] | None = None, config: ConfigLike = None) -> dict[str, Any]:
        merged = {**self._options, **(options or {})}
        if config is None:
            return merged
        config = _as_config(config)
        merged.update(self._options_from_config(config))
        for key in (MetaOption.CONTENT_TYPE.value, OPTION_CONTENT_LENGTH):
            value = config.get(key)
            if value:
                merged[key] = value
        return merged

    def _options_from_config(self, config: Config) -> dict[str, Any]:
        options: dict[str, Any] = {}
        for option in MetaOption:
            if config.has(option):
                options[option.value] = config.get(option)

        visibility = config.get(OPTION_VISIBILITY)
        if visibility:
            options[MetaOption.ACL.value] = self._visibility.visibility_to_acl(visibility)

        mimetype = config.get(OPTION_MIMETYPE)
        if mimetype:
            options[MetaOption.CONTENT_TYPE.value] = mimetype
        return options

    @contextmanager
    def _failures(self, build_error: Callable[[str], FilesystemOperationError]):
        try:
            yield
        except ClientError as exc:
            error = build_error(remote_message(exc))
            LOGGER.debug("%s", error)
            raise error from exc
        except (FilesystemOperationError, TreeDeletionError) as exc:
            error = build_error(getattr(exc, "reason", None) or str(exc))
            LOGGER.debug("%s", error)
            raise error from exc
        except Exception as exc:
            error = build_error("")
            LOGGER.debug("%s (%s)", error, exc)
            raise error from exc


def _as_config(config: ConfigLike) -> Config:
    if config is None:
        return Config()
    if isinstance(config, Config):
        return config
    return Config(config)


def _without_copy_options(options: Mapping[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in options.items() if key != MetaOption.METADATA_DIRECTIVE.value}


def _is_empty(body: Any) -> bool:
    return isinstance(body, (str, bytes, bytearray)) and len(body) == 0


def _response_status(response: Mapping[str, Any]) -> int:
    return int((response or {}).get("ResponseMetadata", {}).get("HTTPStatusCode", 200))


def _seconds_until(expiration: datetime | timedelta | int) -> int:
    if isinstance(expiration, timedelta):
        return int(round(expiration.total_seconds()))
    if isinstance(expiration, (int, float)):
        return int(expiration)
    now = datetime.now(expiration.tzinfo) if expiration.tzinfo else datetime.now()
    return int(round((expiration - now).total_seconds()))
