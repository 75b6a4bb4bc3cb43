from __future__ import annotations
"""Failure kinds raised by the adapter, one per operation category."""
from typing import Optional

from botocore.exceptions import ClientError


class FilesystemOperationError(RuntimeError):
    """Base class for every failure raised at the adapter boundary."""

    operation = "operate on"

    def __init__(self, location: str, reason: str = ""):
        self.location = location
        self.reason = reason
        message = f"Unable to {self.operation} location: {location}."
        if reason:
            message = f"{message} {reason}"
        super().__init__(message)


class ExistenceCheckError(FilesystemOperationError):
    operation = "check existence for"


class DirectoryExistenceCheckError(FilesystemOperationError):
    operation = "check directory existence for"


class WriteError(FilesystemOperationError):
    operation = "write file at"


class ReadError(FilesystemOperationError):
    operation = "read file from"


class DeleteError(FilesystemOperationError):
    operation = "delete file at"


class CreateDirectoryError(FilesystemOperationError):
    operation = "create directory at"


class SetVisibilityError(FilesystemOperationError):
    operation = "set visibility for"


class PublicUrlError(FilesystemOperationError):
    operation = "generate public url for"


class TemporaryUrlError(FilesystemOperationError):
    operation = "generate temporary url for"


class RetrieveMetadataError(FilesystemOperationError):
    def __init__(self, location: str, metadata_type: str = "", reason: str = ""):
        self.metadata_type = metadata_type
        self.operation = f"retrieve the {metadata_type} for file at" if metadata_type else "retrieve metadata for"
        super().__init__(location, reason)


class ListContentsError(FilesystemOperationError):
    def __init__(self, location: str, deep: bool, reason: str = ""):
        self.deep = deep
        self.operation = "list contents (deep) at" if deep else "list contents at"
        super().__init__(location, reason)


class _TransferError(FilesystemOperationError):
    def __init__(self, source: str, destination: str, reason: str = ""):
        self.source = source
        self.destination = destination
        super().__init__(source, reason)
        message = f"Unable to {self.operation} from {source} to {destination}."
        if reason:
            message = f"{message} {reason}"
        self.args = (message,)


class MoveError(_TransferError):
    operation = "move file"


class CopyError(_TransferError):
    operation = "copy file"


class TreeDeletionError(RuntimeError):
    """Raised when a bulk delete reports keys it could not remove."""

    def __init__(self, failed_keys: list[str]):
        self.failed_keys = failed_keys
        super().__init__(f"Bulk delete failed for {len(failed_keys)} key(s): {', '.join(failed_keys)}")


def status_code(exc: ClientError) -> Optional[int]:
    response = getattr(exc, "response", None) or {}
    status = response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    if status is None:
        code = response.get("Error", {}).get("Code", "")
        status = int(code) if str(code).isdigit() else None
    return int(status) if status is not None else None


def remote_message(exc: ClientError) -> str:
    response = getattr(exc, "response", None) or {}
    error = response.get("Error", {})
    return error.get("Message") or error.get("Code") or ""
