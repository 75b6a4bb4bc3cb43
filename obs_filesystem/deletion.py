from __future__ import annotations
"""Recursive removal of every object under a directory prefix."""
import logging

from .errors import TreeDeletionError
from .listing import DEFAULT_MAX_KEYS, iter_listing

LOGGER = logging.getLogger(__name__)

# Service limit for a single DeleteObjects request.
DEFAULT_BATCH_SIZE = 1000


def collect_tree_keys(client, bucket: str, directory_key: str, *, max_keys: int = DEFAULT_MAX_KEYS) -> list[str]:
    """Return every key under ``directory_key``, descendants first, marker last."""

    listing = iter_listing(client, bucket, prefix=directory_key, max_keys=max_keys)
    keys = [entry.get("Key") or entry["Prefix"] for entry in listing]
    keys.reverse()
    if directory_key:
        keys.append(directory_key)
    return keys


def delete_tree(
    client,
    bucket: str,
    directory_key: str,
    *,
    max_keys: int = DEFAULT_MAX_KEYS,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> list[str]:
    keys = collect_tree_keys(client, bucket, directory_key, max_keys=max_keys)
    batch_size = max(int(batch_size), 1)
    LOGGER.debug("Deleting %d key(s) under '%s' in bucket '%s'", len(keys), directory_key, bucket)

    failed: list[str] = []
    for start in range(0, len(keys), batch_size):
        batch = keys[start:start + batch_size]
        response = client.delete_objects(
            Bucket=bucket,
            Delete={"Objects": [{"Key": key} for key in batch], "Quiet": True},
        )
        failed.extend(error.get("Key", "") for error in (response or {}).get("Errors", []))

    if failed:
        raise TreeDeletionError(failed)
    return keys
