from __future__ import annotations
"""Paginated, optionally recursive object listing."""
import logging
from typing import Any, Iterator, Optional

from .models import ListingPage

LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_KEYS = 1000


def iter_listing(
    client,
    bucket: str,
    *,
    prefix: str = "",
    delimiter: Optional[str] = None,
    max_keys: int = DEFAULT_MAX_KEYS,
    marker: str = "",
    recursive: bool = False,
) -> Iterator[dict[str, Any]]:
    """Yield listing entries page by page.

    Common prefixes come first on every page as ``{"Prefix": ...}`` entries,
    followed by the page's objects. With ``recursive`` each common prefix is
    expanded depth-first before the next one is emitted. Remote errors
    propagate to the consumer unchanged.
    """
    page_number = 1
    while True:
        list_params: dict[str, Any] = {
            "Bucket": bucket,
            "Prefix": prefix,
            "Marker": marker,
            "MaxKeys": max_keys,
        }
        if delimiter:
            list_params["Delimiter"] = delimiter

        LOGGER.debug("Listing page %d of '%s' (prefix '%s', marker '%s')", page_number, bucket, prefix, marker)
        page = ListingPage.from_response(client.list_objects(**list_params))

        for common in page.common_prefixes:
            yield {"Prefix": common["Prefix"]}
            if recursive:
                yield from iter_listing(
                    client,
                    bucket,
                    prefix=common["Prefix"],
                    delimiter=delimiter,
                    max_keys=max_keys,
                    recursive=True,
                )

        for entry in page.contents:
            key = entry["Key"]
            if key == prefix and entry.get("Size") == 0:
                continue
            if key.endswith("/"):
                yield {"Prefix": key}
                continue
            yield _file_entry(entry)

        if not page.is_truncated or not page.marker:
            break
        marker = page.marker
        page_number += 1


def _file_entry(entry: dict[str, Any]) -> dict[str, Any]:
    item = {
        "Key": entry["Key"],
        "LastModified": entry.get("LastModified"),
        "ETag": entry.get("ETag"),
        "ContentLength": entry.get("Size"),
        "StorageClass": entry.get("StorageClass"),
    }
    if "Type" in entry:
        item["Type"] = entry["Type"]
    return item
