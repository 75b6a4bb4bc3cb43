from __future__ import annotations
"""Conversion between portable visibility values and canned ACLs."""
from typing import Any, Iterable, Mapping, Protocol

from .models import Visibility

ACL_PUBLIC_READ = "public-read"
ACL_PRIVATE = "private"

# Grantee URIs that denote "anyone": OBS uses ``Everyone``, S3 the AllUsers group.
EVERYONE_GRANTEE_URIS = frozenset(
    {
        "everyone",
        "http://acs.amazonaws.com/groups/global/allusers",
    }
)


class VisibilityConverter(Protocol):
    def visibility_to_acl(self, visibility: Visibility | str) -> str: ...

    def acl_to_visibility(self, acl: str) -> Visibility: ...

    def default_for_directories(self) -> Visibility: ...


class PortableVisibilityConverter:
    """Maps public/private onto the ``public-read``/``private`` canned ACLs."""

    def __init__(self, default_for_directories: Visibility | str = Visibility.PUBLIC):
        self._default_for_directories = Visibility(default_for_directories)

    def visibility_to_acl(self, visibility: Visibility | str) -> str:
        try:
            normalized = Visibility(visibility)
        except ValueError:
            raise ValueError(f"Invalid visibility '{visibility}', expected 'public' or 'private'") from None
        if normalized is Visibility.PUBLIC:
            return ACL_PUBLIC_READ
        return ACL_PRIVATE

    def acl_to_visibility(self, acl: str) -> Visibility:
        if str(acl or "").strip().lower() == ACL_PUBLIC_READ:
            return Visibility.PUBLIC
        return Visibility.PRIVATE

    def default_for_directories(self) -> Visibility:
        return self._default_for_directories


def grants_to_acl(grants: Iterable[Mapping[str, Any]] | None) -> str:
    """Collapse an object ACL grant list into the matching canned ACL."""

    for grant in grants or []:
        grantee = grant.get("Grantee") or {}
        uri = str(grantee.get("URI") or "").lower()
        permission = str(grant.get("Permission") or "").lower()
        if uri in EVERYONE_GRANTEE_URIS and permission == "read":
            return ACL_PUBLIC_READ
    return ACL_PRIVATE
