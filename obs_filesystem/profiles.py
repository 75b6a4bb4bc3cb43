from __future__ import annotations
"""Connection profile models and persistence."""
from dataclasses import dataclass
import json
import logging
from pathlib import Path

import keyring
from keyring.errors import KeyringError

LOGGER = logging.getLogger(__name__)


@dataclass
class ConnectionProfile:
    """Represents a saved bucket connection."""

    name: str
    hostname: str
    access_key: str
    secret_key: str
    bucket: str
    ssl: bool = True
    is_cname: bool = False
    internal_endpoint: str = ""
    prefix: str = ""

    @property
    def signing_endpoint(self) -> str:
        return self.internal_endpoint or self.hostname


class KeychainStore:
    """Encapsulates OS keychain access for secrets."""

    def __init__(self, service_name: str = "obs-filesystem"):
        self._service_name = service_name

    def get_secret(self, profile_name: str) -> str:
        if not profile_name:
            return ""
        try:
            return keyring.get_password(self._service_name, profile_name) or ""
        except KeyringError:
            LOGGER.warning("Keychain lookup failed for profile '%s'", profile_name)
            return ""

    def set_secret(self, profile_name: str, secret_key: str) -> None:
        if not profile_name:
            return
        if not secret_key:
            self.delete_secret(profile_name)
            return
        try:
            keyring.set_password(self._service_name, profile_name, secret_key)
        except KeyringError:
            LOGGER.warning("Could not store secret for profile '%s'", profile_name)

    def delete_secret(self, profile_name: str) -> None:
        if not profile_name:
            return
        try:
            keyring.delete_password(self._service_name, profile_name)
        except KeyringError:
            return


class ProfileStorage:
    """JSON-backed store for connection profiles; secrets live in the keychain."""

    def __init__(self, storage_path: str | Path | None = None, keychain: KeychainStore | None = None):
        if storage_path is None:
            storage_path = Path.home() / ".obs_filesystem_connections.json"
        self._path = Path(storage_path)
        self._keychain = keychain or KeychainStore()

    def load(self) -> list[ConnectionProfile]:
        if not self._path.exists():
            return []
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            LOGGER.warning("Ignoring unreadable profile file '%s'", self._path)
            return []

        profiles: list[ConnectionProfile] = []
        sanitized: list[dict[str, object]] = []
        saw_plaintext = False
        for entry in data:
            try:
                name = entry["name"]
                secret_key = entry.get("secret_key", "")
                if secret_key:
                    saw_plaintext = True
                    self._keychain.set_secret(name, secret_key)
                else:
                    secret_key = self._keychain.get_secret(name)
                profile = ConnectionProfile(
                    name=name,
                    hostname=entry["hostname"],
                    access_key=entry["access_key"],
                    secret_key=secret_key,
                    bucket=entry["bucket"],
                    ssl=bool(entry.get("ssl", True)),
                    is_cname=bool(entry.get("is_cname", False)),
                    internal_endpoint=entry.get("internal_endpoint") or "",
                    prefix=entry.get("prefix") or "",
                )
            except (KeyError, TypeError):
                continue
            profiles.append(profile)
            sanitized.append(_serialize(profile))
        if saw_plaintext:
            self._write_data(sanitized)
        return profiles

    def save(self, profiles: list[ConnectionProfile]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        data = []
        for profile in profiles:
            self._keychain.set_secret(profile.name, profile.secret_key)
            data.append(_serialize(profile))
        existing_names = self._load_profile_names()
        current_names = {profile.name for profile in profiles}
        for name in existing_names - current_names:
            self._keychain.delete_secret(name)
        self._write_data(data)

    def _load_profile_names(self) -> set[str]:
        if not self._path.exists():
            return set()
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return set()
        names = set()
        for entry in data:
            name = entry.get("name")
            if isinstance(name, str) and name:
                names.add(name)
        return names

    def _write_data(self, data: list[dict[str, object]]) -> None:
        self._path.write_text(json.dumps(data, indent=2), encoding="utf-8")


def _serialize(profile: ConnectionProfile) -> dict[str, object]:
    return {
        "name": profile.name,
        "hostname": profile.hostname,
        "access_key": profile.access_key,
        "bucket": profile.bucket,
        "ssl": profile.ssl,
        "is_cname": profile.is_cname,
        "internal_endpoint": profile.internal_endpoint,
        "prefix": profile.prefix,
    }
