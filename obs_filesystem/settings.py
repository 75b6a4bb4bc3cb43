from __future__ import annotations
"""Adapter settings persistence helpers."""

from dataclasses import asdict, dataclass
import json
import logging
from pathlib import Path

from .client import ADDRESSING_STYLES
from .deletion import DEFAULT_BATCH_SIZE
from .listing import DEFAULT_MAX_KEYS
from .models import Visibility

LOGGER = logging.getLogger(__name__)

# Hard ceiling of the list and bulk delete APIs.
MAX_PAGE_SIZE = 1000


@dataclass
class AdapterSettings:
    """Tunables shared by every adapter built from a profile."""

    max_keys: int = DEFAULT_MAX_KEYS
    delete_batch_size: int = DEFAULT_BATCH_SIZE
    addressing_style: str = "virtual"
    signature_version: str = "s3v4"
    default_visibility: str = Visibility.PUBLIC.value


class SettingsStorage:
    """JSON-backed persistence for :class:`AdapterSettings`."""

    def __init__(self, storage_path: str | Path | None = None):
        if storage_path is None:
            storage_path = Path.home() / ".obs_filesystem_settings.json"
        self._path = Path(storage_path)

    def load(self) -> AdapterSettings:
        if not self._path.exists():
            return AdapterSettings()
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            LOGGER.warning("Ignoring unreadable settings file '%s'", self._path)
            return AdapterSettings()
        if not isinstance(data, dict):
            return AdapterSettings()

        addressing_style = data.get("addressing_style", AdapterSettings.addressing_style)
        if addressing_style not in ADDRESSING_STYLES:
            addressing_style = AdapterSettings.addressing_style
        signature_version = data.get("signature_version")
        if not isinstance(signature_version, str) or not signature_version.strip():
            signature_version = AdapterSettings.signature_version
        default_visibility = data.get("default_visibility")
        if default_visibility not in {visibility.value for visibility in Visibility}:
            default_visibility = AdapterSettings.default_visibility

        return AdapterSettings(
            max_keys=_page_size(data.get("max_keys"), AdapterSettings.max_keys),
            delete_batch_size=_page_size(data.get("delete_batch_size"), AdapterSettings.delete_batch_size),
            addressing_style=addressing_style,
            signature_version=signature_version.strip(),
            default_visibility=default_visibility,
        )

    def save(self, settings: AdapterSettings) -> None:
        payload = asdict(settings)
        payload["max_keys"] = min(max(int(settings.max_keys), 1), MAX_PAGE_SIZE)
        payload["delete_batch_size"] = min(max(int(settings.delete_batch_size), 1), MAX_PAGE_SIZE)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError:
            LOGGER.warning("Could not persist settings to '%s'", self._path)


def _page_size(value: object, default: int) -> int:
    try:
        size = int(value)
    except (TypeError, ValueError):
        return default
    if size <= 0 or size > MAX_PAGE_SIZE:
        return default
    return size
