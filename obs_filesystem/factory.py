from __future__ import annotations
"""Builds adapters from saved connection profiles."""

import logging
from typing import Any, Callable

from .adapter import ObsAdapter
from .client import create_client
from .mime import MimeTypeDetector
from .profiles import ConnectionProfile, ProfileStorage
from .settings import AdapterSettings, SettingsStorage
from .visibility import PortableVisibilityConverter

LOGGER = logging.getLogger(__name__)


class AdapterFactory:
    """Coordinates stored profiles and settings into :class:`ObsAdapter` instances."""

    def __init__(
        self,
        storage: ProfileStorage | None = None,
        settings_storage: SettingsStorage | None = None,
        client_factory: Callable[..., Any] | None = None,
    ):
        self._storage = storage or ProfileStorage()
        self._settings_storage = settings_storage or SettingsStorage()
        self._client_factory = client_factory
        self._profiles: list[ConnectionProfile] = self._storage.load()

    @property
    def settings(self) -> AdapterSettings:
        return self._settings_storage.load()

    def list_profiles(self) -> list[ConnectionProfile]:
        return list(self._profiles)

    def save_profile(self, profile: ConnectionProfile, *, original_name: str | None = None) -> None:
        if original_name and original_name != profile.name:
            self._profiles = [p for p in self._profiles if p.name != original_name]
        self._upsert_profile(profile)
        self._storage.save(self._profiles)

    def delete_profile(self, name: str) -> None:
        before = len(self._profiles)
        self._profiles = [p for p in self._profiles if p.name != name]
        if len(self._profiles) == before:
            raise ValueError(f"Profile '{name}' does not exist")
        self._storage.save(self._profiles)

    def get_profile(self, name: str) -> ConnectionProfile:
        for profile in self._profiles:
            if profile.name == name:
                return profile
        raise ValueError(f"Profile '{name}' does not exist")

    def create_adapter(
        self,
        name: str,
        *,
        mime_type_detector: MimeTypeDetector | None = None,
        options: dict[str, Any] | None = None,
    ) -> ObsAdapter:
        return self.adapter_for_profile(
            self.get_profile(name),
            mime_type_detector=mime_type_detector,
            options=options,
        )

    def adapter_for_profile(
        self,
        profile: ConnectionProfile,
        *,
        mime_type_detector: MimeTypeDetector | None = None,
        options: dict[str, Any] | None = None,
    ) -> ObsAdapter:
        # A CNAME only serves public reads; API calls need the OBS endpoint.
        if profile.is_cname and not profile.internal_endpoint:
            raise ValueError(f"Profile '{profile.name}' uses a CNAME and needs an internal_endpoint")
        settings = self.settings
        LOGGER.debug(
            "Creating adapter for profile '%s' (bucket '%s', endpoint '%s')",
            profile.name,
            profile.bucket,
            profile.signing_endpoint,
        )
        client = create_client(
            endpoint=profile.signing_endpoint,
            access_key=profile.access_key,
            secret_key=profile.secret_key,
            ssl=profile.ssl,
            addressing_style=settings.addressing_style,
            signature_version=settings.signature_version,
            client_factory=self._client_factory,
        )
        return ObsAdapter(
            client,
            bucket=profile.bucket,
            hostname=profile.hostname,
            ssl=profile.ssl,
            is_cname=profile.is_cname,
            internal_endpoint=profile.internal_endpoint,
            prefix=profile.prefix,
            visibility=PortableVisibilityConverter(settings.default_visibility),
            mime_type_detector=mime_type_detector,
            options=options,
            max_keys=settings.max_keys,
            delete_batch_size=settings.delete_batch_size,
        )

    def _upsert_profile(self, profile: ConnectionProfile) -> None:
        for idx, existing in enumerate(self._profiles):
            if existing.name == profile.name:
                self._profiles[idx] = profile
                break
        else:
            self._profiles.append(profile)
