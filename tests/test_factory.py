import tempfile
import unittest
from datetime import timedelta
from pathlib import Path
from types import SimpleNamespace

from fake_obs import FakeObsClient

from obs_filesystem.adapter import ObsAdapter
from obs_filesystem.factory import AdapterFactory
from obs_filesystem.profiles import ConnectionProfile
from obs_filesystem.settings import AdapterSettings, SettingsStorage


class FakeProfileStorage:
    def __init__(self, profiles=None):
        self.profiles = list(profiles or [])
        self.saved = []

    def load(self):
        return list(self.profiles)

    def save(self, profiles):
        self.saved.append(list(profiles))


class FakeEvents:
    def register(self, *args, **kwargs):
        pass


class RecordingClientFactory:
    def __init__(self):
        self.calls = []
        self.clients = []

    def __call__(self, *args, **kwargs):
        self.calls.append(kwargs)
        client = FakeObsClient(endpoint_host=kwargs["endpoint_url"].split("://", 1)[1])
        client.meta = SimpleNamespace(events=FakeEvents())
        self.clients.append(client)
        return client


def make_profile(name="alpha", **overrides):
    params = {
        "name": name,
        "hostname": "obs.example.com",
        "access_key": "access",
        "secret_key": "secret",
        "bucket": "bucket-one",
        "internal_endpoint": "obs-internal.example.com",
        "prefix": "root",
    }
    params.update(overrides)
    return ConnectionProfile(**params)


class AdapterFactoryTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.settings_storage = SettingsStorage(Path(self._tmp.name) / "settings.json")

    def tearDown(self):
        self._tmp.cleanup()

    def test_create_adapter_uses_profile_and_settings(self):
        self.settings_storage.save(AdapterSettings(max_keys=100, addressing_style="path"))
        client_factory = RecordingClientFactory()
        factory = AdapterFactory(
            storage=FakeProfileStorage([make_profile()]),
            settings_storage=self.settings_storage,
            client_factory=client_factory,
        )

        adapter = factory.create_adapter("alpha")

        self.assertIsInstance(adapter, ObsAdapter)
        self.assertEqual("bucket-one", adapter.bucket)
        self.assertEqual("bucket-one.obs.example.com", adapter.domain)
        self.assertEqual("https://bucket-one.obs.example.com/root/a.txt", adapter.get_url("a.txt"))
        call = client_factory.calls[0]
        self.assertEqual("https://obs-internal.example.com", call["endpoint_url"])
        self.assertEqual("access", call["aws_access_key_id"])
        self.assertEqual({"addressing_style": "path"}, call["config"].s3)

    def test_cname_profile_signs_against_internal_endpoint(self):
        client_factory = RecordingClientFactory()
        profile = make_profile(
            "cdn",
            hostname="cdn.example.com",
            is_cname=True,
            internal_endpoint="obs.example.com",
            prefix="",
        )
        factory = AdapterFactory(
            storage=FakeProfileStorage([profile]),
            settings_storage=self.settings_storage,
            client_factory=client_factory,
        )

        adapter = factory.create_adapter("cdn")
        url = adapter.get_temporary_url("a.txt", timedelta(seconds=300))

        self.assertEqual("https://obs.example.com", client_factory.calls[0]["endpoint_url"])
        self.assertEqual("cdn.example.com", adapter.domain)
        self.assertTrue(url.startswith("https://cdn.example.com/a.txt?"), url)
        self.assertEqual("https://cdn.example.com/a.txt", adapter.get_url("a.txt"))

    def test_cname_profile_without_internal_endpoint_is_rejected(self):
        client_factory = RecordingClientFactory()
        profile = make_profile("cdn", hostname="cdn.example.com", is_cname=True, internal_endpoint="")
        factory = AdapterFactory(
            storage=FakeProfileStorage([profile]),
            settings_storage=self.settings_storage,
            client_factory=client_factory,
        )

        with self.assertRaises(ValueError):
            factory.create_adapter("cdn")
        self.assertEqual([], client_factory.calls)

    def test_default_visibility_setting_applies_to_new_directories(self):
        self.settings_storage.save(AdapterSettings(default_visibility="private"))
        client_factory = RecordingClientFactory()
        factory = AdapterFactory(
            storage=FakeProfileStorage([make_profile(prefix="")]),
            settings_storage=self.settings_storage,
            client_factory=client_factory,
        )

        factory.create_adapter("alpha").create_directory("reports")

        call = client_factory.clients[0].put_object_calls[0]
        self.assertEqual("reports/", call["Key"])
        self.assertEqual("private", call["ACL"])

    def test_unknown_profile_raises(self):
        factory = AdapterFactory(storage=FakeProfileStorage(), settings_storage=self.settings_storage)

        with self.assertRaises(ValueError):
            factory.create_adapter("missing")

    def test_save_profile_replaces_renamed_entry(self):
        storage = FakeProfileStorage([make_profile("alpha")])
        factory = AdapterFactory(storage=storage, settings_storage=self.settings_storage)

        factory.save_profile(make_profile("beta"), original_name="alpha")

        self.assertEqual(["beta"], [profile.name for profile in factory.list_profiles()])
        self.assertEqual(["beta"], [profile.name for profile in storage.saved[-1]])

    def test_save_profile_updates_existing(self):
        storage = FakeProfileStorage([make_profile("alpha")])
        factory = AdapterFactory(storage=storage, settings_storage=self.settings_storage)

        factory.save_profile(make_profile("alpha", bucket="bucket-two"))

        self.assertEqual("bucket-two", factory.get_profile("alpha").bucket)
        self.assertEqual(1, len(factory.list_profiles()))

    def test_delete_profile(self):
        storage = FakeProfileStorage([make_profile("alpha"), make_profile("beta")])
        factory = AdapterFactory(storage=storage, settings_storage=self.settings_storage)

        factory.delete_profile("alpha")

        self.assertEqual(["beta"], [profile.name for profile in factory.list_profiles()])
        with self.assertRaises(ValueError):
            factory.delete_profile("alpha")


if __name__ == "__main__":
    unittest.main()
