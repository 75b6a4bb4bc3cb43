import unittest

from obs_filesystem.models import Config, DirectoryAttributes, FileAttributes, MetaOption


class ConfigTests(unittest.TestCase):
    def test_accepts_known_keys_and_enum_members(self):
        config = Config({MetaOption.CACHE_CONTROL: "no-cache", "visibility": "public"})

        self.assertEqual("no-cache", config.get("CacheControl"))
        self.assertEqual("public", config.get("visibility"))
        self.assertTrue(config.has(MetaOption.CACHE_CONTROL))
        self.assertIsNone(config.get(MetaOption.ACL))
        self.assertEqual("fallback", config.get("mimetype", "fallback"))

    def test_rejects_unknown_keys(self):
        with self.assertRaises(ValueError):
            Config({"Cache-Control": "no-cache"})

    def test_extend_returns_new_config(self):
        config = Config({"ACL": "private"})

        extended = config.extend({"ACL": "public-read", "mimetype": "text/plain"})

        self.assertEqual("private", config.get("ACL"))
        self.assertEqual(Config({"ACL": "public-read", "mimetype": "text/plain"}), extended)


class AttributeVariantTests(unittest.TestCase):
    def test_variants_are_distinguishable(self):
        file_attributes = FileAttributes(path="a.txt")
        directory_attributes = DirectoryAttributes(path="dir")

        self.assertTrue(file_attributes.is_file)
        self.assertFalse(file_attributes.is_dir)
        self.assertTrue(directory_attributes.is_dir)
        self.assertFalse(directory_attributes.is_file)


if __name__ == "__main__":
    unittest.main()
