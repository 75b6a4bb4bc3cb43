import unittest

from obs_filesystem.mime import ExtensionMimeTypeDetector


class ExtensionMimeTypeDetectorTests(unittest.TestCase):
    def test_guesses_from_extension_only(self):
        detector = ExtensionMimeTypeDetector()

        self.assertEqual("text/html", detector.detect_mime_type("root/index.html", b"%PDF-1.7"))
        self.assertEqual("image/png", detector.detect_mime_type("a/b/logo.png", b""))

    def test_unknown_extension_uses_fallback(self):
        self.assertIsNone(ExtensionMimeTypeDetector().detect_mime_type("data.unknownext", b"<html>"))
        self.assertEqual(
            "application/octet-stream",
            ExtensionMimeTypeDetector("application/octet-stream").detect_mime_type("README", b"text"),
        )


if __name__ == "__main__":
    unittest.main()
