import io
import os
import tempfile
import unittest
from pathlib import Path

from blog_backend.errors import MissingFile
from blog_backend.uploads import UploadStore, extension_for


class ExtensionTests(unittest.TestCase):
    def test_extension_is_text_after_last_dot(self):
        self.assertEqual(extension_for("cover.png"), "png")
        self.assertEqual(extension_for("holiday.photo.JPG"), "JPG")

    def test_names_without_extension(self):
        self.assertEqual(extension_for("README"), "")
        self.assertEqual(extension_for("archive."), "")
        self.assertEqual(extension_for(""), "")

    def test_directories_in_name_are_ignored(self):
        self.assertEqual(extension_for("../../etc/passwd"), "")
        self.assertEqual(extension_for("some.dir/file"), "")
        self.assertEqual(extension_for("C:\\pics\\cat.gif"), "gif")


class UploadStoreTests(unittest.TestCase):
    def setUp(self):
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.root = Path(tmp.name) / "uploads"
        self.store = UploadStore(self.root)

    def test_store_renames_with_original_extension(self):
        stored = self.store.store(io.BytesIO(b"image-bytes"), "cat.jpeg")
        path = Path(stored)
        self.assertEqual(path.parent, self.root)
        self.assertEqual(path.suffix, ".jpeg")
        self.assertEqual(path.read_bytes(), b"image-bytes")
        # Only the renamed file is left behind.
        self.assertEqual(os.listdir(self.root), [path.name])

    def test_store_without_extension_keeps_temporary_name(self):
        stored = Path(self.store.store(io.BytesIO(b"x"), "noext"))
        self.assertEqual(stored.suffix, "")
        self.assertEqual(len(stored.name), 32)

    def test_each_upload_gets_a_unique_name(self):
        first = self.store.store(io.BytesIO(b"1"), "a.png")
        second = self.store.store(io.BytesIO(b"2"), "a.png")
        self.assertNotEqual(first, second)

    def test_missing_file(self):
        with self.assertRaises(MissingFile):
            self.store.store(None, "a.png")
        with self.assertRaises(MissingFile):
            self.store.store(io.BytesIO(b"x"), "")


if __name__ == "__main__":
    unittest.main()
