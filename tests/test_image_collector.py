from pathlib import Path
from tempfile import TemporaryDirectory
from unittest import TestCase

from comic_encoder.parsers.image_collector import (
    collect_image_files,
    has_image_ext,
    is_supported_for_decoding,
)


class CollectImageFilesTests(TestCase):
    def setUp(self) -> None:
        tmpdir = TemporaryDirectory()
        self.addCleanup(tmpdir.cleanup)
        self.chapter = Path(tmpdir.name) / "Chapter 1"
        (self.chapter / "part 2").mkdir(parents=True)
        (self.chapter / "part 10").mkdir()

        (self.chapter / "part 10" / "1.jpg").write_bytes(b"c")
        (self.chapter / "part 2" / "2.png").write_bytes(b"b")
        (self.chapter / "part 2" / "1.JPG").write_bytes(b"a")
        (self.chapter / "info.txt").write_text("not a page", encoding="utf-8")

    def test_images_are_collected_recursively_in_order(self) -> None:
        self.assertEqual(
            collect_image_files(self.chapter),
            [
                self.chapter / "part 2" / "1.JPG",
                self.chapter / "part 2" / "2.png",
                self.chapter / "part 10" / "1.jpg",
            ],
        )

    def test_symlinked_directories_are_not_followed(self) -> None:
        (self.chapter / "part 2" / "loop").symlink_to(self.chapter, target_is_directory=True)

        images = collect_image_files(self.chapter)

        self.assertEqual(len(images), 3)


class ExtensionTests(TestCase):
    def test_image_extensions(self) -> None:
        self.assertTrue(has_image_ext("a/b.JPEG"))
        self.assertFalse(has_image_ext("a/b.webp"))
        self.assertTrue(has_image_ext("a/b.webp", extended=True))
        self.assertFalse(has_image_ext("a/b"))

    def test_decodable_formats(self) -> None:
        self.assertTrue(is_supported_for_decoding("CBZ"))
        self.assertTrue(is_supported_for_decoding(".pdf"))
        self.assertFalse(is_supported_for_decoding("epub"))
