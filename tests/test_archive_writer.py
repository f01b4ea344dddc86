import io
import zipfile
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest import TestCase
from unittest.mock import patch

from rich.console import Console

from comic_encoder.config import EncodingOptions
from comic_encoder.errors import ArchiveIOError, OutputConflictError
from comic_encoder.models.method import CompileMethod, EachMethod
from comic_encoder.parsers.folder_parser import discover_chapters
from comic_encoder.processors.archive_writer import ZIP_TIMESTAMP, build_volume
from comic_encoder.processors.batching import plan_volumes
from comic_encoder.progress.tracker import ProgressTracker


def _tracker() -> ProgressTracker:
    return ProgressTracker(Console(file=io.StringIO()), level="silent")


class BuildVolumeTests(TestCase):
    def setUp(self) -> None:
        tmpdir = TemporaryDirectory()
        self.addCleanup(tmpdir.cleanup)
        self.root = Path(tmpdir.name)

        self.chapters = self.root / "chapters"
        first = self.chapters / "Chapter 1"
        second = self.chapters / "Chapter 2"
        first.mkdir(parents=True)
        second.mkdir(parents=True)

        (first / "1.jpg").write_bytes(b"page one")
        (first / "2.jpg").write_bytes(b"page two")
        (first / "10.jpg").write_bytes(b"page ten")
        (first / "notes.txt").write_text("not a page", encoding="utf-8")
        (second / "a.png").write_bytes(b"page a")

        self.output = self.root / "out"
        self.output.mkdir()

    def _build(self, method=None, **options) -> Path:
        method = method or CompileMethod(2)
        plan = plan_volumes(discover_chapters(self.chapters), method)
        self.tracker = _tracker()
        return build_volume(
            method, EncodingOptions(**options), self.output, plan, plan.volumes[0], self.tracker
        )

    def test_archive_layout(self) -> None:
        path = self._build()

        self.assertEqual(path, self.output / "Volume-1.cbz")
        with zipfile.ZipFile(path) as archive:
            self.assertEqual(
                archive.namelist(),
                [
                    "Vol_1_Chapter_1/",
                    "Vol_1_Chapter_1/Vol_1_Chapter_1_Pic_0.jpg",
                    "Vol_1_Chapter_1/Vol_1_Chapter_1_Pic_1.jpg",
                    "Vol_1_Chapter_1/Vol_1_Chapter_1_Pic_2.jpg",
                    "Vol_1_Chapter_2/",
                    "Vol_1_Chapter_2/Vol_1_Chapter_2_Pic_0.png",
                ],
            )
            self.assertEqual(archive.read("Vol_1_Chapter_1/Vol_1_Chapter_1_Pic_2.jpg"), b"page ten")
            for info in archive.infolist():
                self.assertEqual(info.date_time, ZIP_TIMESTAMP)
                self.assertEqual(info.compress_type, zipfile.ZIP_STORED)
            self.assertTrue(archive.getinfo("Vol_1_Chapter_2/").is_dir())

    def test_no_staging_file_is_left(self) -> None:
        self._build()
        self.assertEqual(sorted(p.name for p in self.output.iterdir()), ["Volume-1.cbz"])

    def test_same_input_gives_identical_archives(self) -> None:
        first = self._build().read_bytes()
        self._build(overwrite=True)
        self.assertEqual((self.output / "Volume-1.cbz").read_bytes(), first)

    def test_each_method_keeps_chapter_names(self) -> None:
        path = self._build(EachMethod())

        self.assertEqual(path, self.output / "Chapter 1.cbz")
        with zipfile.ZipFile(path) as archive:
            self.assertEqual(
                archive.namelist(),
                [
                    "Chapter 1/",
                    "Chapter 1/Chapter 1_Pic_0.jpg",
                    "Chapter 1/Chapter 1_Pic_1.jpg",
                    "Chapter 1/Chapter 1_Pic_2.jpg",
                ],
            )

    def test_existing_file_is_not_overwritten(self) -> None:
        existing = self.output / "Volume-1.cbz"
        existing.write_bytes(b"old")

        with self.assertRaises(OutputConflictError):
            self._build()

        self.assertEqual(existing.read_bytes(), b"old")
        self.assertEqual(sorted(p.name for p in self.output.iterdir()), ["Volume-1.cbz"])

    def test_existing_file_is_overwritten(self) -> None:
        existing = self.output / "Volume-1.cbz"
        existing.write_bytes(b"old")

        self._build(overwrite=True)

        self.assertTrue(zipfile.is_zipfile(existing))

    def test_existing_directory_is_never_replaced(self) -> None:
        (self.output / "Volume-1.cbz").mkdir()
        with self.assertRaises(OutputConflictError):
            self._build(overwrite=True)

    def test_skip_existing(self) -> None:
        existing = self.output / "Volume-1.cbz"
        existing.write_bytes(b"old")

        path = self._build(skip_existing=True)

        self.assertEqual(path, existing)
        self.assertEqual(existing.read_bytes(), b"old")
        self.assertEqual(self.tracker.warnings, 1)

    def test_append_pages_count(self) -> None:
        path = self._build(append_pages_count=True)
        self.assertEqual(path, self.output / "Volume-1 (4 pages).cbz")
        self.assertFalse((self.output / "Volume-1.cbz").exists())

    def test_leftover_staging_file_is_replaced(self) -> None:
        (self.output / "Volume-1.comic-enc-partial").write_bytes(b"garbage")

        path = self._build()

        self.assertTrue(zipfile.is_zipfile(path))
        self.assertFalse((self.output / "Volume-1.comic-enc-partial").exists())
        self.assertEqual(self.tracker.warnings, 1)

    def test_compress_losslessly(self) -> None:
        path = self._build(compress_losslessly=True)

        with zipfile.ZipFile(path) as archive:
            info = archive.getinfo("Vol_1_Chapter_1/Vol_1_Chapter_1_Pic_0.jpg")
            self.assertEqual(info.compress_type, zipfile.ZIP_DEFLATED)
            self.assertEqual(archive.read(info), b"page one")

    def test_extended_image_formats(self) -> None:
        (self.chapters / "Chapter 1" / "3.webp").write_bytes(b"webp page")

        path = self._build(extended_image_formats=True)

        with zipfile.ZipFile(path) as archive:
            names = [name for name in archive.namelist() if name.startswith("Vol_1_Chapter_1/")]
            self.assertEqual(len(names), 5)
            self.assertEqual(archive.read("Vol_1_Chapter_1/Vol_1_Chapter_1_Pic_2.webp"), b"webp page")

    def test_failed_rename_keeps_the_staging_file(self) -> None:
        with patch("comic_encoder.processors.archive_writer.os.replace", side_effect=OSError("rename failed")):
            with self.assertRaises(ArchiveIOError) as ctx:
                self._build()

        staging = self.output / "Volume-1.comic-enc-partial"
        self.assertEqual(ctx.exception.path, self.output / "Volume-1.cbz")
        self.assertIn(str(staging), str(ctx.exception))
        self.assertFalse((self.output / "Volume-1.cbz").exists())
        self.assertTrue(zipfile.is_zipfile(staging))
