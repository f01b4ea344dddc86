import io
import zipfile
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest import TestCase

from rich.console import Console

from comic_encoder.config import DecodeConfig, EncodeConfig, EncodingOptions
from comic_encoder.errors import ConfigurationError, ResourceNotFoundError
from comic_encoder.models.method import CompileMethod, EachMethod, SingleMethod
from comic_encoder.processors.comic_processor import ComicProcessor
from comic_encoder.processors.encoder import encode
from comic_encoder.progress.tracker import ProgressTracker


def _tracker() -> ProgressTracker:
    return ProgressTracker(Console(file=io.StringIO()), level="silent")


class EncodeTests(TestCase):
    def setUp(self) -> None:
        tmpdir = TemporaryDirectory()
        self.addCleanup(tmpdir.cleanup)
        self.root = Path(tmpdir.name)

        self.chapters = self.root / "My Comic"
        for number in (1, 2, 3, 10, 11):
            chapter = self.chapters / f"Chapter {number}"
            chapter.mkdir(parents=True)
            (chapter / "01.jpg").write_bytes(f"chapter {number} page 1".encode())
            (chapter / "02.jpg").write_bytes(f"chapter {number} page 2".encode())

        self.output = self.root / "out"

    def _encode(self, method, **kwargs) -> list[Path]:
        kwargs.setdefault("output", self.output)
        kwargs.setdefault("create_output_dir", True)
        return encode(EncodeConfig(method=method, input_dir=self.chapters, **kwargs), _tracker())

    def test_compile(self) -> None:
        paths = self._encode(CompileMethod(2))

        self.assertEqual(
            [path.name for path in paths],
            ["Volume-1.cbz", "Volume-2.cbz", "Volume-3.cbz"],
        )
        with zipfile.ZipFile(paths[1]) as archive:
            self.assertEqual(
                archive.read("Vol_2_Chapter_3/Vol_2_Chapter_3_Pic_1.jpg"),
                b"chapter 3 page 2",
            )
            self.assertIn("Vol_2_Chapter_4/", archive.namelist())
        with zipfile.ZipFile(paths[2]) as archive:
            self.assertEqual(
                archive.read("Vol_3_Chapter_5/Vol_3_Chapter_5_Pic_0.jpg"),
                b"chapter 11 page 1",
            )

    def test_compile_with_chapters_range(self) -> None:
        paths = self._encode(CompileMethod(2, append_chapters_range=True), start_chapter=2, end_chapter=4)
        self.assertEqual(
            [path.name for path in paths],
            ["Volume-1 (c1-c2).cbz", "Volume-2 (c3-c3).cbz"],
        )

    def test_each(self) -> None:
        paths = self._encode(EachMethod())
        self.assertEqual(
            [path.name for path in paths],
            ["Chapter 1.cbz", "Chapter 2.cbz", "Chapter 3.cbz", "Chapter 10.cbz", "Chapter 11.cbz"],
        )

    def test_simple_sorting(self) -> None:
        paths = self._encode(EachMethod(), options=EncodingOptions(simple_sorting=True))
        self.assertEqual(
            [path.name for path in paths],
            ["Chapter 1.cbz", "Chapter 10.cbz", "Chapter 11.cbz", "Chapter 2.cbz", "Chapter 3.cbz"],
        )

    def test_single_to_explicit_file(self) -> None:
        target = self.output / "Book.cbz"
        paths = self._encode(SingleMethod(target))

        self.assertEqual(paths, [target])
        with zipfile.ZipFile(target) as archive:
            dirs = [name for name in archive.namelist() if name.endswith("/")]
            self.assertEqual(len(dirs), 5)

    def test_single_output_name_is_used_verbatim(self) -> None:
        target = self.output / "book"
        paths = self._encode(SingleMethod(target))

        self.assertEqual(paths, [target])
        self.assertTrue(zipfile.is_zipfile(target))
        self.assertFalse((self.output / "book.cbz").exists())

    def test_single_default_output(self) -> None:
        paths = encode(EncodeConfig(method=SingleMethod(), input_dir=self.chapters), _tracker())
        self.assertEqual(paths, [self.chapters / "My Comic.cbz"])

    def test_root_chapter(self) -> None:
        chapter = self.chapters / "Chapter 2"
        paths = encode(
            EncodeConfig(method=SingleMethod(), input_dir=chapter, root_chapter=True),
            _tracker(),
        )

        self.assertEqual(paths, [self.chapters / "Chapter 2.cbz"])
        with zipfile.ZipFile(paths[0]) as archive:
            self.assertEqual(
                archive.namelist(),
                [
                    "Vol_1_Chapter_1/",
                    "Vol_1_Chapter_1/Vol_1_Chapter_1_Pic_0.jpg",
                    "Vol_1_Chapter_1/Vol_1_Chapter_1_Pic_1.jpg",
                ],
            )

    def test_dirs_prefix(self) -> None:
        (self.chapters / "extras").mkdir()
        (self.chapters / "extras" / "cover.jpg").write_bytes(b"cover")

        paths = self._encode(EachMethod(), dirs_prefix="Chapter 1")

        self.assertEqual([path.name for path in paths], ["Chapter 1.cbz", "Chapter 10.cbz", "Chapter 11.cbz"])

    def test_nothing_to_do(self) -> None:
        paths = self._encode(CompileMethod(2), start_chapter=20)
        self.assertEqual(paths, [])

    def test_missing_input(self) -> None:
        with self.assertRaises(ResourceNotFoundError):
            encode(EncodeConfig(method=EachMethod(), input_dir=self.root / "missing"), _tracker())

    def test_missing_output_directory(self) -> None:
        with self.assertRaises(ResourceNotFoundError):
            self._encode(EachMethod(), create_output_dir=False)
        self.assertFalse(self.output.exists())

    def test_invalid_configuration_writes_nothing(self) -> None:
        with self.assertRaises(ConfigurationError):
            self._encode(CompileMethod(0))
        with self.assertRaises(ConfigurationError):
            self._encode(EachMethod(), start_chapter=3, end_chapter=2)
        with self.assertRaises(ConfigurationError):
            self._encode(
                EachMethod(),
                options=EncodingOptions(skip_existing=True, append_pages_count=True),
            )
        self.assertFalse(self.output.exists())


class ComicProcessorTests(TestCase):
    def test_produced_files_are_collected(self) -> None:
        with TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            for number in (1, 2):
                chapter = root / "chapters" / f"Chapter {number}"
                chapter.mkdir(parents=True)
                (chapter / "1.jpg").write_bytes(b"page")

            processor = ComicProcessor(Console(file=io.StringIO()), level="silent")
            volumes = processor.encode(EncodeConfig(method=EachMethod(), input_dir=root / "chapters"))
            pages = processor.decode(
                DecodeConfig(input=volumes[0], output=root / "pages", create_output_dir=True)
            )

            self.assertEqual(len(volumes), 2)
            self.assertEqual(processor.produced_files, volumes + pages)
