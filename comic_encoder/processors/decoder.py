"""Extract the pages of a comic archive or PDF to a directory."""

from __future__ import annotations

import shutil
import time
import zipfile
from io import BytesIO
from pathlib import Path, PurePosixPath

from PIL import Image
from pypdf import PdfReader
from pypdf.errors import PyPdfError

from comic_encoder.config import DecodeConfig
from comic_encoder.errors import (
    ArchiveIOError,
    PdfPageError,
    ResourceNotFoundError,
    UnsupportedFormatError,
)
from comic_encoder.models.page import ExtractedPage
from comic_encoder.parsers.image_collector import has_image_ext, is_supported_for_decoding
from comic_encoder.parsers.natsort import natural_path_key
from comic_encoder.processors.naming import decimal_digits
from comic_encoder.progress.tracker import ProgressTracker

TEMPORARY_PAGE_PREFIX = "___tmp_pic_"

JPEG_MAGIC = b"\xff\xd8\xff"


def resolve_output_dir(config: DecodeConfig) -> Path:
    """Get the directory pages are extracted to, creating it if allowed.

    Raises:
        ResourceNotFoundError: If the output directory is missing and may not
            be created, or is a file
        ArchiveIOError: If the output directory cannot be created
    """
    if config.output is None:
        output = config.input.with_suffix("")
        create = True
    else:
        output = config.output
        create = config.create_output_dir

    if output.exists():
        if not output.is_dir():
            raise ResourceNotFoundError("Output directory is a file", path=output)
        return output

    if not create:
        raise ResourceNotFoundError("Output directory was not found", path=output)

    try:
        output.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ArchiveIOError("Failed to create the output directory", path=output) from e
    return output


def _sort_extracted(pages: list[ExtractedPage], simple_sorting: bool) -> list[ExtractedPage]:
    if simple_sorting:
        return sorted(pages, key=lambda page: page.path_in_archive)
    return sorted(
        pages, key=lambda page: (natural_path_key(page.path_in_archive), page.path_in_archive)
    )


def extract_zip(
    input_path: Path, output: Path, config: DecodeConfig, tracker: ProgressTracker
) -> list[Path]:
    """
    Extract the files of a ZIP / CBZ archive as sequentially numbered pages.

    Entries are first copied to temporary files, then renamed once every
    entry has been read, since the final numbering depends on the sorted
    order and the total number of pages.

    Args:
        input_path: The archive
        output: Directory to extract the pages to
        config: Decoding configuration
        tracker: Console reporting

    Returns:
        list[Path]: Paths of the extracted pages, in page order

    Raises:
        ArchiveIOError: If the archive is invalid or a file cannot be written
    """
    pages: list[ExtractedPage] = []

    try:
        archive = zipfile.ZipFile(input_path)
    except (OSError, zipfile.BadZipFile) as e:
        raise ArchiveIOError("Failed to open the ZIP archive", path=input_path) from e

    with archive:
        entries = archive.infolist()
        for index, entry in enumerate(entries, 1):
            if entry.is_dir():
                continue

            name = PurePosixPath(entry.filename)
            if config.only_extract_images and not has_image_ext(name, config.extended_image_formats):
                tracker.display_debug(f"Ignoring file {index}/{len(entries)} based on extension")
                continue

            extension = name.suffix[1:] or None
            extracted_path = output / f"{TEMPORARY_PAGE_PREFIX}{len(pages)}"

            tracker.display_verbose(f"Extracting file {index} out of {len(entries)}...")
            try:
                with archive.open(entry) as source, extracted_path.open("wb") as target:
                    shutil.copyfileobj(source, target)
            except (OSError, zipfile.BadZipFile) as e:
                raise ArchiveIOError(
                    f"Failed to extract '{entry.filename}' from the archive", path=extracted_path
                ) from e

            pages.append(
                ExtractedPage(
                    path_in_archive=entry.filename,
                    extracted_path=extracted_path,
                    extension=extension,
                )
            )

    tracker.display_debug("Sorting pages...")
    pages = _sort_extracted(pages, config.simple_sorting)

    width = decimal_digits(len(pages))
    extracted: list[Path] = []

    tracker.display_verbose("Renaming pictures...")
    for number, page in enumerate(pages, 1):
        target_name = f"{number:0{width}d}"
        if page.extension is not None:
            target_name += f".{page.extension}"
        target = output / target_name

        tracker.display_debug(f"Renaming picture {number}/{len(pages)}...")
        try:
            page.extracted_path.replace(target)
        except OSError as e:
            raise ArchiveIOError(
                f"Failed to rename temporary file '{page.extracted_path}'", path=target
            ) from e
        extracted.append(target)

    return extracted


def _jpeg_bytes(image_file) -> bytes:
    """Get the JPEG encoding of an image extracted by pypdf."""
    if image_file.data[:3] == JPEG_MAGIC:
        return image_file.data

    image: Image.Image = image_file.image
    if image.mode not in ("RGB", "L"):
        image = image.convert("RGB")
    buffer = BytesIO()
    image.save(buffer, format="JPEG")
    return buffer.getvalue()


def extract_pdf(
    input_path: Path,
    output: Path,
    config: DecodeConfig,
    tracker: ProgressTracker,
    prefix: str = "",
) -> list[Path]:
    """
    Extract every raster image of a PDF as sequentially numbered JPEG pages.

    Images are taken in page order, then in their order within the page.

    Args:
        input_path: The PDF file
        output: Directory to extract the pages to
        config: Decoding configuration
        tracker: Console reporting
        prefix: Prefix of the summary message

    Returns:
        list[Path]: Paths of the extracted pages, in page order

    Raises:
        ArchiveIOError: If the PDF cannot be opened or a page cannot be written
        PdfPageError: If a page cannot be read and bad pages are not skipped
    """
    try:
        reader = PdfReader(str(input_path))
        pdf_pages = list(reader.pages)
    except (OSError, PyPdfError) as e:
        raise ArchiveIOError("Failed to open the PDF file", path=input_path) from e

    tracker.display_verbose("Looking for images in the provided PDF...")

    images: list[bytes] = []
    for number, pdf_page in enumerate(pdf_pages, 1):
        tracker.display_debug(f"Counting images from page {number}...")
        try:
            page_images = [_jpeg_bytes(image_file) for image_file in pdf_page.images]
        except (PyPdfError, OSError, ValueError, KeyError) as e:
            if not config.skip_bad_pdf_pages:
                raise PdfPageError(f"Failed to read page {number} of the PDF", path=input_path) from e
            tracker.display_warning(f"Skipping page {number} of the PDF: {e}")
            continue
        images.extend(page_images)

    tracker.display_info(f"{prefix}Extracting {len(images)} images from PDF...")

    width = decimal_digits(len(images))
    extracted: list[Path] = []
    with tracker.track_pages("Extracting pages", len(images)) as progress:
        for number, data in enumerate(images, 1):
            target = output / f"{number:0{width}d}.jpg"
            tracker.display_debug(f"Extracting page {number}/{len(images)}...")
            try:
                target.write_bytes(data)
            except OSError as e:
                raise ArchiveIOError(f"Failed to write image {number} of the PDF", path=target) from e
            extracted.append(target)
            progress.update()

    return extracted


def decode(
    config: DecodeConfig, tracker: ProgressTracker | None = None, is_rebuilding: bool = False
) -> list[Path]:
    """
    Extract the pages of a comic to a directory.

    Args:
        config: Decoding configuration
        tracker: Console reporting
        is_rebuilding: Prefix messages as a step of a rebuild

    Returns:
        list[Path]: Paths of the extracted pages, in page order

    Raises:
        ResourceNotFoundError: If the input or the output directory is missing
        UnsupportedFormatError: If the input's format cannot be decoded
        ArchiveIOError: If reading the input or writing a page fails
        PdfPageError: If a PDF page cannot be read and bad pages are not skipped
    """
    tracker = tracker or ProgressTracker()
    input_path = config.input

    if not input_path.exists():
        raise ResourceNotFoundError("Input file was not found", path=input_path)
    if not input_path.is_file():
        raise ResourceNotFoundError("Input file is a directory", path=input_path)

    ext = input_path.suffix[1:]
    if not is_supported_for_decoding(ext):
        raise UnsupportedFormatError(f"Unsupported format '{ext}'", path=input_path)

    prefix = "===> " if is_rebuilding else ""
    output = resolve_output_dir(config)
    started = time.perf_counter()

    if ext.lower() == "pdf":
        tracker.display_verbose("Matched input format: PDF")
        pages = extract_pdf(input_path, output, config, tracker, prefix)
    else:
        tracker.display_verbose("Matched input format: ZIP / CBZ")
        pages = extract_zip(input_path, output, config, tracker)

    elapsed = time.perf_counter() - started
    tracker.display_success(f"{prefix}Extracted {len(pages)} pages in {elapsed:.3f} s!")
    return pages
