#!/usr/bin/env python3
"""
Comic Encoder

A command-line tool for converting chapter directories of images into comic
book volumes (CBZ archives), extracting the pages of CBZ / ZIP / PDF comics,
and rebuilding existing comics into normalized volumes.

Usage:
    uv run main.py encode <chapters_dir> --compile 10
    uv run main.py decode <comic.cbz>
    uv run main.py rebuild <comic.pdf>
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

from rich.console import Console

from comic_encoder.config import (
    DecodeConfig,
    EncodeConfig,
    EncodingOptions,
    RebuildConfig,
    Settings,
    load_settings,
)
from comic_encoder.errors import ComicEncoderError
from comic_encoder.models.method import BuildMethod, CompileMethod, EachMethod, SingleMethod
from comic_encoder.processors.comic_processor import ComicProcessor

# Initialize Rich console for output
console = Console()


def positive_int(value: str) -> int:
    """Parse a strictly positive integer argument."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: '{value}'") from None
    if number < 1:
        raise argparse.ArgumentTypeError("must be an integer strictly higher than 0")
    return number


def _add_sorting_arguments(parser: argparse.ArgumentParser) -> None:
    _ = parser.add_argument(
        "-x",
        "--extended-image-formats",
        action="store_true",
        help="Accept image formats that may not be supported by all readers (e.g. TIF / RAW / CR2 files)"
    )

    _ = parser.add_argument(
        "-s",
        "--simple-sorting",
        action="store_true",
        help="Disable natural sorting (plain UTF-8 order, a bit faster but unintuitive)"
    )


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Arguments to parse, defaults to the process arguments

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        description="Convert chapter directories to comic book volumes, and back",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  uv run main.py encode ./chapters --compile 10      # 10 chapters per volume
  uv run main.py encode ./chapters --each -o ./out   # One volume per chapter
  uv run main.py encode ./chapter --single --root-chapter
  uv run main.py decode ./Volume-01.cbz -o ./pages --create-output-dir
  uv run main.py rebuild ./book.pdf
        """
    )

    verbosity = parser.add_mutually_exclusive_group()
    _ = verbosity.add_argument(
        "--silent",
        action="store_const",
        const="silent",
        dest="verbosity",
        help="Do not display any message other than errors"
    )
    _ = verbosity.add_argument(
        "--verbose",
        "-v",
        action="store_const",
        const="verbose",
        dest="verbosity",
        help="Display detailed information"
    )
    _ = verbosity.add_argument(
        "--debug",
        action="store_const",
        const="debug",
        dest="verbosity",
        help="Display extremely detailed information"
    )

    actions = parser.add_subparsers(dest="action", required=True)

    # encode
    encode_parser = actions.add_parser("encode", help="Encode chapter directories to volumes")
    _ = encode_parser.add_argument(
        "input",
        type=Path,
        help="Directory containing the chapter directories"
    )
    methods = encode_parser.add_mutually_exclusive_group(required=True)
    _ = methods.add_argument(
        "--compile",
        type=positive_int,
        metavar="CHAPTERS_PER_VOLUME",
        help="Compile multiple chapters in each volume"
    )
    _ = methods.add_argument(
        "--each",
        action="store_true",
        help="Put each chapter in its own volume"
    )
    _ = methods.add_argument(
        "--single",
        action="store_true",
        help="Put every chapter in a single volume"
    )
    _ = encode_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Output directory (or output file with --single)"
    )
    _ = encode_parser.add_argument(
        "--chapters-suffix",
        action="store_true",
        help="Add the start and end chapter at the end of each volume's file name"
    )
    _ = encode_parser.add_argument(
        "--create-output-dir",
        action="store_true",
        help="Create the output directory if it does not exist yet"
    )
    _ = encode_parser.add_argument(
        "--overwrite",
        action="store_true",
        help="Overwrite existing files instead of failing"
    )
    _ = encode_parser.add_argument(
        "--skip-existing",
        action="store_true",
        help="Skip volumes whose file already exists"
    )
    _ = encode_parser.add_argument(
        "-p",
        "--dirs-prefix",
        help="Only consider chapter directories whose name starts with this prefix"
    )
    _ = encode_parser.add_argument(
        "--start-chapter",
        type=positive_int,
        help="Ignore every chapter before this one (starts at 1)"
    )
    _ = encode_parser.add_argument(
        "--end-chapter",
        type=positive_int,
        help="Ignore every chapter after this one"
    )
    _ = encode_parser.add_argument(
        "--root-chapter",
        action="store_true",
        help="Use the input directory itself as the only chapter"
    )
    _ = encode_parser.add_argument(
        "--show-chapters-path",
        action="store_true",
        help="Show the directory of each chapter put in a volume"
    )
    _ = encode_parser.add_argument(
        "--display-full-names",
        action="store_true",
        help="Do not truncate file names above 50 characters in messages"
    )
    _ = encode_parser.add_argument(
        "--compress-losslessly",
        action="store_true",
        help="Compress losslessly (a lot slower, saves around 5%% of space)"
    )
    _ = encode_parser.add_argument(
        "--append-pages-count",
        action="store_true",
        help="Add the number of pages at the end of each volume's file name"
    )
    _add_sorting_arguments(encode_parser)

    # decode
    decode_parser = actions.add_parser("decode", help="Extract the pages of a comic")
    _ = decode_parser.add_argument(
        "input",
        type=Path,
        help="The comic to decode (.cbz, .zip or .pdf)"
    )
    _ = decode_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Directory where pages will be written (default: the input without extension)"
    )
    _ = decode_parser.add_argument(
        "--create-output-dir",
        action="store_true",
        help="Create the output directory if it does not exist yet"
    )
    _ = decode_parser.add_argument(
        "-i",
        "--extract-images-only",
        action="store_true",
        help="Only extract supported image formats"
    )
    _ = decode_parser.add_argument(
        "--skip-bad-pdf-pages",
        action="store_true",
        help="Continue when some pages of a PDF cannot be extracted"
    )
    _add_sorting_arguments(decode_parser)

    # rebuild
    rebuild_parser = actions.add_parser("rebuild", help="Rebuild a comic into a normalized volume")
    _ = rebuild_parser.add_argument(
        "input",
        type=Path,
        help="The comic to rebuild (.cbz, .zip or .pdf)"
    )
    _ = rebuild_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Path of the rebuilt volume (default: the input with a .cbz extension)"
    )
    _ = rebuild_parser.add_argument(
        "--overwrite",
        action="store_true",
        help="Overwrite the output file if it exists"
    )
    _ = rebuild_parser.add_argument(
        "--temporary-dir",
        type=Path,
        help="Directory used to extract pages (removed afterwards)"
    )
    _ = rebuild_parser.add_argument(
        "-i",
        "--extract-images-only",
        action="store_true",
        help="Only extract supported image formats"
    )
    _ = rebuild_parser.add_argument(
        "--compress-losslessly",
        action="store_true",
        help="Compress losslessly (a lot slower, saves around 5%% of space)"
    )
    _ = rebuild_parser.add_argument(
        "--skip-bad-pdf-pages",
        action="store_true",
        help="Continue when some pages of a PDF cannot be extracted"
    )
    _add_sorting_arguments(rebuild_parser)

    return parser.parse_args(argv)


def build_method(args: argparse.Namespace) -> BuildMethod:
    """Get the build method selected on the command line."""
    if args.compile is not None:
        return CompileMethod(
            chapters_per_volume=args.compile,
            append_chapters_range=args.chapters_suffix,
        )
    if args.each:
        return EachMethod()
    return SingleMethod()


def build_encode_config(args: argparse.Namespace, settings: Settings) -> EncodeConfig:
    """Build the encoding configuration from arguments and environment defaults."""
    return EncodeConfig(
        method=build_method(args),
        input_dir=args.input,
        output=args.output,
        create_output_dir=args.create_output_dir,
        dirs_prefix=args.dirs_prefix,
        start_chapter=args.start_chapter,
        end_chapter=args.end_chapter,
        root_chapter=args.root_chapter,
        options=EncodingOptions(
            overwrite=args.overwrite,
            skip_existing=args.skip_existing,
            append_pages_count=args.append_pages_count,
            extended_image_formats=args.extended_image_formats or settings.extended_image_formats,
            simple_sorting=args.simple_sorting or settings.simple_sorting,
            compress_losslessly=args.compress_losslessly or settings.compress_losslessly,
            display_full_names=args.display_full_names,
            show_chapters_path=args.show_chapters_path,
        ),
    )


def build_decode_config(args: argparse.Namespace, settings: Settings) -> DecodeConfig:
    """Build the decoding configuration from arguments and environment defaults."""
    return DecodeConfig(
        input=args.input,
        output=args.output,
        create_output_dir=args.create_output_dir,
        only_extract_images=args.extract_images_only,
        extended_image_formats=args.extended_image_formats or settings.extended_image_formats,
        simple_sorting=args.simple_sorting or settings.simple_sorting,
        skip_bad_pdf_pages=args.skip_bad_pdf_pages,
    )


def build_rebuild_config(args: argparse.Namespace, settings: Settings) -> RebuildConfig:
    """Build the rebuilding configuration from arguments and environment defaults."""
    return RebuildConfig(
        input=args.input,
        output=args.output,
        overwrite=args.overwrite,
        temporary_dir=args.temporary_dir or settings.temporary_dir,
        only_extract_images=args.extract_images_only,
        extended_image_formats=args.extended_image_formats or settings.extended_image_formats,
        simple_sorting=args.simple_sorting or settings.simple_sorting,
        compress_losslessly=args.compress_losslessly or settings.compress_losslessly,
        skip_bad_pdf_pages=args.skip_bad_pdf_pages,
    )


def run(args: argparse.Namespace, processor: ComicProcessor, settings: Settings) -> None:
    """Run the action selected on the command line.

    Produced files are collected by the processor.
    """
    if args.action == "encode":
        _ = processor.encode(build_encode_config(args, settings))
    elif args.action == "decode":
        _ = processor.decode(build_decode_config(args, settings))
    else:
        _ = processor.rebuild(build_rebuild_config(args, settings))


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the comic encoder.

    Returns:
        Process exit status
    """
    start_time = time.time()

    args = parse_arguments(argv)

    try:
        settings = load_settings()
    except ComicEncoderError as e:
        console.print(f"[red]Error: {e}[/red]")
        return 1

    level: str = args.verbosity or settings.verbosity
    verbose_mode = level in ("verbose", "debug")

    processor = ComicProcessor(console=console, level=level)
    tracker = processor.progress_tracker

    if level != "silent":
        console.print("[bold blue]Comic Encoder[/bold blue]")
    if verbose_mode:
        console.print("[dim]Verbose mode enabled[/dim]")

    try:
        run(args, processor, settings)
    except KeyboardInterrupt:
        tracker.display_warning("Processing interrupted by user.")
        return 1
    except ComicEncoderError as e:
        tracker.display_error(str(e), e)
        return 1
    except Exception as e:
        tracker.display_error(f"Critical error during processing: {e}")
        if verbose_mode:
            import traceback
            console.print(f"[dim]{traceback.format_exc()}[/dim]")
        return 1

    tracker.display_run_summary(args.action, processor.produced_files, time.time() - start_time)
    return 0


if __name__ == "__main__":
    sys.exit(main())
