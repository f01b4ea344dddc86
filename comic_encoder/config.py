"""Configuration for the encoding, decoding and rebuilding actions."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from comic_encoder.errors import ConfigurationError
from comic_encoder.models.method import BuildMethod, SingleMethod

VERBOSITY_LEVELS = ("silent", "normal", "verbose", "debug")

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_flag(name: str) -> bool:
    """Read a boolean flag from the environment."""
    return os.getenv(name, "").strip().lower() in _TRUE_VALUES


@dataclass
class Settings:
    """Defaults read from the environment (and the `.env` file)."""

    simple_sorting: bool = False
    compress_losslessly: bool = False
    extended_image_formats: bool = False
    temporary_dir: Path | None = None
    verbosity: str = "normal"


def load_settings() -> Settings:
    """Load default settings from environment variables.

    Recognized variables are COMIC_ENCODER_SIMPLE_SORTING,
    COMIC_ENCODER_COMPRESS_LOSSLESSLY, COMIC_ENCODER_EXTENDED_IMAGE_FORMATS,
    COMIC_ENCODER_TEMP_DIR and COMIC_ENCODER_VERBOSITY.

    Returns:
        Settings: Defaults to apply before command-line flags

    Raises:
        ConfigurationError: If COMIC_ENCODER_VERBOSITY has an unknown value
    """
    _ = load_dotenv()

    temp_dir = os.getenv("COMIC_ENCODER_TEMP_DIR")
    verbosity = os.getenv("COMIC_ENCODER_VERBOSITY", "normal").strip().lower() or "normal"
    if verbosity not in VERBOSITY_LEVELS:
        raise ConfigurationError(
            f"Invalid COMIC_ENCODER_VERBOSITY '{verbosity}', "
            + f"expected one of: {', '.join(VERBOSITY_LEVELS)}"
        )

    return Settings(
        simple_sorting=_env_flag("COMIC_ENCODER_SIMPLE_SORTING"),
        compress_losslessly=_env_flag("COMIC_ENCODER_COMPRESS_LOSSLESSLY"),
        extended_image_formats=_env_flag("COMIC_ENCODER_EXTENDED_IMAGE_FORMATS"),
        temporary_dir=Path(temp_dir) if temp_dir else None,
        verbosity=verbosity,
    )


@dataclass
class EncodingOptions:
    """Options shared by every way of writing volumes."""

    overwrite: bool = False
    skip_existing: bool = False
    append_pages_count: bool = False
    extended_image_formats: bool = False
    simple_sorting: bool = False
    compress_losslessly: bool = False
    display_full_names: bool = False
    show_chapters_path: bool = False


@dataclass
class EncodeConfig:
    """Configuration of an encoding run.

    Attributes:
        method: How chapters are grouped and named
        input_dir: Directory containing the chapter directories
        output: Output directory (compile / each) or ignored for single,
            whose output file is carried by the method itself
        create_output_dir: Create the output directory when missing
        dirs_prefix: Only consider chapter directories starting with this
        start_chapter: 1-based first chapter to encode
        end_chapter: 1-based last chapter to encode (inclusive)
        root_chapter: Treat the input directory itself as the only chapter
        options: Shared writing options
    """

    method: BuildMethod
    input_dir: Path
    output: Path | None = None
    create_output_dir: bool = False
    dirs_prefix: str | None = None
    start_chapter: int | None = None
    end_chapter: int | None = None
    root_chapter: bool = False
    options: EncodingOptions = field(default_factory=EncodingOptions)

    def validate(self) -> None:
        """Reject flag combinations that cannot work together.

        Raises:
            ConfigurationError: If the configuration is contradictory
        """
        if self.options.skip_existing and self.options.append_pages_count:
            raise ConfigurationError(
                "Skipping existing volumes cannot be combined with appending the pages count "
                + "(the final file name is unknown before writing)"
            )
        if self.options.skip_existing and isinstance(self.method, SingleMethod):
            raise ConfigurationError("Skipping existing volumes is not available for a single volume")
        if self.options.skip_existing and self.options.overwrite:
            raise ConfigurationError("Skipping existing volumes cannot be combined with overwriting them")


@dataclass
class DecodeConfig:
    """Configuration of a decoding run."""

    input: Path
    output: Path | None = None
    create_output_dir: bool = False
    only_extract_images: bool = False
    extended_image_formats: bool = False
    simple_sorting: bool = False
    skip_bad_pdf_pages: bool = False


@dataclass
class RebuildConfig:
    """Configuration of a rebuilding run."""

    input: Path
    output: Path | None = None
    overwrite: bool = False
    temporary_dir: Path | None = None
    only_extract_images: bool = False
    extended_image_formats: bool = False
    simple_sorting: bool = False
    compress_losslessly: bool = False
    skip_bad_pdf_pages: bool = False
