"""Error types raised by the encoding, decoding and rebuilding pipelines."""

from __future__ import annotations

from pathlib import Path


class ComicEncoderError(Exception):
    """Base class for every error reported by the comic encoder.

    The optional context fields are rendered after the message so that any
    failure points at the volume, chapter and file it happened on.
    """

    def __init__(
        self,
        message: str,
        *,
        volume: int | None = None,
        chapter: int | None = None,
        path: Path | str | None = None,
    ) -> None:
        """Initialize the error.

        Args:
            message: Human-readable description of the failure
            volume: 1-based index of the volume being built, if any
            chapter: 1-based ordinal of the chapter being processed, if any
            path: File or directory involved in the failure, if any
        """
        super().__init__(message)
        self.message = message
        self.volume = volume
        self.chapter = chapter
        self.path = Path(path) if path is not None else None

    def __str__(self) -> str:
        context: list[str] = []
        if self.volume is not None:
            context.append(f"volume {self.volume}")
        if self.chapter is not None:
            context.append(f"chapter {self.chapter}")
        if self.path is not None:
            context.append(f"path '{self.path}'")

        if not context:
            return self.message
        return f"{self.message} ({', '.join(context)})"


class ConfigurationError(ComicEncoderError):
    """Invalid options, detected before any I/O is performed."""
    pass


class ResourceNotFoundError(ComicEncoderError):
    """An input or output location is missing or has the wrong type."""
    pass


class NameEncodingError(ComicEncoderError):
    """A file name cannot be used by the naming scheme (e.g. no extension)."""
    pass


class ArchiveIOError(ComicEncoderError):
    """A read, write, create, list or rename operation failed."""
    pass


class OutputConflictError(ComicEncoderError):
    """The output file already exists and overwriting was not requested."""
    pass


class UnsupportedFormatError(ComicEncoderError):
    """The input file's format cannot be decoded."""
    pass


class PdfPageError(ComicEncoderError):
    """A PDF page or its resources could not be read."""
    pass


class InternalPlanningError(ComicEncoderError):
    """An internal invariant of the volume planning was broken."""
    pass
