"""Console reporting and progress tracking with Rich."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import final

from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
)
from rich.table import Table

from comic_encoder.config import VERBOSITY_LEVELS


@final
class ProgressTracker:
    """Reports what the pipelines are doing, filtered by a verbosity level.

    Levels are ordered: `silent` only shows errors, `normal` adds warnings,
    information and success messages, `verbose` adds details about each
    chapter, and `debug` adds one line per file.
    """

    def __init__(self, console: Console | None = None, level: str = "normal") -> None:
        """Initialize the progress tracker.

        Args:
            console: Rich console instance. If None, creates a new one.
            level: One of `silent`, `normal`, `verbose` or `debug`
        """
        if level not in VERBOSITY_LEVELS:
            raise ValueError(f"Unknown verbosity level: {level}")

        self.console = console or Console()
        self.level = level
        self.warnings = 0

    def _enabled(self, level: str) -> bool:
        return VERBOSITY_LEVELS.index(self.level) >= VERBOSITY_LEVELS.index(level)

    @property
    def show_progress(self) -> bool:
        """Whether progress bars should be drawn."""
        return self.level in ("normal", "verbose")

    @contextmanager
    def track_pages(self, description: str, total_pages: int) -> Iterator[PageProgressContext]:
        """Context manager for tracking pages written or extracted.

        Args:
            description: Label of the progress bar
            total_pages: Total number of pages

        Yields:
            Context for advancing the page progress
        """
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            console=self.console,
            transient=True,
            disable=not self.show_progress,
        ) as progress:
            task_id = progress.add_task(escape(description), total=total_pages)
            yield PageProgressContext(progress, task_id)

    def display_run_summary(self, action: str, produced: list[Path], duration: float) -> None:
        """Display a summary of a finished run.

        Args:
            action: Name of the action that ran
            produced: Files produced by the run
            duration: Duration of the run, in seconds
        """
        if not self._enabled("normal"):
            return

        table = Table(title=f"{action.capitalize()} Summary")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="green")

        table.add_row("Files Produced", str(len(produced)))
        table.add_row("Warnings", str(self.warnings))
        table.add_row("Duration", f"{duration:.3f} s")

        self.console.print()
        self.console.print(table)

    def display_error(self, message: str, exception: Exception | None = None) -> None:
        """Display an error message with optional exception details.

        Errors are shown at every verbosity level.

        Args:
            message: Error message to display
            exception: Optional exception for additional context
        """
        self.console.print(f"[red]Error: {escape(message)}[/red]")
        if exception and exception.__cause__ is not None:
            self.console.print(f"[dim]Details: {escape(str(exception.__cause__))}[/dim]")

    def display_warning(self, message: str) -> None:
        """Display a warning message.

        Args:
            message: Warning message to display
        """
        self.warnings += 1
        if self._enabled("normal"):
            self.console.print(f"[yellow]Warning: {escape(message)}[/yellow]")

    def display_success(self, message: str) -> None:
        """Display a success message.

        Args:
            message: Success message to display
        """
        if self._enabled("normal"):
            self.console.print(f"[green]Success: {escape(message)}[/green]")

    def display_info(self, message: str) -> None:
        """Display an info message.

        Args:
            message: Info message to display
        """
        if self._enabled("normal"):
            self.console.print(f"[blue]Info: {escape(message)}[/blue]")

    def display_verbose(self, message: str) -> None:
        """Display a detail shown with `--verbose` and `--debug`.

        Args:
            message: Message to display
        """
        if self._enabled("verbose"):
            self.console.print(f"[cyan]{escape(message)}[/cyan]")

    def display_debug(self, message: str) -> None:
        """Display a per-file detail shown with `--debug` only.

        Args:
            message: Message to display
        """
        if self._enabled("debug"):
            self.console.print(f"[dim]{escape(message)}[/dim]")


@final
class PageProgressContext:
    """Context for tracking page progress."""

    def __init__(self, progress: Progress, task_id: TaskID) -> None:
        self.progress = progress
        self.task_id = task_id

    def update(self, advance: int = 1) -> None:
        """Advance the page progress.

        Args:
            advance: Number of pages to advance
        """
        self.progress.update(self.task_id, advance=advance)
