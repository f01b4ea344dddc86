"""Console reporting and progress bars."""

from .tracker import PageProgressContext, ProgressTracker

__all__ = ["PageProgressContext", "ProgressTracker"]
