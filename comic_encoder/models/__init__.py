"""Data models for the comic encoder."""

from .chapter import Chapter
from .method import BuildMethod, CompileMethod, EachMethod, SingleMethod
from .page import ExtractedPage, ImagePage
from .volume import CompilationPlan, VolumeBatch

__all__ = [
    "BuildMethod",
    "Chapter",
    "CompilationPlan",
    "CompileMethod",
    "EachMethod",
    "ExtractedPage",
    "ImagePage",
    "SingleMethod",
    "VolumeBatch",
]
