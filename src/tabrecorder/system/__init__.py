"""Filesystem, path and logging infrastructure."""

from .file_manager import FileManager
from .path_resolver import PathResolver

__all__ = [
    "FileManager",
    "PathResolver",
]
