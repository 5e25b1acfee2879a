"""Result persistence."""

from .file_loader import FileLoader

__all__ = ["FileLoader"]
