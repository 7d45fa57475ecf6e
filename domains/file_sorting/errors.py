"""Exceptions raised by the file sorting domain."""

from pathlib import Path
from typing import Union


class FolderSorterError(Exception):
    """Base class for file sorting errors."""


class InvalidWatchTarget(FolderSorterError):
    """The requested watch path is missing, not a directory, or inaccessible."""

    def __init__(self, path: Union[str, Path], reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Cannot watch {self.path}: {reason}")


class RuleCatalogError(FolderSorterError, ValueError):
    """Rule data could not be loaded or is inconsistent."""
