"""Folder watchers reporting new files to a notification sink."""

from domains.file_sorting.watchers.folder import (
    FolderWatcher,
    NewFileEventHandler,
    WatchSession,
    validate_watch_target,
)
from domains.file_sorting.watchers.registry import WatcherRegistry

__all__ = [
    "FolderWatcher",
    "NewFileEventHandler",
    "WatchSession",
    "WatcherRegistry",
    "validate_watch_target",
]
