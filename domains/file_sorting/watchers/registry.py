"""Keeps one folder watcher per watched-folder id."""

import threading
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from loguru import logger

from app.models.schemas import WatchedFolder, WatcherNotification, WatchStatus
from domains.file_sorting.errors import InvalidWatchTarget
from domains.file_sorting.sinks import NotificationSink
from domains.file_sorting.watchers.folder import FolderWatcher


class WatcherRegistry:
    """Multi-folder watch orchestrator sharing a single sink."""

    def __init__(self, sink: Optional[NotificationSink] = None, health_check_interval: float = 1.0):
        self.health_check_interval = health_check_interval
        self._sink = sink
        self._watchers: Dict[str, FolderWatcher] = {}
        self._lock = threading.RLock()

    def attach_sink(self, sink: Optional[NotificationSink]):
        """Register the receiver shared by all folders."""
        with self._lock:
            self._sink = sink

    def watch_folder(self, folder_id: str, path: Union[str, Path]) -> WatchStatus:
        """
        Start (or restart) watching a folder.

        Args:
            folder_id: Watched-folder identifier
            path: Directory to observe

        Returns:
            Status of the folder's watcher

        Raises:
            InvalidWatchTarget: If the path cannot be watched
        """
        with self._lock:
            watcher = self._watchers.get(folder_id)
            if watcher is None:
                watcher = FolderWatcher(
                    sink=self._tagging_sink(folder_id),
                    health_check_interval=self.health_check_interval,
                )
                self._watchers[folder_id] = watcher

        # Starting joins the previous observer; the lock must not be held
        try:
            watcher.start(path)
        except InvalidWatchTarget:
            with self._lock:
                if self._watchers.get(folder_id) is watcher:
                    del self._watchers[folder_id]
            raise

        with self._lock:
            registered = self._watchers.get(folder_id) is watcher

        if not registered:
            # Unwatched while starting
            watcher.close()
            return WatchStatus(active=False)

        logger.info(f"Folder {folder_id} watching {path}")
        return watcher.status()

    def unwatch_folder(self, folder_id: str):
        """Stop watching a folder. Unknown ids are ignored."""
        with self._lock:
            watcher = self._watchers.pop(folder_id, None)

        if watcher is not None:
            watcher.close()
            logger.info(f"Folder {folder_id} no longer watched")

    def sync(self, folders: Iterable[WatchedFolder]) -> List[str]:
        """
        Make running watchers match the folders flagged ``auto_watch``.

        Folders already watched at the same path keep their session.

        Args:
            folders: Desired folder list

        Returns:
            Ids of folders that could not be watched
        """
        failed = []
        wanted = {f.id: f for f in folders if f.auto_watch}

        with self._lock:
            stale = [folder_id for folder_id in self._watchers if folder_id not in wanted]

        for folder_id in stale:
            self.unwatch_folder(folder_id)

        for folder_id, folder in wanted.items():
            status = self.status(folder_id)
            if status.active and _same_path(status.root_path, folder.path):
                continue
            try:
                self.watch_folder(folder_id, folder.path)
            except InvalidWatchTarget as e:
                logger.error(f"Failed to watch folder {folder_id}: {e}")
                failed.append(folder_id)

        return failed

    def status(self, folder_id: str) -> WatchStatus:
        """Status of one folder's watcher."""
        with self._lock:
            watcher = self._watchers.get(folder_id)
        if watcher is None:
            return WatchStatus(active=False)
        return watcher.status()

    def active_folders(self) -> Dict[str, WatchStatus]:
        """Statuses of folders with a running session."""
        with self._lock:
            watchers = dict(self._watchers)
        statuses = {fid: w.status() for fid, w in watchers.items()}
        return {fid: s for fid, s in statuses.items() if s.active}

    def stop_all(self):
        """Stop every watcher."""
        with self._lock:
            watchers = list(self._watchers.values())
            self._watchers.clear()

        for watcher in watchers:
            watcher.close()

    def _tagging_sink(self, folder_id: str) -> NotificationSink:
        # Runs on the observer thread
        def forward(notification: WatcherNotification):
            sink = self._sink
            if sink is not None:
                sink(notification.model_copy(update={"folder_id": folder_id}))

        return forward


def _same_path(current: Optional[str], wanted: str) -> bool:
    if current is None:
        return False
    try:
        return Path(wanted).expanduser().resolve() == Path(current)
    except OSError:
        return False
