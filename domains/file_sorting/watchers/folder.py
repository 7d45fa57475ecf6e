"""
Folder watcher for the File Sorting domain.

Observes a single directory and notifies a sink for every file that
appears in it. Uses watchdog for cross-platform file system event monitoring.
"""

import os
import threading
from dataclasses import dataclass
from datetime import datetime
from functools import partial
from pathlib import Path
from typing import Callable, Optional, Tuple, Union

from loguru import logger
from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from app.models.schemas import NotificationType, WatcherNotification, WatchStatus
from app.utils.helpers import generate_uuid, is_hidden, now_utc
from domains.file_sorting.errors import InvalidWatchTarget
from domains.file_sorting.sinks import NotificationSink


@dataclass(slots=True)
class WatchSession:
    """One start-to-stop period of observation."""

    session_id: str
    root_path: Path
    started_at: datetime
    active: bool = True


class NewFileEventHandler(FileSystemEventHandler):
    """Turns watchdog events into "file appeared" callbacks for one directory."""

    def __init__(
        self,
        root: Path,
        on_file: Callable[[str], None],
        on_interrupt: Callable[[str], None],
    ):
        """
        Initialize event handler.

        Args:
            root: Resolved directory being observed
            on_file: Called with the absolute path of each new file
            on_interrupt: Called with a reason when the root goes away
        """
        super().__init__()
        self.root = root
        self.on_file = on_file
        self.on_interrupt = on_interrupt
        # Paths already reported and not yet removed
        self.reported: set[str] = set()

    def should_report(self, path: Path) -> bool:
        """
        Check if path qualifies for a notification.

        Args:
            path: Absolute file path

        Returns:
            True for visible direct children of the root
        """
        if path.parent != self.root:
            return False

        if is_hidden(path):
            return False

        return True

    def on_created(self, event: FileSystemEvent):
        """Handle file creation."""
        if event.is_directory:
            return

        self._file_appeared(os.fsdecode(event.src_path))

    def on_moved(self, event: FileSystemEvent):
        """Handle rename/move; a file moved in counts as new."""
        src = os.fsdecode(event.src_path)
        if self._is_root(src):
            self.on_interrupt("watched directory was moved")
            return

        self.reported.discard(src)

        if event.is_directory:
            return

        self._file_appeared(os.fsdecode(event.dest_path))

    def on_deleted(self, event: FileSystemEvent):
        """Handle deletion."""
        src = os.fsdecode(event.src_path)
        if self._is_root(src):
            self.on_interrupt("watched directory was deleted")
            return

        self.reported.discard(src)

    def _is_root(self, raw_path: str) -> bool:
        return Path(raw_path) == self.root

    def _file_appeared(self, raw_path: str):
        path = Path(raw_path)
        if not self.should_report(path):
            return

        key = str(path)
        if key in self.reported:
            logger.debug(f"Duplicate creation event ignored: {key}")
            return

        self.reported.add(key)
        logger.info(f"File added: {key}")
        self.on_file(key)


class FolderWatcher:
    """
    Watches one directory at a time and forwards new files to a sink.

    ``start`` replaces any running session, ``stop`` is idempotent. Failures
    after a successful start are reported to the sink as
    ``watch-interrupted`` notifications and leave the watcher idle.
    """

    def __init__(self, sink: Optional[NotificationSink] = None, health_check_interval: float = 1.0):
        """
        Initialize folder watcher.

        Args:
            sink: Receiver for notifications
            health_check_interval: Seconds between event source health
                checks; 0 disables the check
        """
        self.health_check_interval = health_check_interval

        self._lock = threading.RLock()
        self._sink = sink
        self._session: Optional[WatchSession] = None
        self._observer: Optional[Observer] = None
        self._halt: Optional[threading.Event] = None
        self._supervisor: Optional[threading.Thread] = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()

    @property
    def active(self) -> bool:
        """Whether a session is running."""
        with self._lock:
            return self._session is not None and self._session.active

    @property
    def session(self) -> Optional[WatchSession]:
        """The running session, if any."""
        with self._lock:
            return self._session

    def status(self) -> WatchStatus:
        """Snapshot of the watcher state."""
        with self._lock:
            session = self._session
            if session is None or not session.active:
                return WatchStatus(active=False)
            return WatchStatus(
                active=True,
                root_path=str(session.root_path),
                session_id=session.session_id,
                started_at=session.started_at,
            )

    def attach_sink(self, sink: Optional[NotificationSink]):
        """Register the notification receiver, replacing any previous one."""
        with self._lock:
            self._sink = sink

    def start(self, path: Union[str, Path]) -> WatchSession:
        """
        Start watching a directory.

        Args:
            path: Directory to observe

        Returns:
            The new session

        Raises:
            InvalidWatchTarget: If the path cannot be watched
        """
        self.stop()

        root = validate_watch_target(path)
        identity = _identity(root)

        session = WatchSession(
            session_id=generate_uuid(),
            root_path=root,
            started_at=now_utc(),
        )
        handler = NewFileEventHandler(
            root,
            on_file=partial(self._file_appeared, session),
            on_interrupt=partial(self._interrupt, session),
        )

        observer = Observer()
        observer.daemon = True
        halt = threading.Event()

        # A concurrent start may have installed a session since stop() above
        stale = None
        try:
            with self._lock:
                stale = self._detach_session()
                self._session = session
                self._observer = observer
                self._halt = halt

                try:
                    observer.schedule(handler, str(root), recursive=False)
                    observer.start()
                except OSError as e:
                    session.active = False
                    self._session = None
                    self._observer = None
                    self._halt = None
                    observer.stop()
                    logger.error(f"Failed to watch {root}: {e}")
                    raise InvalidWatchTarget(root, f"cannot watch directory: {e}") from e

                if self.health_check_interval > 0:
                    self._supervisor = threading.Thread(
                        target=self._supervise,
                        args=(session, observer, halt, identity),
                        name=f"folder-watch-health-{session.session_id[:8]}",
                        daemon=True,
                    )
                    self._supervisor.start()
        finally:
            if stale is not None:
                _release(*stale[1:])
                logger.info(f"Stopped watching: {stale[0].root_path}")

        logger.success(f"Started watching: {root}")
        return session

    def stop(self):
        """Stop watching. Does nothing when idle."""
        released = self._detach_session()
        if released is None:
            return

        session = released[0]
        _release(*released[1:])
        logger.info(f"Stopped watching: {session.root_path}")

    def close(self):
        """Stop watching and drop the sink."""
        self.stop()
        self.attach_sink(None)

    # Event thread callbacks -----------------------------------------------------------

    def _file_appeared(self, session: WatchSession, path: str):
        with self._lock:
            if self._session is not session or not session.active:
                return
            sink = self._sink

        self._notify(sink, WatcherNotification(
            event_type=NotificationType.FILE_ADDED,
            path=path,
            root=str(session.root_path),
            session_id=session.session_id,
            ts=now_utc(),
        ))

    def _interrupt(self, session: WatchSession, reason: str):
        with self._lock:
            if self._session is not session:
                return
            released = self._detach_session()
            sink = self._sink

        logger.warning(f"Watch on {session.root_path} interrupted: {reason}")
        _release(*released[1:])

        self._notify(sink, WatcherNotification(
            event_type=NotificationType.WATCH_INTERRUPTED,
            path=str(session.root_path),
            root=str(session.root_path),
            session_id=session.session_id,
            ts=now_utc(),
            detail=reason,
        ))

    def _supervise(self, session: WatchSession, observer: Observer, halt: threading.Event, identity):
        while not halt.wait(self.health_check_interval):
            reason = _check_health(session.root_path, observer, identity)
            if reason:
                self._interrupt(session, reason)
                return

    # Helper routines ------------------------------------------------------------------

    def _detach_session(self):
        with self._lock:
            session = self._session
            if session is None:
                return None

            session.active = False
            released = (session, self._observer, self._halt, self._supervisor)
            self._session = None
            self._observer = None
            self._halt = None
            self._supervisor = None
            return released

    @staticmethod
    def _notify(sink: Optional[NotificationSink], notification: WatcherNotification):
        if sink is None:
            logger.debug(f"No sink attached, dropping {notification.event_type.value}: {notification.path}")
            return

        try:
            sink(notification)
        except Exception:
            logger.exception(f"Notification sink failed for {notification.path}")


def validate_watch_target(path: Union[str, Path]) -> Path:
    """
    Resolve and check a directory to watch.

    Args:
        path: Candidate directory

    Returns:
        Resolved absolute path

    Raises:
        InvalidWatchTarget: If the path is missing, not a directory, or unreadable
    """
    if not str(path).strip():
        raise InvalidWatchTarget(path, "empty path")

    try:
        root = Path(path).expanduser().resolve(strict=True)
    except FileNotFoundError:
        raise InvalidWatchTarget(path, "path does not exist")
    except (OSError, RuntimeError) as e:
        raise InvalidWatchTarget(path, f"cannot resolve path: {e}") from e

    if not root.is_dir():
        raise InvalidWatchTarget(root, "not a directory")

    if not os.access(root, os.R_OK | os.X_OK):
        raise InvalidWatchTarget(root, "permission denied")

    return root


def _identity(root: Path) -> Optional[Tuple[int, int]]:
    try:
        stats = root.stat()
    except OSError:
        return None
    return stats.st_dev, stats.st_ino


def _check_health(root: Path, observer: Observer, identity) -> Optional[str]:
    if not root.is_dir():
        return "watched directory is no longer available"

    if identity is not None and _identity(root) != identity:
        return "watched directory was replaced"

    if not observer.is_alive():
        return "event observer stopped"

    for emitter in list(observer.emitters):
        if not emitter.is_alive():
            return "event source stopped delivering"

    return None


def _release(observer: Optional[Observer], halt: Optional[threading.Event], supervisor: Optional[threading.Thread]):
    current = threading.current_thread()

    if halt is not None:
        halt.set()

    if observer is not None:
        observer.stop()
        if observer is not current and observer.is_alive():
            observer.join()

    if supervisor is not None and supervisor is not current and supervisor.is_alive():
        supervisor.join()
