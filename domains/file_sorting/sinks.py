"""Receivers for watcher notifications."""

from __future__ import annotations

import queue
import threading
from collections import deque
from typing import Callable, List, Optional

from loguru import logger

from app.models.schemas import NotificationType, WatcherNotification

NotificationSink = Callable[[WatcherNotification], None]


class NotificationBuffer:
    """Thread-safe bounded buffer; the oldest notifications are dropped first."""

    def __init__(self, maxlen: int = 500):
        self._items: deque[WatcherNotification] = deque(maxlen=maxlen)
        self._lock = threading.Lock()
        self._dropped = 0

    def __call__(self, notification: WatcherNotification) -> None:
        with self._lock:
            if len(self._items) == self._items.maxlen:
                self._dropped += 1
            self._items.append(notification)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    @property
    def dropped(self) -> int:
        """Number of notifications discarded because the buffer was full."""
        return self._dropped

    def drain(self, limit: Optional[int] = None) -> List[WatcherNotification]:
        """Remove and return up to ``limit`` notifications, oldest first."""
        with self._lock:
            count = len(self._items) if limit is None else min(limit, len(self._items))
            return [self._items.popleft() for _ in range(count)]


class QueueSink:
    """Forwards notifications into a ``queue.Queue``."""

    def __init__(self, target: Optional[queue.Queue] = None):
        self.queue = target if target is not None else queue.Queue()

    def __call__(self, notification: WatcherNotification) -> None:
        self.queue.put_nowait(notification)


class LoggingSink:
    """Logs every notification."""

    def __call__(self, notification: WatcherNotification) -> None:
        if notification.event_type is NotificationType.WATCH_INTERRUPTED:
            logger.warning(
                f"Watch on {notification.root} interrupted: {notification.detail}"
            )
        else:
            logger.info(f"New file: {notification.path}")
