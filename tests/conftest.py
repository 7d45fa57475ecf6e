import threading
from pathlib import Path

import pytest

from app.models.schemas import NotificationType


class RecordingSink:
    """Collects notifications and lets tests wait for them."""

    def __init__(self):
        self.items = []
        self._cond = threading.Condition()

    def __call__(self, notification):
        with self._cond:
            self.items.append(notification)
            self._cond.notify_all()

    def wait_for(self, predicate, timeout: float = 5.0) -> bool:
        with self._cond:
            return self._cond.wait_for(lambda: predicate(self.items), timeout)

    def wait_for_path(self, path: Path, timeout: float = 5.0) -> bool:
        target = str(path)
        return self.wait_for(lambda items: any(n.path == target for n in items), timeout)

    def wait_for_interrupt(self, timeout: float = 5.0) -> bool:
        return self.wait_for(
            lambda items: any(n.event_type is NotificationType.WATCH_INTERRUPTED for n in items),
            timeout,
        )

    @property
    def paths(self):
        with self._cond:
            return [n.path for n in self.items if n.event_type is NotificationType.FILE_ADDED]


@pytest.fixture
def recording_sink():
    return RecordingSink()


@pytest.fixture
def watch_root(tmp_path):
    """A resolved, empty directory to watch."""
    root = tmp_path / "inbox"
    root.mkdir()
    return root.resolve()
