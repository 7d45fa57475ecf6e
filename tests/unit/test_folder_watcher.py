import os
import shutil
import threading
import time

import pytest
from watchdog.observers.api import BaseObserver

from app.models.schemas import NotificationType
from domains.file_sorting.errors import InvalidWatchTarget
from domains.file_sorting.watchers import FolderWatcher


@pytest.fixture
def watcher(recording_sink):
    w = FolderWatcher(sink=recording_sink, health_check_interval=0.2)
    yield w
    w.close()


def write_sentinel(root):
    """Create a file that must be reported; events before it have been seen once it is."""
    sentinel = root / "zz-sentinel.txt"
    sentinel.write_text("done")
    return sentinel


def test_new_file_produces_one_notification(watcher, recording_sink, watch_root):
    session = watcher.start(watch_root)
    assert session.root_path == watch_root
    assert watcher.active

    (watch_root / "invoice.pdf").write_bytes(b"%PDF")
    sentinel = write_sentinel(watch_root)

    assert recording_sink.wait_for_path(sentinel)
    assert recording_sink.paths == [str(watch_root / "invoice.pdf"), str(sentinel)]

    first = recording_sink.items[0]
    assert first.event_type is NotificationType.FILE_ADDED
    assert first.root == str(watch_root)
    assert first.session_id == session.session_id


def test_hidden_file_is_not_reported(watcher, recording_sink, watch_root):
    watcher.start(watch_root)

    (watch_root / ".secret").write_text("shh")
    sentinel = write_sentinel(watch_root)

    assert recording_sink.wait_for_path(sentinel)
    assert recording_sink.paths == [str(sentinel)]


def test_existing_files_are_not_reported(watcher, recording_sink, watch_root):
    (watch_root / "report.pdf").write_text("old")

    watcher.start(watch_root)
    sentinel = write_sentinel(watch_root)

    assert recording_sink.wait_for_path(sentinel)
    assert recording_sink.paths == [str(sentinel)]


def test_nested_files_are_not_reported(watcher, recording_sink, watch_root):
    watcher.start(watch_root)

    nested = watch_root / "nested"
    nested.mkdir()
    (nested / "invoice.pdf").write_text("deep")
    sentinel = write_sentinel(watch_root)

    assert recording_sink.wait_for_path(sentinel)
    assert recording_sink.paths == [str(sentinel)]


def test_file_moved_in_is_reported(watcher, recording_sink, watch_root, tmp_path):
    outside = tmp_path / "outside"
    outside.mkdir()
    (outside / "photo.jpg").write_bytes(b"jpg")

    watcher.start(watch_root)
    os.rename(outside / "photo.jpg", watch_root / "photo.jpg")

    assert recording_sink.wait_for_path(watch_root / "photo.jpg")


def test_stop_is_idempotent(watcher, watch_root):
    watcher.stop()
    watcher.start(watch_root)
    watcher.stop()
    watcher.stop()

    assert not watcher.active
    assert watcher.session is None
    assert watcher.status().active is False


def test_no_notifications_after_stop(watcher, recording_sink, watch_root):
    watcher.start(watch_root)
    watcher.stop()

    (watch_root / "late.pdf").write_text("late")
    time.sleep(1.0)

    assert recording_sink.items == []


def test_restart_keeps_single_session(watcher, recording_sink, tmp_path):
    path_a = tmp_path / "a"
    path_b = tmp_path / "b"
    path_a.mkdir()
    path_b.mkdir()
    path_b = path_b.resolve()

    first = watcher.start(path_a)
    second = watcher.start(path_b)

    assert not first.active
    assert second.active
    assert watcher.status().root_path == str(path_b)

    (path_a / "stale.pdf").write_text("a")
    sentinel = write_sentinel(path_b)

    assert recording_sink.wait_for_path(sentinel)
    time.sleep(0.6)
    assert recording_sink.paths == [str(sentinel)]


def test_missing_path_is_invalid_target(watcher, tmp_path):
    with pytest.raises(InvalidWatchTarget) as excinfo:
        watcher.start(tmp_path / "missing")

    assert "does not exist" in str(excinfo.value)
    assert not watcher.active


def test_file_path_is_invalid_target(watcher, tmp_path):
    target = tmp_path / "file.txt"
    target.write_text("x")

    with pytest.raises(InvalidWatchTarget, match="not a directory"):
        watcher.start(target)


def test_invalid_restart_leaves_watcher_idle(watcher, watch_root, tmp_path):
    watcher.start(watch_root)

    with pytest.raises(InvalidWatchTarget):
        watcher.start(tmp_path / "missing")

    assert not watcher.active


def test_deleted_root_interrupts_watch(watcher, recording_sink, watch_root, tmp_path):
    watcher.start(watch_root)

    shutil.rmtree(watch_root)

    assert recording_sink.wait_for_interrupt()
    interrupted = [n for n in recording_sink.items if n.event_type is NotificationType.WATCH_INTERRUPTED]
    assert len(interrupted) == 1
    assert interrupted[0].path == str(watch_root)
    assert interrupted[0].detail

    assert not watcher.active

    # Restart on a fresh directory works after an interruption
    again = tmp_path / "again"
    again.mkdir()
    watcher.start(again)
    assert watcher.active


def test_failing_sink_does_not_stop_watcher(watch_root, recording_sink):
    def sink(notification):
        if "boom" in notification.path:
            raise RuntimeError("sink failure")
        recording_sink(notification)

    with FolderWatcher(sink=sink, health_check_interval=0) as watcher:
        watcher.start(watch_root)
        (watch_root / "boom.pdf").write_text("x")
        sentinel = write_sentinel(watch_root)

        assert recording_sink.wait_for_path(sentinel)
        assert watcher.active

    assert not watcher.active


def test_attach_sink_replaces_previous(watcher, recording_sink, watch_root):
    old = []
    watcher.attach_sink(old.append)
    watcher.start(watch_root)
    watcher.attach_sink(recording_sink)

    sentinel = write_sentinel(watch_root)

    assert recording_sink.wait_for_path(sentinel)
    assert old == []


def live_observers(exclude=frozenset()):
    return [
        t for t in threading.enumerate()
        if isinstance(t, BaseObserver) and t.is_alive() and t not in exclude
    ]


def test_concurrent_starts_leave_no_observer_behind(tmp_path):
    path_a = tmp_path / "a"
    path_b = tmp_path / "b"
    path_a.mkdir()
    path_b.mkdir()
    before = frozenset(live_observers())

    watcher = FolderWatcher(health_check_interval=0)
    for _ in range(20):
        barrier = threading.Barrier(2)

        def start(path):
            barrier.wait()
            watcher.start(path)

        threads = [threading.Thread(target=start, args=(p,)) for p in (path_a, path_b)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10)

        assert watcher.active
        assert len(live_observers(before)) == 1

    watcher.stop()

    assert live_observers(before) == []
