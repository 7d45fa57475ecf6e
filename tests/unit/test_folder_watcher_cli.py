import threading

from app.models.schemas import NotificationType, WatcherNotification
from app.utils.helpers import now_utc
from domains.file_sorting.rules import load_catalog
from scripts.folder_watcher import ClassifyingSink, parse_args


def notification(path: str, event_type=NotificationType.FILE_ADDED, detail=None):
    return WatcherNotification(
        event_type=event_type,
        path=path,
        root="/inbox",
        session_id="s-1",
        ts=now_utc(),
        detail=detail,
    )


def test_sink_prints_rule_and_destination(tmp_path, capsys):
    stop = threading.Event()
    sink = ClassifyingSink(load_catalog(), tmp_path, stop)

    sink(notification("/inbox/photo.JPG"))
    sink(notification("/inbox/notes"))

    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == f"/inbox/photo.JPG\tmedia\t{tmp_path / 'Pictures' / 'Sorted'}"
    assert lines[1] == "/inbox/notes\t(no rule)"
    assert not stop.is_set()


def test_sink_stops_loop_on_interruption(tmp_path):
    stop = threading.Event()
    sink = ClassifyingSink(load_catalog(), tmp_path, stop)

    sink(notification("/inbox", NotificationType.WATCH_INTERRUPTED, "watched directory was deleted"))

    assert stop.is_set()
    assert sink.was_interrupted


def test_parse_args(tmp_path):
    args = parse_args([str(tmp_path), "--base", str(tmp_path / "home"), "--poll", "0.5"])

    assert args.directory == tmp_path
    assert args.base == tmp_path / "home"
    assert args.poll == 0.5
