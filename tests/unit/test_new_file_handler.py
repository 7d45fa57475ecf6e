from pathlib import Path

import pytest

from domains.file_sorting.watchers import NewFileEventHandler


class Event:
    def __init__(self, src: Path, dest: Path | None = None, is_directory: bool = False):
        self.src_path = str(src)
        self.dest_path = str(dest) if dest else ""
        self.is_directory = is_directory


@pytest.fixture
def calls():
    return {"files": [], "interrupts": []}


@pytest.fixture
def handler(tmp_path, calls):
    return NewFileEventHandler(
        tmp_path,
        on_file=calls["files"].append,
        on_interrupt=calls["interrupts"].append,
    )


def test_created_file_is_reported(handler, calls, tmp_path):
    handler.on_created(Event(tmp_path / "invoice.pdf"))

    assert calls["files"] == [str(tmp_path / "invoice.pdf")]


def test_hidden_nested_and_directories_are_ignored(handler, calls, tmp_path):
    handler.on_created(Event(tmp_path / ".secret"))
    handler.on_created(Event(tmp_path / "nested" / "invoice.pdf"))
    handler.on_created(Event(tmp_path / "photos", is_directory=True))

    assert calls["files"] == []


def test_duplicate_creation_is_suppressed_until_removed(handler, calls, tmp_path):
    path = tmp_path / "invoice.pdf"

    handler.on_created(Event(path))
    handler.on_created(Event(path))
    assert len(calls["files"]) == 1

    handler.on_deleted(Event(path))
    handler.on_created(Event(path))
    assert len(calls["files"]) == 2


def test_rename_into_visible_name_is_reported(handler, calls, tmp_path):
    partial = tmp_path / ".report.pdf.part"
    final = tmp_path / "report.pdf"

    handler.on_created(Event(partial))
    handler.on_moved(Event(partial, final))

    assert calls["files"] == [str(final)]


def test_moving_reported_file_away_forgets_it(handler, calls, tmp_path):
    path = tmp_path / "song.mp3"

    handler.on_created(Event(path))
    handler.on_moved(Event(path, tmp_path / "sorted" / "song.mp3"))
    handler.on_created(Event(path))

    assert calls["files"] == [str(path), str(path)]


@pytest.mark.parametrize("method", ["on_deleted", "on_moved"])
def test_root_removal_interrupts(handler, calls, tmp_path, method):
    getattr(handler, method)(Event(tmp_path, tmp_path.parent / "elsewhere", is_directory=True))

    assert len(calls["interrupts"]) == 1
    assert calls["files"] == []
