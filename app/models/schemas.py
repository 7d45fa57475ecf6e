"""
Pydantic models for Folder Sorter.

Shared data models across the application.
"""

from datetime import datetime
from enum import Enum
from pathlib import PurePosixPath, PureWindowsPath
from typing import Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.utils.helpers import normalize_extension


# =====================================================
# Rule Models
# =====================================================

class RuleIcon(str, Enum):
    """Presentation tag for a rule."""
    FILE_TEXT = "file-text"
    IMAGE = "image"
    ARCHIVE = "archive"
    CODE = "code"
    MUSIC = "music"
    VIDEO = "video"
    FOLDER = "folder"


class Rule(BaseModel):
    """Classification rule: a set of extensions routed to one folder."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    label: str
    extensions: Tuple[str, ...]
    target_folder: str = Field(min_length=1)  # relative, may hold {ext} / {year}
    icon: RuleIcon = RuleIcon.FOLDER
    description: Optional[str] = None
    active: bool = True

    @field_validator("extensions", mode="before")
    @classmethod
    def _normalize_extensions(cls, value):
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple, set, frozenset)):
            raise ValueError(f"extensions must be a list, got {type(value).__name__}")
        normalized = []
        for raw in value:
            ext = normalize_extension(str(raw))
            if not ext:
                raise ValueError(f"empty extension in {list(value)!r}")
            if ext not in normalized:
                normalized.append(ext)
        if not normalized:
            raise ValueError("a rule needs at least one extension")
        return tuple(normalized)

    @field_validator("target_folder")
    @classmethod
    def _relative_target(cls, value: str) -> str:
        windows = PureWindowsPath(value)
        if PurePosixPath(value).is_absolute() or windows.drive or windows.root:
            raise ValueError(f"target_folder must be relative: {value!r}")
        if ".." in windows.parts:
            raise ValueError(f"target_folder must stay inside the destination root: {value!r}")
        return value

    def matches(self, extension: str) -> bool:
        """Check an already-normalized extension against this rule."""
        return self.active and extension in self.extensions


class Classification(BaseModel):
    """Where a file would go according to the catalog."""
    path: str
    extension: str
    rule: Optional[Rule] = None
    destination: Optional[str] = None

    @property
    def matched(self) -> bool:
        return self.rule is not None


# =====================================================
# Watcher Models
# =====================================================

class NotificationType(str, Enum):
    """Kinds of messages a watcher sends to its sink."""
    FILE_ADDED = "file-added"
    WATCH_INTERRUPTED = "watch-interrupted"


class WatcherNotification(BaseModel):
    """Message delivered to a notification sink."""

    model_config = ConfigDict(frozen=True)

    event_type: NotificationType
    path: str  # absolute
    root: str
    session_id: str
    ts: datetime
    detail: Optional[str] = None
    folder_id: Optional[str] = None


class WatchStatus(BaseModel):
    """Snapshot of a watcher's state."""
    active: bool
    root_path: Optional[str] = None
    session_id: Optional[str] = None
    started_at: Optional[datetime] = None


class WatchedFolder(BaseModel):
    """Folder entry managed by the watcher registry."""
    id: str = Field(min_length=1)
    path: str
    auto_watch: bool = True
