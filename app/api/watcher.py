"""
Watcher endpoints.

Start and stop the folder watcher and collect its notifications.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from typing import List, Optional
from loguru import logger

from app.api.deps import get_app_settings, get_buffer, get_catalog, get_watcher
from app.models.schemas import Classification, NotificationType, WatcherNotification, WatchStatus
from app.utils.config import Settings
from domains.file_sorting.errors import InvalidWatchTarget
from domains.file_sorting.rules import RuleCatalog
from domains.file_sorting.sinks import NotificationBuffer
from domains.file_sorting.watchers import FolderWatcher

router = APIRouter()


class StartRequest(BaseModel):
    """Directory to watch."""
    path: str


class WatcherEvent(BaseModel):
    """Notification plus the classification of the new file."""
    notification: WatcherNotification
    classification: Optional[Classification] = None


class WatcherEventList(BaseModel):
    """Drained notifications."""
    events: List[WatcherEvent]
    total: int
    dropped: int


@router.post("/start", response_model=WatchStatus)
async def start_watcher(request: StartRequest, watcher: FolderWatcher = Depends(get_watcher)):
    """
    Start watching a directory, replacing any current session.

    Returns:
        Watcher status
    """
    try:
        watcher.start(request.path)
    except InvalidWatchTarget as e:
        logger.warning(f"Rejected watch target: {e}")
        raise HTTPException(status_code=422, detail=str(e))
    return watcher.status()


@router.post("/stop", response_model=WatchStatus)
async def stop_watcher(watcher: FolderWatcher = Depends(get_watcher)):
    """Stop watching."""
    watcher.stop()
    return watcher.status()


@router.get("/status", response_model=WatchStatus)
async def watcher_status(watcher: FolderWatcher = Depends(get_watcher)):
    """Current watcher status."""
    return watcher.status()


@router.get("/events", response_model=WatcherEventList)
async def drain_events(
    limit: int = Query(100, ge=1, le=1000),
    buffer: NotificationBuffer = Depends(get_buffer),
    catalog: RuleCatalog = Depends(get_catalog),
    settings: Settings = Depends(get_app_settings),
):
    """
    Remove and return buffered notifications, oldest first.

    Args:
        limit: Maximum number of notifications to return

    Returns:
        Notifications with classifications for new files
    """
    base = settings.get_destination_root()
    events = []
    for notification in buffer.drain(limit):
        classification = None
        if notification.event_type is NotificationType.FILE_ADDED:
            classification = catalog.classify(notification.path, base)
        events.append(WatcherEvent(notification=notification, classification=classification))

    return WatcherEventList(events=events, total=len(events), dropped=buffer.dropped)
