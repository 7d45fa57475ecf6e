"""
Health check endpoint.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from datetime import datetime

from app.api.deps import get_app_settings, get_catalog, get_registry, get_watcher
from app.utils.config import Settings
from domains.file_sorting.rules import RuleCatalog
from domains.file_sorting.watchers import FolderWatcher, WatcherRegistry

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str
    timestamp: datetime
    rules_loaded: int
    watcher_active: bool
    watched_folders: int
    version: str


@router.get("/health", response_model=HealthResponse)
async def health_check(
    settings: Settings = Depends(get_app_settings),
    catalog: RuleCatalog = Depends(get_catalog),
    watcher: FolderWatcher = Depends(get_watcher),
    registry: WatcherRegistry = Depends(get_registry),
):
    """
    Health check endpoint.

    Verifies:
    - API is running
    - Rule catalog is loaded
    """
    return HealthResponse(
        status="healthy" if len(catalog) > 0 else "degraded",
        timestamp=datetime.now(),
        rules_loaded=len(catalog),
        watcher_active=watcher.active,
        watched_folders=len(registry.active_folders()),
        version=settings.api_version
    )
