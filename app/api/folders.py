"""
Watched folder endpoints.

Manage the set of folders watched through the registry.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from typing import Dict, List
from loguru import logger

from app.api.deps import get_registry
from app.models.schemas import WatchedFolder, WatchStatus
from domains.file_sorting.watchers import WatcherRegistry

router = APIRouter()


class FolderStatusList(BaseModel):
    """Active folders keyed by id."""
    folders: Dict[str, WatchStatus]
    total: int


class SyncResponse(BaseModel):
    """Result of a folder sync."""
    folders: Dict[str, WatchStatus]
    failed: List[str] = []


@router.get("", response_model=FolderStatusList)
async def list_folders(registry: WatcherRegistry = Depends(get_registry)):
    """List folders with a running watcher."""
    active = registry.active_folders()
    return FolderStatusList(folders=active, total=len(active))


@router.put("", response_model=SyncResponse)
async def sync_folders(folders: List[WatchedFolder], registry: WatcherRegistry = Depends(get_registry)):
    """
    Replace the watched folder set.

    Folders with ``auto_watch`` false, or missing from the list, are stopped.

    Returns:
        Active folders and ids that could not be watched
    """
    logger.info(f"Syncing {len(folders)} watched folders")
    failed = registry.sync(folders)
    return SyncResponse(folders=registry.active_folders(), failed=failed)


@router.delete("/{folder_id}", response_model=WatchStatus)
async def unwatch_folder(folder_id: str, registry: WatcherRegistry = Depends(get_registry)):
    """Stop watching one folder."""
    registry.unwatch_folder(folder_id)
    return registry.status(folder_id)
