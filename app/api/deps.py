"""
Request dependencies.

Objects owned by the application lifespan, looked up from ``app.state``.
"""

from fastapi import Request

from app.utils.config import Settings
from domains.file_sorting.rules import RuleCatalog
from domains.file_sorting.sinks import NotificationBuffer
from domains.file_sorting.watchers import FolderWatcher, WatcherRegistry


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_catalog(request: Request) -> RuleCatalog:
    return request.app.state.catalog


def get_buffer(request: Request) -> NotificationBuffer:
    return request.app.state.buffer


def get_watcher(request: Request) -> FolderWatcher:
    return request.app.state.watcher


def get_registry(request: Request) -> WatcherRegistry:
    return request.app.state.registry
