"""
Folder Sorter - Main FastAPI Application

Local control surface for the folder-watch-and-classify pipeline:
- Rule catalog lookup and classification
- Single-folder watcher control
- Multi-folder watcher registry
- Buffered watcher notifications
"""

from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger
import sys

from app.utils.config import Settings, get_settings
from app.models.schemas import WatchedFolder
from app.api import health, rules, watcher, folders
from domains.file_sorting.errors import InvalidWatchTarget
from domains.file_sorting.rules import load_catalog
from domains.file_sorting.sinks import NotificationBuffer
from domains.file_sorting.watchers import FolderWatcher, WatcherRegistry


def configure_logging(level: str = "INFO"):
    """Send loguru output to stdout with the application format."""
    logger.remove()
    logger.add(
        sys.stdout,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
        level=level.upper()
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings: Settings = app.state.settings
    logger.info(f"Starting {settings.api_title} v{settings.api_version}")

    # Rule catalog
    try:
        catalog = load_catalog(settings.rules_file)
    except Exception as e:
        logger.error(f"Failed to load rule catalog: {e}")
        raise

    # Validate folder configuration before any watch is started
    try:
        configured = [
            WatchedFolder(id=folder_id, path=str(path))
            for folder_id, path in settings.get_watch_folders()
        ]
    except ValueError as e:
        logger.error(f"Invalid watch folder configuration: {e}")
        raise

    # Watchers share one notification buffer
    buffer = NotificationBuffer(maxlen=settings.event_buffer_size)
    folder_watcher = FolderWatcher(sink=buffer, health_check_interval=settings.health_check_interval)
    registry = WatcherRegistry(sink=buffer, health_check_interval=settings.health_check_interval)

    app.state.catalog = catalog
    app.state.buffer = buffer
    app.state.watcher = folder_watcher
    app.state.registry = registry

    try:
        if settings.watch_dir:
            try:
                folder_watcher.start(settings.watch_dir)
            except InvalidWatchTarget as e:
                logger.error(f"Configured watch directory ignored: {e}")

        if configured:
            registry.sync(configured)

        yield

    finally:
        # Cleanup
        logger.info("Shutting down application...")
        folder_watcher.close()
        registry.stop_all()
        logger.success("Application shut down complete")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the API with its own watcher, registry and catalog."""
    settings = settings or get_settings()

    application = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description="Folder watching and extension-based file classification",
        lifespan=lifespan
    )
    application.state.settings = settings

    # Exception handler
    @application.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler."""
        logger.error(f"Unhandled exception: {exc}")
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "detail": str(exc) if settings.log_level == "DEBUG" else "An error occurred"
            }
        )

    # Include routers
    application.include_router(health.router, tags=["Health"])
    application.include_router(rules.router, prefix="/rules", tags=["Rules"])
    application.include_router(watcher.router, prefix="/watcher", tags=["Watcher"])
    application.include_router(folders.router, prefix="/folders", tags=["Folders"])

    @application.get("/")
    async def root():
        """Root endpoint."""
        return {
            "service": "Folder Sorter",
            "version": settings.api_version,
            "status": "operational",
            "docs": "/docs",
            "health": "/health"
        }

    return application


settings = get_settings()
configure_logging(settings.log_level)
app = create_app(settings)


def main():
    """Run the API with uvicorn."""
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="127.0.0.1",
        port=settings.api_port,
        log_level=settings.log_level.lower()
    )


if __name__ == "__main__":
    main()
