"""
Configuration management for Folder Sorter.

Uses pydantic-settings to load configuration from environment variables
and .env files.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # API Configuration
    api_port: int = 8000
    log_level: str = "INFO"
    api_title: str = "Folder Sorter API"
    api_version: str = "1.0.0"

    # Watch Configuration
    watch_dir: Optional[Path] = None
    watch_folders: str = ""  # id=path,id=path
    health_check_interval: float = 1.0  # seconds
    event_buffer_size: int = 500

    # Rule Configuration
    rules_file: Optional[Path] = None
    destination_root: Path = Path.home()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    def get_watch_folders(self) -> list[tuple[str, Path]]:
        """Parse watch folders into (id, path) pairs."""
        folders = []
        for entry in self.watch_folders.split(','):
            entry = entry.strip()
            if not entry:
                continue
            folder_id, sep, path = entry.partition('=')
            if not sep or not folder_id.strip() or not path.strip():
                raise ValueError(f"Invalid watch folder entry: {entry!r} (expected id=path)")
            folders.append((folder_id.strip(), Path(path.strip()).expanduser()))
        return folders

    def get_destination_root(self) -> Path:
        """Destination root with ~ expanded."""
        return self.destination_root.expanduser()


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
