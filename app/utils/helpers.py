"""
Helper utilities for Folder Sorter.

Common functions used across domains.
"""

from datetime import datetime, timezone
from pathlib import Path
from uuid import uuid4


def generate_uuid() -> str:
    """Generate a unique identifier."""
    return str(uuid4())


def now_utc() -> datetime:
    """Get current timestamp as timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def normalize_extension(extension: str) -> str:
    """
    Normalize an extension to its lowercase, dot-prefixed form.

    Args:
        extension: Extension with or without a leading dot, any case

    Returns:
        Normalized extension (e.g. "PDF" -> ".pdf"), or "" for empty input
    """
    ext = extension.strip().lower()
    if not ext or ext == '.':
        return ''
    if not ext.startswith('.'):
        ext = '.' + ext
    return ext


def is_hidden(path: Path) -> bool:
    """Check if path is hidden (starts with dot)."""
    return path.name.startswith('.')
