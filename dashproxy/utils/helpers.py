"""Filesystem helpers shared by config and logging."""

from __future__ import annotations

from pathlib import Path


def ensure_dir(path: Path) -> Path:
    """Create the directory (and parents) if missing; return it."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_path() -> Path:
    """Get the dashproxy data directory (~/.dashproxy)."""
    return ensure_dir(Path.home() / ".dashproxy")
