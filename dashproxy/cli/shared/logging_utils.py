"""Loguru helpers for consistent console and file logging."""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

from dashproxy.utils.helpers import ensure_dir, get_data_path

_SINK_IDS: dict[str, int] = {}


def log_dir() -> Path:
    return get_data_path() / "logs"


def ensure_rotating_log_file(name: str, level: str = "INFO") -> Path:
    """Ensure a rotating log sink for the given command name."""
    log_path = log_dir() / f"{name}.log"
    if name in _SINK_IDS:
        return log_path
    ensure_dir(log_path.parent)
    sink_id = logger.add(
        str(log_path),
        level=level,
        rotation="10 MB",
        retention="14 days",
        enqueue=True,
        encoding="utf-8",
        backtrace=False,
        diagnose=False,
    )
    _SINK_IDS[name] = sink_id
    return log_path


def configure_logging(level: str = "INFO", *, to_file: bool = False, name: str = "dashproxy") -> Path | None:
    """Replace loguru's default stderr sink with one at ``level``; optionally add a file sink."""
    logger.remove()
    _SINK_IDS.clear()
    logger.add(sys.stderr, level=level.upper(), backtrace=False, diagnose=False)
    if to_file:
        return ensure_rotating_log_file(name, level=level.upper())
    return None
