"""Cached configuration access facade.

The proxy reads config once per process; ``DASHPROXY_CONFIG`` points the
facade at a file other than ~/.dashproxy/config.json.
"""

from __future__ import annotations

import os
import threading
from pathlib import Path

from dashproxy.config.loader import get_config_path, load_config
from dashproxy.config.schema import Config

_lock = threading.RLock()
_cache: dict[str, Config] = {}


def resolve_config_path(config_path: Path | None = None) -> Path:
    """Explicit path, else $DASHPROXY_CONFIG, else the default location."""
    if config_path:
        return Path(config_path).expanduser().resolve()
    override = (os.environ.get("DASHPROXY_CONFIG") or "").strip()
    if override:
        return Path(override).expanduser().resolve()
    return get_config_path().expanduser().resolve()


def get_config(*, config_path: Path | None = None, force_reload: bool = False) -> Config:
    """Get config with process-local cache and optional refresh."""
    path = resolve_config_path(config_path)
    key = str(path)
    with _lock:
        if force_reload or key not in _cache:
            _cache[key] = load_config(path)
        return _cache[key]


def set_config(config: Config, *, config_path: Path | None = None) -> None:
    """Seed the cache with an already-built config (CLI overrides, tests)."""
    with _lock:
        _cache[str(resolve_config_path(config_path))] = config


def clear_config_cache(*, config_path: Path | None = None) -> None:
    """Clear cached config entry (or all cache entries)."""
    with _lock:
        if config_path is None:
            _cache.clear()
            return
        _cache.pop(str(resolve_config_path(config_path)), None)
