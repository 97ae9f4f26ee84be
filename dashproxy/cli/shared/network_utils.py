"""Network helpers for CLI commands."""

from __future__ import annotations

import errno
import socket

_WILDCARD_HOSTS = {"0.0.0.0", "::", ""}


def is_port_in_use(host: str, port: int) -> bool:
    """Return True if the port is already bound (e.g. by another dashproxy)."""
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    with socket.socket(family, socket.SOCK_STREAM) as s:
        try:
            s.bind((host, port))
        except OSError as e:
            if e.errno == errno.EADDRINUSE:
                return True
            raise
    return False


def local_base_url(host: str, port: int) -> str:
    """URL a local browser can use to reach the server bound on host:port."""
    if host in _WILDCARD_HOSTS:
        host = "127.0.0.1"
    elif ":" in host:
        host = f"[{host}]"
    return f"http://{host}:{port}"
