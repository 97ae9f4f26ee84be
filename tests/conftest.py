"""Pytest hooks and fixtures."""

import json
import os

import pytest

from dashproxy.config import access
from dashproxy.proxy.transport import TransportResult


def pytest_configure(config):
    """Register custom markers (also in pyproject.toml)."""
    config.addinivalue_line(
        "markers",
        "requires_network: talks to a real service (skipped in CI)",
    )


def pytest_collection_modifyitems(config, items):
    """Skip requires_network tests when running in CI."""
    if os.environ.get("CI") != "true":
        return
    skip = pytest.mark.skip(reason="Requires a reachable service (skipped in CI)")
    for item in items:
        if "requires_network" in item.keywords:
            item.add_marker(skip)


@pytest.fixture(autouse=True)
def _isolate_config(monkeypatch):
    monkeypatch.delenv("DASHPROXY_CONFIG", raising=False)
    access.clear_config_cache()
    yield
    access.clear_config_cache()


class FakeTransport:
    """Records outbound exchanges and answers from ``responder(call) -> (status, payload)``."""

    def __init__(self, responder=None, *, exc: Exception | None = None):
        self.responder = responder
        self.exc = exc
        self.calls: list[dict] = []

    async def send(self, url, *, method="POST", headers=None, body=None):
        call = {
            "url": url,
            "method": method,
            "headers": dict(headers or {}),
            "body": json.loads(body.decode("utf-8")) if body else None,
        }
        self.calls.append(call)
        if self.exc is not None:
            raise self.exc
        status, payload = self.responder(call)
        if isinstance(payload, (bytes, str)):
            raw = payload.encode("utf-8") if isinstance(payload, str) else payload
        else:
            raw = json.dumps(payload).encode("utf-8")
        return TransportResult(status=status, content_type="application/json", body=raw)


@pytest.fixture
def fake_transport():
    return FakeTransport


@pytest.fixture
def rpc_reply():
    """Responder factory echoing the request id back with ``result`` or ``error``."""

    def _make(**fields):
        def _responder(call):
            payload = {"jsonrpc": "2.0", "id": call["body"]["id"]}
            payload.update(fields)
            return 200, payload

        return _responder

    return _make
