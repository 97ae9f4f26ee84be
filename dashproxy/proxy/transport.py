"""HTTP transport for proxied calls: one request, one response, no retries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from dashproxy.utils.exceptions import TransportError


@dataclass
class TransportResult:
    status: int
    content_type: str
    body: bytes

    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


class Transport(Protocol):
    """Performs a single HTTP exchange.

    Ordinary non-2xx responses are returned as results; only network-level
    failures raise.
    """

    async def send(
        self,
        url: str,
        *,
        method: str = "POST",
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
    ) -> TransportResult:
        ...


class HttpTransport:
    def __init__(self, *, timeout: float = 30.0, verify_ssl: bool = True):
        self.timeout = timeout
        self.verify_ssl = verify_ssl

    @classmethod
    def from_config(cls, config: Any) -> HttpTransport:
        transport_cfg = getattr(config, "transport", None)
        if transport_cfg is None:
            return cls()
        return cls(timeout=transport_cfg.timeout_seconds, verify_ssl=transport_cfg.verify_ssl)

    async def send(
        self,
        url: str,
        *,
        method: str = "POST",
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
    ) -> TransportResult:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, verify=self.verify_ssl) as client:
                resp = await client.request(method, url, headers=headers, content=body)
        except httpx.TimeoutException as exc:
            raise TransportError(
                f"timeout: {method} request exceeded {self.timeout}s",
                code="TRANSPORT_TIMEOUT",
            ) from exc
        except httpx.RequestError as exc:
            raise TransportError(
                f"network error: {exc}",
                code="TRANSPORT_NETWORK_ERROR",
            ) from exc
        except httpx.InvalidURL as exc:
            raise TransportError(
                f"invalid target url: {exc}",
                code="TRANSPORT_INVALID_URL",
            ) from exc

        return TransportResult(
            status=int(resp.status_code),
            content_type=resp.headers.get("content-type", ""),
            body=resp.content,
        )
