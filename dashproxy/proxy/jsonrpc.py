"""JSON-RPC 2.0 client for widget API calls.

One ``JsonRpcClient`` is built per proxied call. It owns a correlation table
(request id -> future), sends the request as a single POST through the
transport and resolves the pending future from the decoded response.
"""

from __future__ import annotations

import asyncio
import base64
import itertools
import json
from dataclasses import dataclass
from typing import Any, Callable

from loguru import logger

from dashproxy.proxy.transport import HttpTransport, Transport
from dashproxy.utils.exceptions import (
    JsonRpcProtocolError,
    RpcError,
    TransportError,
    sanitize_error_message,
    unknown_error_detail,
)

JSONRPC_VERSION = "2.0"
JSON_CONTENT_TYPE = "application/json"
# Error code reported to the dashboard when the call failed below the RPC layer.
TRANSPORT_FAILURE_CODE = 2


def build_headers(username: str | None = None, password: str | None = None) -> dict[str, str]:
    """Request headers; Basic auth only when both credentials are present."""
    headers = {
        "content-type": JSON_CONTENT_TYPE,
        "accept": JSON_CONTENT_TYPE,
    }
    if username and password:
        token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
        headers["authorization"] = f"Basic {token}"
    return headers


def dump_json(payload: Any) -> bytes:
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False, allow_nan=False).encode("utf-8")


def _reject_constant(name: str) -> Any:
    # NaN and Infinity are not JSON; browsers refuse to parse them.
    raise ValueError(f"non-standard JSON constant {name}")


def _error_present(error: Any) -> bool:
    # An empty object still signals an error; null, "" and false do not.
    return isinstance(error, dict) or bool(error)


@dataclass
class RpcCall:
    method: str
    params: Any = None

    def to_request(self, request_id: int | str) -> dict[str, Any]:
        return {
            "jsonrpc": JSONRPC_VERSION,
            "id": request_id,
            "method": self.method,
            "params": self.params,
        }


@dataclass
class RpcResponseEnvelope:
    """Decoded response; ``has_result`` keeps an absent result apart from a null one."""

    id: Any = None
    result: Any = None
    has_result: bool = False
    error: Any = None

    @classmethod
    def from_wire(cls, payload: Any) -> RpcResponseEnvelope:
        if not isinstance(payload, dict):
            raise JsonRpcProtocolError("response is not a JSON-RPC object")
        error = payload.get("error")
        has_error = _error_present(error)
        has_result = "result" in payload
        result = payload.get("result")
        if has_error and has_result and result is None:
            # null result next to an error is a placeholder, not a value
            has_result = False
        return cls(
            id=payload.get("id"),
            result=result if has_result else None,
            has_result=has_result,
            error=error if has_error else None,
        )


def rpc_error_from_object(error: Any) -> RpcError:
    """Build RpcError from a wire error object, tolerating sloppy servers."""
    if not isinstance(error, dict):
        return RpcError(0, str(error))
    code = error.get("code")
    if isinstance(code, bool) or not isinstance(code, int):
        try:
            code = int(code)
        except (TypeError, ValueError):
            code = 0
    message = error.get("message")
    return RpcError(code, "" if message is None else str(message), error.get("data"))


class JsonRpcClient:
    """Issues JSON-RPC requests to one URL and correlates responses by id."""

    def __init__(
        self,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        transport: Transport | None = None,
    ):
        self.url = url
        self._headers = dict(headers or build_headers())
        self._transport = transport or HttpTransport()
        self._ids = itertools.count(1)
        self._pending: dict[Any, asyncio.Future[Any]] = {}

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    async def request(self, method: str, params: Any = None) -> Any:
        """Call ``method`` and return its result; raises RpcError or TransportError."""
        request_id = next(self._ids)
        fut: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        self._pending[request_id] = fut
        try:
            envelope = await self._exchange(RpcCall(method, params).to_request(request_id))
            if not self.receive(envelope):
                raise JsonRpcProtocolError(
                    f"response id {envelope.id!r} does not match request id {request_id!r}"
                )
            return await fut
        finally:
            self._pending.pop(request_id, None)

    def receive(self, envelope: RpcResponseEnvelope) -> bool:
        """Complete the pending request the envelope answers. False if none matches."""
        key = envelope.id
        if key is None and len(self._pending) == 1:
            # Some servers omit the id, and parse errors come back with id null.
            key = next(iter(self._pending))
        if isinstance(key, bool) or not isinstance(key, (int, str)):
            return False
        fut = self._pending.get(key)
        if fut is None or fut.done():
            return False
        if envelope.has_result and envelope.error is None:
            fut.set_result(envelope.result)
        elif envelope.error is not None and not envelope.has_result:
            fut.set_exception(rpc_error_from_object(envelope.error))
        elif envelope.has_result:
            fut.set_exception(JsonRpcProtocolError("response carries both a result and an error"))
        else:
            fut.set_exception(JsonRpcProtocolError("response carries neither a result nor an error"))
        return True

    async def _exchange(self, payload: dict[str, Any]) -> RpcResponseEnvelope:
        result = await self._transport.send(
            self.url,
            method="POST",
            headers=dict(self._headers),
            body=dump_json(payload),
        )
        text = result.text()
        if result.status != 200:
            raise TransportError(
                text if text.strip() else f"HTTP {result.status}",
                code="TRANSPORT_HTTP_ERROR",
                status_code=result.status,
            )
        try:
            decoded = json.loads(text, parse_constant=_reject_constant)
        except ValueError as exc:
            raise TransportError(
                f"invalid JSON in response: {exc}",
                code="TRANSPORT_BAD_RESPONSE",
                status_code=result.status,
            ) from exc
        return RpcResponseEnvelope.from_wire(decoded)


async def send_json_rpc_request(
    url: str,
    method: str,
    params: Any = None,
    username: str | None = None,
    password: str | None = None,
    *,
    transport: Transport | None = None,
    log_warning: Callable[..., None] = logger.warning,
) -> tuple[int, str, bytes]:
    """
    Perform one JSON-RPC call and map the outcome to (status, content type, body).

    - success: 200 ``{"result": ...}``
    - RPC error object: 200 ``{"result": null, "error": {"code", "message"}}``
    - anything else: 500 with error code 2 and the failure text
    """
    client = JsonRpcClient(url, headers=build_headers(username, password), transport=transport)
    try:
        result = await client.request(method, params)
        return 200, JSON_CONTENT_TYPE, dump_json({"result": result})
    except RpcError as exc:
        return 200, JSON_CONTENT_TYPE, dump_json({"result": None, "error": exc.to_rpc_error()})
    except Exception as exc:
        log_warning("Error calling JSON-RPC endpoint: {}. {}", sanitize_error_message(url), exc)
        return 500, JSON_CONTENT_TYPE, dump_json(
            {"result": None, "error": {"code": TRANSPORT_FAILURE_CODE, "message": unknown_error_detail(exc)}}
        )
