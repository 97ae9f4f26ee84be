"""JSON-RPC proxying: transport, client and inbound handler."""

from dashproxy.proxy.handler import ProxyResponse, jsonrpc_proxy_handler
from dashproxy.proxy.jsonrpc import JsonRpcClient, RpcCall, RpcResponseEnvelope, send_json_rpc_request
from dashproxy.proxy.transport import HttpTransport, Transport, TransportResult

__all__ = [
    "HttpTransport",
    "JsonRpcClient",
    "ProxyResponse",
    "RpcCall",
    "RpcResponseEnvelope",
    "Transport",
    "TransportResult",
    "jsonrpc_proxy_handler",
    "send_json_rpc_request",
]
