"""Utility functions for dashproxy."""

from dashproxy.utils.helpers import ensure_dir, get_data_path
from dashproxy.utils.exceptions import (
    DashProxyError,
    ValidationError,
    CapabilityError,
    RpcError,
    TransportError,
    JsonRpcProtocolError,
    ErrorCategory,
    classify_exception,
    classify_http_status,
    sanitize_error_message,
    unknown_error_detail,
)

__all__ = [
    "ensure_dir",
    "get_data_path",
    "DashProxyError",
    "ValidationError",
    "CapabilityError",
    "RpcError",
    "TransportError",
    "JsonRpcProtocolError",
    "ErrorCategory",
    "classify_exception",
    "classify_http_status",
    "sanitize_error_message",
    "unknown_error_detail",
]
