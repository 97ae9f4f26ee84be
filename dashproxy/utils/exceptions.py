"""
Exception hierarchy and error handling utilities for dashproxy.

Provides:
- Custom exception classes with error codes
- Error categorization (validation, permission, retryable, fatal)
- Safe error message formatting (no credential leak)
- HTTP status classification for the API exception handlers
"""

from __future__ import annotations

import asyncio
import json
import re
from enum import Enum
from typing import Any


class ErrorCategory(Enum):
    """Error categories for classification."""
    RECOVERABLE = "recoverable"
    RETRYABLE = "retryable"
    FATAL = "fatal"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    PERMISSION = "permission"
    TIMEOUT = "timeout"


class DashProxyError(Exception):
    """Base exception for all dashproxy errors."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        category: ErrorCategory = ErrorCategory.FATAL,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "category": self.category.value,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class ValidationError(DashProxyError):
    """Input validation error (missing or unknown proxy identifiers)."""

    def __init__(self, message: str, field: str | None = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", category=ErrorCategory.VALIDATION, details=details)


class CapabilityError(DashProxyError):
    """The resolved widget type has no API definition."""

    def __init__(self, widget_type: str, message: str = "Service does not support API calls"):
        super().__init__(
            message,
            code="CAPABILITY_ERROR",
            category=ErrorCategory.PERMISSION,
            details={"widget_type": widget_type},
        )


class RpcError(DashProxyError):
    """JSON-RPC error object returned by the target service."""

    def __init__(self, rpc_code: int, message: str, data: Any = None):
        super().__init__(
            message,
            code="RPC_ERROR",
            category=ErrorCategory.RECOVERABLE,
            details={"rpc_code": rpc_code},
        )
        self.rpc_code = rpc_code
        self.data = data

    def to_rpc_error(self) -> dict[str, Any]:
        """Wire form of the error object (code and message only)."""
        return {"code": self.rpc_code, "message": self.message}


class TransportError(DashProxyError):
    """Non-200 status, network failure or undecodable body from the target."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "TRANSPORT_ERROR",
        status_code: int | None = None,
    ) -> None:
        super().__init__(
            message,
            code=code,
            category=ErrorCategory.FATAL,
            details={"status_code": status_code},
        )
        self.status_code = status_code


class JsonRpcProtocolError(TransportError):
    """Response decoded but does not form a valid JSON-RPC 2.0 reply to our request."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="JSONRPC_PROTOCOL_ERROR")


_SENSITIVE_PATTERNS = [
    re.compile(r"(api[_-]?key|token|secret|password|auth)[=:]\s*['\"]?([^\s'\"]+)['\"]?", re.IGNORECASE),
    re.compile(r"(basic|bearer)\s+[a-zA-Z0-9\-._~+/]+=*", re.IGNORECASE),
    re.compile(r"(?<=://)[^/\s:@]+:[^/\s@]+(?=@)"),
    re.compile(r"[a-zA-Z0-9]{32,}"),
]


def sanitize_error_message(message: str, replacement: str = "[REDACTED]") -> str:
    """Remove sensitive information from error messages."""
    sanitized = message
    for pattern in _SENSITIVE_PATTERNS:
        sanitized = pattern.sub(replacement, sanitized)
    return sanitized


def classify_exception(exc: Exception) -> tuple[str, ErrorCategory, bool]:
    """
    Classify an exception and return (error_code, category, should_retry).

    Returns:
        Tuple of (error_code, category, should_retry)
    """
    exc_str = str(exc).lower()

    if isinstance(exc, DashProxyError):
        return exc.code, exc.category, exc.category == ErrorCategory.RETRYABLE

    if isinstance(exc, FileNotFoundError):
        return "FILE_NOT_FOUND", ErrorCategory.NOT_FOUND, False

    if isinstance(exc, PermissionError):
        return "PERMISSION_DENIED", ErrorCategory.PERMISSION, False

    if isinstance(exc, asyncio.TimeoutError):
        return "TIMEOUT", ErrorCategory.TIMEOUT, True

    if isinstance(exc, ConnectionError):
        return "CONNECTION_ERROR", ErrorCategory.RETRYABLE, True

    if isinstance(exc, json.JSONDecodeError):
        return "JSON_PARSE_ERROR", ErrorCategory.VALIDATION, False

    if isinstance(exc, ValueError):
        return "INVALID_VALUE", ErrorCategory.VALIDATION, False

    if isinstance(exc, KeyError):
        return "MISSING_KEY", ErrorCategory.VALIDATION, False

    if "timeout" in exc_str or "timed out" in exc_str:
        return "TIMEOUT", ErrorCategory.TIMEOUT, True

    if "connection" in exc_str or "network" in exc_str:
        return "CONNECTION_ERROR", ErrorCategory.RETRYABLE, True

    return "INTERNAL_ERROR", ErrorCategory.FATAL, False


_CATEGORY_TO_STATUS = {
    ErrorCategory.VALIDATION: 400,
    ErrorCategory.NOT_FOUND: 404,
    ErrorCategory.PERMISSION: 403,
    ErrorCategory.TIMEOUT: 504,
    ErrorCategory.RETRYABLE: 503,
}


def classify_http_status(exc: Exception) -> int:
    """Map exception to appropriate HTTP status code."""
    if isinstance(exc, DashProxyError):
        return _CATEGORY_TO_STATUS.get(exc.category, 500)
    _, category, _ = classify_exception(exc)
    return _CATEGORY_TO_STATUS.get(category, 500)


def unknown_error_detail(exc: Exception | None) -> str:
    """Format generic unknown-error detail consistently across endpoints."""
    if exc is None:
        return "Unknown error"
    return str(exc) or exc.__class__.__name__
