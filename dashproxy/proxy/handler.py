"""Inbound proxy handler: (group, service, endpoint) -> JSON-RPC call -> HTTP envelope."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable

from loguru import logger

from dashproxy.config.schema import WidgetConfig
from dashproxy.proxy.jsonrpc import JSON_CONTENT_TYPE, send_json_rpc_request
from dashproxy.proxy.transport import Transport
from dashproxy.services.resolver import ServiceResolver
from dashproxy.utils.exceptions import (
    CapabilityError,
    DashProxyError,
    ValidationError,
    classify_http_status,
)

INVALID_SERVICE_MESSAGE = "Invalid proxy service type"
INVALID_ENDPOINT_MESSAGE = "Invalid proxy endpoint"


@dataclass
class ProxyResponse:
    status_code: int
    content_type: str
    body: bytes

    @classmethod
    def error(cls, status_code: int, message: str) -> ProxyResponse:
        return cls(status_code, JSON_CONTENT_TYPE, json.dumps({"error": message}).encode("utf-8"))

    def json(self) -> Any:
        return json.loads(self.body.decode("utf-8"))


def resolve_target(
    resolver: ServiceResolver,
    group: str | None,
    service: str | None,
    endpoint: str | None,
) -> tuple[WidgetConfig, str]:
    """Validate identifiers and return (widget, target url); raises before any RPC is issued."""
    if not group or not service:
        raise ValidationError(INVALID_SERVICE_MESSAGE, field="service")
    widget = resolver.resolve(group, service)
    if widget is None:
        raise ValidationError(INVALID_SERVICE_MESSAGE, field="service")
    template = resolver.api_capability_for(widget.type)
    if not template:
        raise CapabilityError(widget.type)
    if not endpoint:
        raise ValidationError(INVALID_ENDPOINT_MESSAGE, field="endpoint")
    return widget, resolver.format_url(template, widget.template_fields())


async def jsonrpc_proxy_handler(
    *,
    group: str | None,
    service: str | None,
    endpoint: str | None,
    resolver: ServiceResolver,
    transport: Transport | None = None,
    log_debug: Callable[..., None] = logger.debug,
    log_warning: Callable[..., None] = logger.warning,
) -> ProxyResponse:
    """Forward ``endpoint`` as a JSON-RPC method to the service's widget API."""
    try:
        widget, url = resolve_target(resolver, group, service, endpoint)
    except DashProxyError as exc:
        if isinstance(exc, CapabilityError):
            log_debug("Widget type '{}' of service '{}' in group '{}' has no API", exc.details["widget_type"], service, group)
        elif exc.details.get("field") == "endpoint":
            log_debug("Missing proxy endpoint for service '{}' in group '{}'", service, group)
        else:
            log_debug("Invalid or missing proxy service type '{}' in group '{}'", service, group)
        return ProxyResponse.error(classify_http_status(exc), exc.message)

    status, content_type, body = await send_json_rpc_request(
        url,
        endpoint,
        None,
        widget.username,
        widget.password,
        transport=transport,
        log_warning=log_warning,
    )
    return ProxyResponse(status, content_type, body)
