"""Helpers for proxy-related HTTP endpoints."""

from __future__ import annotations

from typing import Any, Callable

from fastapi import Response

from dashproxy.proxy.handler import jsonrpc_proxy_handler
from dashproxy.proxy.transport import Transport
from dashproxy.services.resolver import ServiceResolver
from dashproxy.widgets.registry import WidgetRegistry


async def proxy_service_response(
    *,
    query: dict[str, str],
    resolver: ServiceResolver,
    transport: Transport | None,
    log_debug: Callable[..., None],
    log_warning: Callable[..., None],
) -> Response:
    """Run the JSON-RPC proxy handler for one dashboard request and wrap its output."""
    proxied = await jsonrpc_proxy_handler(
        group=query.get("group"),
        service=query.get("service"),
        endpoint=query.get("endpoint"),
        resolver=resolver,
        transport=transport,
        log_debug=log_debug,
        log_warning=log_warning,
    )
    return Response(
        content=proxied.body,
        status_code=proxied.status_code,
        media_type=proxied.content_type,
    )


def list_widgets_response(*, registry: WidgetRegistry) -> dict[str, Any]:
    return {
        "ok": True,
        "widgets": [capability.to_dict() for capability in registry.capabilities()],
    }


def list_services_response(*, config: Any, registry: WidgetRegistry) -> dict[str, Any]:
    """Configured services without credentials or connection fields."""
    services = []
    for group, name, entry in config.iter_services():
        widget_type = entry.widget.type if entry.widget else None
        services.append(
            {
                "group": group,
                "service": name,
                "href": entry.href,
                "widgetType": widget_type,
                "supportsApi": bool(widget_type) and registry.has_api_support(widget_type),
            }
        )
    return {"ok": True, "services": services}
