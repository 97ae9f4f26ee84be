"""Widget capability registry.

Maps a widget type (``nzbget``, ``kodi``, ...) to the API URL template the
proxy may call for it. Populated once at start-up from the built-in table and
``config.widgets``; queried by value afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable


@dataclass(frozen=True)
class WidgetCapability:
    widget_type: str
    api: str | None = None
    description: str = ""

    @property
    def supports_api(self) -> bool:
        return bool(self.api)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.widget_type,
            "api": self.api,
            "supportsApi": self.supports_api,
            "description": self.description,
        }


BUILTIN_WIDGETS: tuple[WidgetCapability, ...] = (
    WidgetCapability("nzbget", "{url}/jsonrpc", "NZBGet download client"),
    WidgetCapability("kodi", "{url}/jsonrpc", "Kodi media center"),
)


class WidgetRegistry:
    """
    Registry for widget types.

    Unknown types and types registered without an API template both report
    no API support.
    """

    def __init__(self, capabilities: Iterable[WidgetCapability] = ()):
        self._capabilities: dict[str, WidgetCapability] = {}
        for capability in capabilities:
            self.register(capability)

    def register(self, capability: WidgetCapability) -> None:
        """Register (or replace) a widget type."""
        self._capabilities[capability.widget_type] = capability

    def unregister(self, widget_type: str) -> None:
        self._capabilities.pop(widget_type, None)

    def get(self, widget_type: str) -> WidgetCapability | None:
        return self._capabilities.get(widget_type)

    def has_api_support(self, widget_type: str) -> bool:
        capability = self._capabilities.get(widget_type)
        return capability is not None and capability.supports_api

    def api_template(self, widget_type: str) -> str | None:
        """API URL template for the type, or None when it cannot be called."""
        capability = self._capabilities.get(widget_type)
        if capability is None or not capability.supports_api:
            return None
        return capability.api

    def capabilities(self) -> list[WidgetCapability]:
        return sorted(self._capabilities.values(), key=lambda c: c.widget_type)

    def __len__(self) -> int:
        return len(self._capabilities)

    def __contains__(self, widget_type: str) -> bool:
        return widget_type in self._capabilities


def build_widget_registry(config: Any = None) -> WidgetRegistry:
    """Built-in widget types, then ``config.widgets`` entries layered on top."""
    registry = WidgetRegistry(BUILTIN_WIDGETS)
    overrides = getattr(config, "widgets", None) or {}
    for widget_type, entry in overrides.items():
        registry.register(
            WidgetCapability(
                widget_type=widget_type,
                api=(entry.api or "").strip() or None,
                description=entry.description,
            )
        )
    return registry
