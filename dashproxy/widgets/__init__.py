"""Widget types and their API capabilities."""

from dashproxy.widgets.registry import (
    BUILTIN_WIDGETS,
    WidgetCapability,
    WidgetRegistry,
    build_widget_registry,
)

__all__ = ["BUILTIN_WIDGETS", "WidgetCapability", "WidgetRegistry", "build_widget_registry"]
