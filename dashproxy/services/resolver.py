"""Service resolution: abstract (group, service) -> widget, capability and target URL."""

from __future__ import annotations

import re
from typing import Any

from dashproxy.config.schema import Config, WidgetConfig
from dashproxy.widgets.registry import WidgetRegistry, build_widget_registry

_PLACEHOLDER = re.compile(r"\{(.*?)\}")


def format_api_call(template: str, fields: dict[str, Any]) -> str:
    """
    Fill ``{name}`` placeholders in an API template from widget fields.

    Missing fields become empty strings. Two passes, so a field value may
    itself contain a placeholder naming another field.
    """

    def _replace(match: re.Match[str]) -> str:
        value = fields.get(match.group(1))
        if value is None or value is False:
            return ""
        return str(value).rstrip("/")

    url = template.rstrip("/")
    return _PLACEHOLDER.sub(_replace, _PLACEHOLDER.sub(_replace, url))


class ServiceResolver:
    """Read-only view over configured services and the widget registry."""

    def __init__(self, config: Config, registry: WidgetRegistry):
        self._config = config
        self._registry = registry

    @classmethod
    def from_config(cls, config: Config) -> ServiceResolver:
        return cls(config, build_widget_registry(config))

    @property
    def registry(self) -> WidgetRegistry:
        return self._registry

    def resolve(self, group: str, service: str) -> WidgetConfig | None:
        """Widget configured for the service, or None when unknown or widget-less."""
        entry = self._config.get_service(group, service)
        if entry is None:
            return None
        return entry.widget

    def api_capability_for(self, widget_type: str) -> str | None:
        return self._registry.api_template(widget_type)

    def format_url(self, template: str, fields: dict[str, Any]) -> str:
        return format_api_call(template, fields)
