"""Configuration schema using Pydantic.

Single data model for the proxy: server, transport, logging, the service
catalogue (group -> service -> widget) and widget type overrides. Persisted
to ~/.dashproxy/config.json.
"""

from typing import Any

from pydantic import BaseModel, Field, ConfigDict
from pydantic_settings import BaseSettings


class ServerConfig(BaseModel):
    """HTTP server configuration."""
    host: str = "127.0.0.1"
    port: int = 3010
    # When set, /api requires Authorization: Bearer <token> or X-API-Key.
    api_token: str = ""
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])


class TransportConfig(BaseModel):
    """Outbound HTTP exchange settings."""
    timeout_seconds: float = 30.0
    verify_ssl: bool = True


class LoggingConfig(BaseModel):
    """Loguru sink configuration."""
    level: str = "INFO"
    file: bool = False  # Rotating file under ~/.dashproxy/logs


class WidgetConfig(BaseModel):
    """Widget bound to one service instance: type, credentials and connection fields.

    Unknown keys (e.g. ``key``, ``slug``, ``port``) are kept so URL templates
    can reference them.
    """
    model_config = ConfigDict(extra="allow")

    type: str
    url: str = ""
    username: str | None = None
    password: str | None = None

    def template_fields(self) -> dict[str, Any]:
        """All widget fields, declared and extra, for URL templating."""
        return self.model_dump(exclude_none=True)


class ServiceEntry(BaseModel):
    """A dashboard service tile; only ``widget`` matters to the proxy."""
    href: str = ""
    description: str = ""
    widget: WidgetConfig | None = None


class WidgetTypeConfig(BaseModel):
    """Per-type capability override. ``api: null`` disables API calls for the type."""
    api: str | None = None
    description: str = ""


class EnvConfig(BaseModel):
    """Inline env vars applied to process when not already set."""
    vars: dict[str, str] | None = None  # key -> value; applied with setdefault so existing env wins


class Config(BaseSettings):
    """Root configuration for dashproxy."""
    server: ServerConfig = Field(default_factory=ServerConfig)
    transport: TransportConfig = Field(default_factory=TransportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    services: dict[str, dict[str, ServiceEntry]] = Field(default_factory=dict)
    widgets: dict[str, WidgetTypeConfig] = Field(default_factory=dict)
    env: EnvConfig = Field(default_factory=EnvConfig)

    def get_service(self, group: str, service: str) -> ServiceEntry | None:
        """Look up a configured service by group and name."""
        return (self.services.get(group) or {}).get(service)

    def iter_services(self):
        """Yield (group, name, entry) for every configured service."""
        for group, entries in self.services.items():
            for name, entry in entries.items():
                yield group, name, entry

    model_config = ConfigDict(
        env_prefix="DASHPROXY_",
        env_nested_delimiter="__"
    )
