"""Configuration module for dashproxy."""

from dashproxy.config.loader import load_config, get_config_path, save_config
from dashproxy.config.schema import Config, ServiceEntry, WidgetConfig, WidgetTypeConfig
from dashproxy.config.access import get_config, set_config, clear_config_cache

__all__ = [
    "Config",
    "ServiceEntry",
    "WidgetConfig",
    "WidgetTypeConfig",
    "load_config",
    "save_config",
    "get_config_path",
    "get_config",
    "set_config",
    "clear_config_cache",
]
