"""Configuration loading utilities."""

import json
import os
import re
from pathlib import Path
from typing import Any

from dashproxy.config.schema import Config

# {{DASHPROXY_VAR_NAME}} placeholders in string values are read from the environment.
_ENV_PLACEHOLDER = re.compile(r"\{\{\s*(DASHPROXY_VAR_[A-Za-z0-9_]+)\s*\}\}")

# Keys whose children are user-chosen names (group, service, widget type), not schema fields.
# Widget connection fields are kept as written too, since URL templates name them.
_NAME_KEYED_SECTIONS = {"services", "widgets"}


def get_config_path() -> Path:
    """Get the default configuration file path."""
    return Path.home() / ".dashproxy" / "config.json"


def load_config(config_path: Path | None = None) -> Config:
    """
    Load configuration from file or create default.

    Args:
        config_path: Optional path to config file. Uses default if not provided.

    Returns:
        Loaded configuration object.
    """
    path = config_path or get_config_path()

    if path.exists():
        try:
            with open(path) as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("config root must be a JSON object")
            data = substitute_env_placeholders(data)
            cfg = Config.model_validate(convert_keys(data))
            _apply_config_env_vars(cfg)
            return cfg
        except (json.JSONDecodeError, ValueError) as e:
            raise ValueError(
                f"Failed to load config from {path}: {e}. "
                "Fix the file or remove it to regenerate defaults."
            ) from e

    return Config()


def _apply_config_env_vars(cfg: Config) -> None:
    """Apply config.env.vars to os.environ with setdefault (do not overwrite existing)."""
    if not cfg.env or not cfg.env.vars:
        return
    for key, value in cfg.env.vars.items():
        if isinstance(key, str) and isinstance(value, str):
            os.environ.setdefault(key, value)


def substitute_env_placeholders(data: Any, environ: dict[str, str] | None = None) -> Any:
    """Replace {{DASHPROXY_VAR_*}} in string values; unknown variables are left untouched."""
    env = os.environ if environ is None else environ
    if isinstance(data, dict):
        return {k: substitute_env_placeholders(v, env) for k, v in data.items()}
    if isinstance(data, list):
        return [substitute_env_placeholders(v, env) for v in data]
    if isinstance(data, str):
        return _ENV_PLACEHOLDER.sub(lambda m: env.get(m.group(1), m.group(0)), data)
    return data


def save_config(config: Config, config_path: Path | None = None) -> None:
    """
    Save configuration to file.

    Args:
        config: Configuration to save.
        config_path: Optional path to save to. Uses default if not provided.
    """
    path = config_path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    data = config.model_dump(exclude_none=True)
    data = convert_to_camel(data)

    with open(path, "w") as f:
        json.dump(data, f, indent=2)
    # Keep facade cache coherent without introducing hard import cycles.
    from dashproxy.config.access import clear_config_cache

    clear_config_cache(config_path=path)


def convert_keys(data: Any) -> Any:
    """Convert camelCase keys to snake_case for Pydantic.
    Names under services/widgets, widget fields and env.vars keys are preserved."""
    if isinstance(data, dict):
        result: dict[str, Any] = {}
        for k, v in data.items():
            new_k = camel_to_snake(k)
            if new_k in _NAME_KEYED_SECTIONS and isinstance(v, dict):
                result[new_k] = _convert_named(v, depth=2 if new_k == "services" else 1)
            elif new_k == "widget" and isinstance(v, dict):
                result["widget"] = dict(v)
            elif new_k == "env" and isinstance(v, dict):
                result["env"] = {
                    camel_to_snake(ek): dict(ev) if camel_to_snake(ek) == "vars" and isinstance(ev, dict) else ev
                    for ek, ev in v.items()
                }
            else:
                result[new_k] = convert_keys(v)
        return result
    if isinstance(data, list):
        return [convert_keys(item) for item in data]
    return data


def _convert_named(data: dict[str, Any], depth: int) -> dict[str, Any]:
    if depth <= 1:
        return {name: convert_keys(v) for name, v in data.items()}
    return {
        name: _convert_named(v, depth - 1) if isinstance(v, dict) else v
        for name, v in data.items()
    }


def convert_to_camel(data: Any) -> Any:
    """Convert snake_case keys to camelCase.
    Names under services/widgets, widget fields and env.vars keys are preserved."""
    if isinstance(data, dict):
        result: dict[str, Any] = {}
        for k, v in data.items():
            new_k = snake_to_camel(k)
            if k in _NAME_KEYED_SECTIONS and isinstance(v, dict):
                result[new_k] = _camel_named(v, depth=2 if k == "services" else 1)
            elif k == "widget" and isinstance(v, dict):
                result["widget"] = dict(v)
            elif k == "env" and isinstance(v, dict):
                result["env"] = {ek: dict(ev) if isinstance(ev, dict) else ev for ek, ev in v.items()}
            else:
                result[new_k] = convert_to_camel(v)
        return result
    if isinstance(data, list):
        return [convert_to_camel(item) for item in data]
    return data


def _camel_named(data: dict[str, Any], depth: int) -> dict[str, Any]:
    if depth <= 1:
        return {name: convert_to_camel(v) for name, v in data.items()}
    return {
        name: _camel_named(v, depth - 1) if isinstance(v, dict) else v
        for name, v in data.items()
    }


def camel_to_snake(name: str) -> str:
    """Convert camelCase to snake_case."""
    result = []
    for i, char in enumerate(name):
        if char.isupper() and i > 0:
            result.append("_")
        result.append(char.lower())
    return "".join(result)


def snake_to_camel(name: str) -> str:
    """Convert snake_case to camelCase."""
    components = name.split("_")
    return components[0] + "".join(x.title() for x in components[1:])
