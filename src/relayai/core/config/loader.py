from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from relayai.core.config.schema import ClientConfig

_ENV_OVERRIDES = {
    "RELAYAI_PROVIDER": "provider",
    "RELAYAI_MODEL": "model",
    "RELAYAI_API_KEY": "api_key",
    "RELAYAI_SIMULATION_POLICY": "simulation_policy",
}

_CAMEL_TO_SNAKE = {
    field.alias: name for name, field in ClientConfig.model_fields.items() if field.alias and field.alias != name
}


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _canonical_keys(data: dict[str, Any]) -> dict[str, Any]:
    return {_CAMEL_TO_SNAKE.get(key, key): value for key, value in data.items()}


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    content = yaml.safe_load(path.read_text(encoding="utf-8"))
    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ValueError(f"Config file must contain a mapping: {path}")
    return _canonical_keys(content)


def load_client_config(
    defaults_path: str | Path = "config/defaults.yaml",
    instance_path: str | Path | None = None,
) -> ClientConfig:
    defaults = _load_yaml(Path(defaults_path))

    explicit_instance = instance_path or os.getenv("RELAYAI_CONFIG_FILE")
    instance = _load_yaml(Path(explicit_instance)) if explicit_instance else {}

    merged = _deep_merge(defaults, instance)

    for env_name, key in _ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value:
            merged[key] = value

    try:
        return ClientConfig.model_validate(merged)
    except ValidationError as exc:
        raise ValueError(f"Invalid RelayAI configuration: {exc}") from exc
