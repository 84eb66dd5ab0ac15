"""ConfigLoader — YAML file per environment, env vars override."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml

from fleetwatch.config.settings import ENV_PREFIX, Settings

_CONFIG_ROOT = Path(__file__).resolve().parent


class ConfigLoader:
    """Load settings from YAML files with environment variable overrides."""

    @staticmethod
    def _load_yaml(env: str) -> dict[str, Any]:
        """Load the settings.yaml for the given environment, if any."""
        path = _CONFIG_ROOT / env / "settings.yaml"
        if not path.exists():
            return {}
        with path.open() as config_file:
            data = yaml.safe_load(config_file)
        return data if isinstance(data, dict) else {}

    @staticmethod
    def load_settings(**overrides: Any) -> Settings:
        """Build Settings with priority overrides > env vars > YAML > defaults."""
        env = os.environ.get(f"{ENV_PREFIX}ENV", "dev")
        # pydantic-settings ranks init kwargs above env vars, so YAML keys
        # shadowed by an env var are dropped before construction.
        from_yaml = {
            key: value
            for key, value in ConfigLoader._load_yaml(env).items()
            if f"{ENV_PREFIX}{key.upper()}" not in os.environ
        }
        return Settings(**{**from_yaml, **overrides})
