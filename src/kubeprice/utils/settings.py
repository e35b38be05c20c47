"""
settings.py
Runtime settings for kubeprice, read once from the environment or a YAML file
and passed explicitly to providers and stores.
"""

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from kubeprice.cloud.errors import ConfigurationError

DEFAULT_CONFIG_PATH = "/models/"
DEFAULT_PRICING_FILE = "default.json"

# Environment variable -> Settings attribute
ENV_KEYS = {
    "CONFIG_PATH": "config_path",
    "CLUSTER_ID": "cluster_id",
    "REMOTE_WRITE_ENABLED": "remote_enabled",
    "SQL_ADDRESS": "sql_address",
    "KUBEPRICE_LOG_LEVEL": "log_level",
}


def _as_bool(val: Any) -> bool:
    if isinstance(val, bool):
        return val
    return str(val).strip().lower() in ("1", "true", "yes", "y", "on")


@dataclass(frozen=True)
class Settings:
    config_path: str = DEFAULT_CONFIG_PATH
    pricing_file: str = DEFAULT_PRICING_FILE
    cluster_id: str = ""
    remote_enabled: bool = False
    sql_address: str = "kubeprice.db"
    log_level: str = "INFO"

    @property
    def pricing_path(self) -> Path:
        return Path(self.config_path) / self.pricing_file

    @staticmethod
    def from_env(environ: Optional[Dict[str, str]] = None, base: Optional["Settings"] = None) -> "Settings":
        """Build settings from environment variables layered over `base`."""
        env = os.environ if environ is None else environ
        overrides: Dict[str, Any] = {}
        for env_name, attr in ENV_KEYS.items():
            raw = env.get(env_name)
            if raw is None or raw == "":
                continue
            overrides[attr] = _as_bool(raw) if attr == "remote_enabled" else raw
        return replace(base or Settings(), **overrides)

    @staticmethod
    def from_file(path: str, environ: Optional[Dict[str, str]] = None) -> "Settings":
        """
        Load settings from a YAML file. Keys may use either the attribute name
        (``config_path``) or the environment name (``CONFIG_PATH``). Environment
        variables still win over the file.
        """
        try:
            with open(path, "r", encoding="utf-8") as fh:
                data = yaml.safe_load(fh) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Could not read settings file {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"Settings file {path} must contain a mapping")

        known = {f.name for f in fields(Settings)}
        values: Dict[str, Any] = {}
        for key, value in data.items():
            attr = ENV_KEYS.get(key, key)
            if attr not in known:
                raise ConfigurationError(f"Unknown setting {key!r} in {path}")
            # A bare `key:` or `key: ~` leaves the default in place.
            if value is None:
                continue
            values[attr] = _as_bool(value) if attr == "remote_enabled" else str(value)
        return Settings.from_env(environ, base=Settings(**values))
