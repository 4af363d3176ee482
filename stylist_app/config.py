"""Configuration helpers for the Wardrobe Stylist app."""

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Dict, Mapping, Optional

DEFAULT_MAX_COMBOS = 1200
DEFAULT_CACHE_TTL_SECONDS = 7 * 60.0
DEFAULT_CONFIG_DIR = "config/environments"

_TRUTHY = {"1", "true", "yes", "on"}
_QUOTES = ("'", '"')


def _as_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return str(value).strip().lower() in _TRUTHY


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] in _QUOTES and value[-1] == value[0]:
        return value[1:-1]
    return value


def read_flat_yaml(path: Path) -> Dict[str, str]:
    """Read ``key: value`` pairs from a flat YAML file; nesting and lists are not supported."""

    pairs: Dict[str, str] = {}
    for raw in path.read_text().splitlines():
        line = raw.split(" #", 1)[0].strip()
        if line.startswith("#") or ":" not in line:
            continue
        key, _, value = line.partition(":")
        pairs[key.strip()] = _unquote(value.strip())
    return pairs


def _config_file(env_name: Optional[str]) -> Optional[Path]:
    explicit = os.getenv("APP_CONFIG_PATH")
    if explicit:
        return Path(explicit)
    if env_name:
        return Path(os.getenv("STYLIST_CONFIG_DIR", DEFAULT_CONFIG_DIR)) / f"{env_name}.yaml"
    return None


@dataclass
class StylistConfig:
    """Configuration values for the stylist app.

    Storage paths default to a local ``data/`` directory so the app runs
    without any external services. The attribute endpoint is optional; when it
    is missing, wardrobe items are analysed with the keyword heuristics.
    """

    wardrobe_db_path: str = "data/wardrobe.db"
    taste_store_backend: str = "json"
    taste_store_path: Optional[str] = None
    attribute_endpoint: Optional[str] = None
    attribute_timeout_seconds: float = 5.0
    max_combos: int = DEFAULT_MAX_COMBOS
    cache_ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS
    diversify_modes: bool = False
    environment: str | None = None

    @classmethod
    def from_env(cls) -> "StylistConfig":
        """Build a config from the environment, layered over an optional YAML file.

        ``APP_CONFIG_PATH`` names the file directly; otherwise ``APP_ENV`` picks
        ``<STYLIST_CONFIG_DIR>/<env>.yaml``. Upper-cased environment variables
        override keys from the file.
        """

        env_name = os.getenv("APP_ENV")
        path = _config_file(env_name)
        file_values = read_flat_yaml(path) if path and path.exists() else {}
        return cls.from_mapping(file_values, os.environ, environment=env_name)

    @classmethod
    def from_mapping(
        cls, values: Mapping[str, str], overrides: Mapping[str, str] | None = None, environment: str | None = None
    ) -> "StylistConfig":
        """Coerce string settings onto the dataclass fields, keeping defaults for blanks."""

        overrides = overrides or {}
        settings: Dict[str, object] = {"environment": environment}
        for field in fields(cls):
            if field.name == "environment":
                continue
            raw = overrides.get(field.name.upper(), values.get(field.name))
            if raw in (None, ""):
                continue
            if field.default is None or isinstance(field.default, str):
                settings[field.name] = str(raw)
            elif isinstance(field.default, bool):
                settings[field.name] = _as_bool(raw)
            elif isinstance(field.default, int):
                settings[field.name] = int(raw)
            else:
                settings[field.name] = float(raw)
        return cls(**settings)
