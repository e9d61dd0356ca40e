"""YAML configuration loader with environment variable overrides.

Configuration is layered (later layers override earlier):

  1. config/config.yaml  -- static defaults checked into the repo
  2. .env file           -- local developer overrides (not committed)
  3. Environment vars    -- set at deploy time

:func:`load_config` returns the merged nested dict; :func:`load_settings`
returns the same result as a validated :class:`Settings` instance, which
is what :func:`crossfade.main.build_core` takes.
"""

from pathlib import Path
from typing import Any

import yaml

from crossfade.config.settings import Settings
from crossfade.utils.errors import ConfigurationError

# (section, key) in config.yaml -> Settings field
_YAML_FIELDS: dict[tuple[str, str], str] = {
    ("app", "env"): "app_env",
    ("logging", "level"): "log_level",
    ("batch", "max_concurrency"): "max_concurrency",
    ("batch", "unit_timeout_seconds"): "unit_timeout_seconds",
    ("http", "timeout_seconds"): "http_timeout_seconds",
    ("catalogs", "apple_music_storefront"): "apple_music_storefront",
    ("concerts", "home_city"): "home_city",
    ("concerts", "artist_rank_cap"): "artist_rank_cap",
    ("concerts", "days_ahead"): "concert_days_ahead",
}


def _read_yaml(path: str) -> dict:
    config_path = Path(path)
    if not config_path.exists():
        return {}
    with open(config_path) as f:
        try:
            loaded = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(message=f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(loaded, dict):
        raise ConfigurationError(message=f"{path} must contain a mapping at the top level")
    return loaded


def load_config(path: str = "config/config.yaml") -> dict:
    """Load YAML config and merge with environment-based Settings.

    Only settings explicitly provided through the environment or ``.env``
    override YAML values; Settings defaults never mask the YAML file.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        Fully resolved configuration dictionary.
    """
    yaml_config = _read_yaml(path)
    settings = Settings()

    env_overrides: dict[str, Any] = {}
    for (section, key), field in _YAML_FIELDS.items():
        if field in settings.model_fields_set:
            env_overrides.setdefault(section, {})[key] = getattr(settings, field)
    env_overrides.setdefault("catalogs", {})["available"] = settings.get_available_catalogs()

    _deep_merge(yaml_config, env_overrides)
    return yaml_config


def load_settings(path: str = "config/config.yaml") -> Settings:
    """Build :class:`Settings` from the YAML defaults plus the environment.

    Raises:
        ConfigurationError: If the merged values fail validation.
    """
    merged = load_config(path)
    env_settings = Settings()

    values: dict[str, Any] = {}
    for (section, key), field in _YAML_FIELDS.items():
        section_values = merged.get(section) or {}
        if isinstance(section_values, dict) and key in section_values:
            values[field] = section_values[key]
    # Credentials only ever come from the environment.
    for field in env_settings.model_fields_set:
        values[field] = getattr(env_settings, field)

    try:
        return Settings(**values)
    except ValueError as exc:
        raise ConfigurationError(message=f"Invalid configuration: {exc}") from exc


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
