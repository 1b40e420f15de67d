"""Configuration management."""
import os
import yaml
from pathlib import Path

from alerts.exceptions import ConfigError

_DEFAULT_CONFIG = Path(__file__).parent / "default_config.yaml"

_BACKENDS = {"file", "sqlite", "memory"}


def load_config(path=None):
    """Load config from YAML, merging defaults with optional overrides."""
    with open(_DEFAULT_CONFIG) as f:
        config = yaml.safe_load(f)

    if path:
        if not Path(path).exists():
            raise ConfigError(f"Config file not found: {path}")
        with open(path) as f:
            try:
                overrides = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {path}: {e}") from e
        if not isinstance(overrides, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")
        config = _deep_merge(config, overrides)

    # Environment variable overrides
    env_map = {
        "ALERTINATOR_LOG_LEVEL": ("logging", "level"),
        "ALERTINATOR_EVENT_DIR": ("event_store", "directory"),
        "ALERTINATOR_EVENT_BACKEND": ("event_store", "backend"),
        "ALERTINATOR_TWILIO_SID": ("twilio", "account_sid"),
        "ALERTINATOR_TWILIO_TOKEN": ("twilio", "auth_token"),
        "ALERTINATOR_TWILIO_FROM": ("twilio", "from_number"),
    }
    for env_key, config_path in env_map.items():
        val = os.environ.get(env_key)
        if val:
            d = config
            for k in config_path[:-1]:
                d = d.setdefault(k, {})
            d[config_path[-1]] = val

    _validate_config(config)
    return config


def _deep_merge(base, override):
    """Recursively merge override into base dict."""
    result = base.copy()
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _validate_config(config):
    """Basic config validation."""
    required_sections = ["logging", "event_store", "email", "twilio"]
    for section in required_sections:
        if not isinstance(config.get(section), dict):
            raise ConfigError(f"Missing required config section: {section}")

    for section in ("checks", "groups", "alertees"):
        if config.get(section) is None:
            config[section] = {}
        if not isinstance(config[section], dict):
            raise ConfigError(f"Config section {section} must be a mapping")

    backend = config["event_store"].get("backend", "file")
    if backend not in _BACKENDS:
        raise ConfigError(f"Unknown event_store backend: {backend}")
