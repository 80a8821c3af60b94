"""Configuration management."""
import os
import yaml
from pathlib import Path

_config = None
_DEFAULT_CONFIG = Path(__file__).parent / "default_config.yaml"


def load_config(path=None, env=None):
    """Load config from YAML, merging defaults with optional overrides."""
    global _config
    env = os.environ if env is None else env

    with open(_DEFAULT_CONFIG) as f:
        config = yaml.safe_load(f)

    if path and Path(path).exists():
        with open(path) as f:
            overrides = yaml.safe_load(f) or {}
        config = _deep_merge(config, overrides)

    # Environment variable overrides
    env_map = {
        "V1Z3R_ENV": ("environment",),
        "V1Z3R_LOG_LEVEL": ("logging", "level"),
        "V1Z3R_RETENTION_HOURS": ("alerts", "retention_hours"),
        "V1Z3R_CLEANUP_INTERVAL": ("alerts", "cleanup_interval_seconds"),
        "V1Z3R_WEBHOOK_TIMEOUT": ("notifications", "webhook_timeout"),
    }
    for env_key, config_path in env_map.items():
        val = env.get(env_key)
        if val:
            d = config
            for k in config_path[:-1]:
                d = d.setdefault(k, {})
            try:
                d[config_path[-1]] = int(val)
            except ValueError:
                d[config_path[-1]] = val

    _validate_config(config)
    _config = config
    return config


def get_config():
    """Return cached config, loading defaults if needed."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


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
    required_sections = ["logging", "alerts", "notifications"]
    for section in required_sections:
        if section not in config:
            raise ValueError(f"Missing required config section: {section}")

    if config["alerts"]["retention_hours"] <= 0:
        raise ValueError("retention_hours must be > 0")
    if config["alerts"]["cleanup_interval_seconds"] < 1:
        raise ValueError("cleanup_interval_seconds must be >= 1")
    if config["notifications"]["webhook_timeout"] <= 0:
        raise ValueError("webhook_timeout must be > 0")
