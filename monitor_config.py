"""
Monitor Configuration Loader
Loads config/config.json (or a YAML equivalent) into an immutable MonitorConfig.
Can be used standalone to validate a configuration file or imported by monitor.py.
"""
import json
from dataclasses import dataclass
from pathlib import Path

import yaml
from cerberus import Validator

DEFAULT_CONFIG_PATH = Path("config") / "config.json"


def _not_bool(field, value, error):
    # bool is an int subclass, but JSON true/false is not a number
    if isinstance(value, bool):
        error(field, "must be of integer type")


# Only field types are checked; values such as a zero interval are accepted.
CONFIG_SCHEMA = {
    "containers_directory": {"type": "string", "required": False, "default": ""},
    "panel_url": {"type": "string", "required": False, "default": ""},
    "admin_api_key": {"type": "string", "required": False, "default": ""},
    "client_api_key": {"type": "string", "required": False, "default": ""},
    "check_interval_in_seconds": {
        "type": "integer", "check_with": _not_bool, "required": False, "default": 0,
    },
    "discord_webhook_url": {"type": "string", "required": False, "default": ""},
}


class ConfigError(Exception):
    """Raised when the configuration file cannot be read or parsed."""


@dataclass(frozen=True)
class MonitorConfig:
    containers_directory: str
    panel_url: str
    admin_api_key: str
    client_api_key: str
    check_interval_in_seconds: int
    discord_webhook_url: str


def normalize_panel_url(url):
    """Ensure the panel URL has a scheme and no trailing slash."""
    if not (url.startswith("http://") or url.startswith("https://")):
        url = "http://" + url
    if url.endswith("/"):
        url = url[:-1]
    return url


def _read_document(config_path):
    try:
        text = config_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Error reading config: {e}") from e

    try:
        if config_path.suffix.lower() in (".yaml", ".yml"):
            return yaml.safe_load(text)
        return json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"Error parsing config: {e}") from e


def load_config(config_path=DEFAULT_CONFIG_PATH):
    """
    Load and normalize the monitor configuration.

    Args:
        config_path: Path to a .json, .yaml or .yml file (string or Path)

    Returns:
        MonitorConfig: The normalized configuration

    Raises:
        ConfigError: If the file is unreadable, unparseable or has fields
            of the wrong type
    """
    config_path = Path(config_path)
    data = _read_document(config_path)

    if not isinstance(data, dict):
        raise ConfigError(f"Error parsing config: expected an object in {config_path}")

    validator = Validator(CONFIG_SCHEMA, allow_unknown=True)
    if not validator.validate(data):
        raise ConfigError(f"Error parsing config:\n{validator.errors}")
    data = validator.document

    return MonitorConfig(
        containers_directory=data["containers_directory"],
        panel_url=normalize_panel_url(data["panel_url"]),
        admin_api_key=data["admin_api_key"],
        client_api_key=data["client_api_key"],
        check_interval_in_seconds=data["check_interval_in_seconds"],
        discord_webhook_url=data["discord_webhook_url"],
    )


def validate_and_print(config_path=DEFAULT_CONFIG_PATH):
    """
    Validate configuration and print result (for CLI usage).

    Returns:
        MonitorConfig, or None if invalid
    """
    try:
        config = load_config(config_path)
    except ConfigError as e:
        print(f"[ERROR] {e}")
        return None

    print(f"[OK] Config is valid. Monitoring {config.containers_directory} "
          f"every {config.check_interval_in_seconds}s")
    return config


# CLI entry point
if __name__ == "__main__":
    import sys
    config_file = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_CONFIG_PATH
    result = validate_and_print(config_file)
    sys.exit(0 if result else 1)
