from pathlib import Path
from typing import Any, Dict

import yaml

DEFAULT_CONFIG_PATH = Path("voterroll.config.yaml")

DEFAULT_SQLITE_PATH = "voterroll.db"
DEFAULT_QUERY_TIMEOUT_SECONDS = 10.0
DEFAULT_LOG_LEVEL = "INFO"


def load_config(path: Path | None = None) -> Dict[str, Any]:
    """
    Load the service configuration from YAML.

    Args:
        path: Optional path to the config file. Defaults to voterroll.config.yaml

    Returns:
        Dictionary with configuration (missing sections are filled with {})

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ValueError: If the config structure is invalid
    """
    cfg_path = path or DEFAULT_CONFIG_PATH
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    if not isinstance(config, dict):
        raise ValueError("Config must be a dictionary")
    for section in ("storage", "query", "logging"):
        value = config.setdefault(section, {})
        if value is None:
            config[section] = {}
        elif not isinstance(value, dict):
            raise ValueError(f"Config '{section}' must be a dictionary")

    timeout = config["query"].get("timeout_seconds")
    if timeout is not None:
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise ValueError("Config 'query.timeout_seconds' must be a positive number")
    return config


def get_storage_path(config: Dict[str, Any]) -> str:
    return config.get("storage", {}).get("sqlite_path") or DEFAULT_SQLITE_PATH


def get_query_timeout(config: Dict[str, Any]) -> float:
    """Request deadline in seconds, applied to every executor call."""
    return float(config.get("query", {}).get("timeout_seconds") or DEFAULT_QUERY_TIMEOUT_SECONDS)


def get_log_level(config: Dict[str, Any]) -> str:
    return config.get("logging", {}).get("level") or DEFAULT_LOG_LEVEL
