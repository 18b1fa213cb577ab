"""
Configuration Management
"""

import json
import os
from pathlib import Path
from typing import Dict, Any

from lordsboard.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_FILE = Path(__file__).parent.parent.parent / "config" / "dashboard.conf"

# Environment prefix -> config section
ENV_SECTIONS = {
    "GRAPHQL_": "graphql",
    "RPC_": "rpc",
    "CACHE_": "cache",
    "SERVER_": "server",
    "RAFFLE_": "raffle",
    "MAP_": "map",
    "APP_": "app",
}


def load_config(config_file: str = None) -> Dict[str, Any]:
    """Load configuration from files and environment variables"""
    config: Dict[str, Any] = {}

    config_path = Path(config_file) if config_file else DEFAULT_CONFIG_FILE
    if config_path.exists():
        try:
            with open(config_path, 'r') as f:
                config.update(json.load(f))
            logger.info(f"Loaded configuration from {config_path}")
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error loading config file: {e}")
    else:
        logger.warning(f"Config file {config_path} not found. Will only use environment variables.")

    # Override with environment variables, usually defined in .env
    config = _apply_env_overrides(config)

    logger.debug(f"Configuration sections after environment overrides: {sorted(config)}")

    return config


def _apply_env_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
    """Apply environment variable overrides to configuration"""
    for key, value in os.environ.items():
        for prefix, section in ENV_SECTIONS.items():
            if key.startswith(prefix):
                config.setdefault(section, {})[key[len(prefix):].lower()] = value
                break

    return config


def get_config_value(config: Dict[str, Any], key_path: str, default=None):
    """Get configuration value by dot-separated key path"""
    keys = key_path.split('.')
    value = config

    try:
        for key in keys:
            value = value[key]
        return value
    except (KeyError, TypeError):
        return default
