"""
Configuration management for Control Inference.

Loads config from file with sensible defaults. No magic, no surprises.
"""

import json
import logging
import os

from pathlib import Path
from typing import Any

from .types import EngineConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "./control_inference_config.json"
CONFIG_ENV_VAR = "CONTROL_INFERENCE_CONFIG"


def load_config(config_path: str | None = None) -> EngineConfig:
    """
    Load configuration from file, with fallback to defaults.

    Priority:
    1. Explicit config_path argument
    2. CONTROL_INFERENCE_CONFIG environment variable
    3. Default path (./control_inference_config.json)
    4. Built-in defaults
    """
    path = config_path or os.environ.get(CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH)

    if Path(path).exists():
        with open(path) as f:
            data = json.load(f)
        logger.debug(f"Loaded engine configuration from {path}")
        return _dict_to_config(data)

    # Return defaults if no config file
    return EngineConfig()


def save_config(config: EngineConfig, config_path: str | None = None) -> None:
    """
    Save configuration to file.
    """
    path = config_path or DEFAULT_CONFIG_PATH
    Path(path).parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        json.dump(_config_to_dict(config), f, indent=2)


def _dict_to_config(data: dict[str, Any]) -> EngineConfig:
    """Convert dictionary to EngineConfig, ignoring unknown keys."""
    known = set(EngineConfig().to_dict())
    unknown = sorted(set(data) - known)
    if unknown:
        logger.warning(f"Ignoring unknown configuration keys: {', '.join(unknown)}")
    return EngineConfig.from_dict({k: v for k, v in data.items() if k in known})


def _config_to_dict(config: EngineConfig) -> dict[str, Any]:
    """Convert EngineConfig to dictionary for serialization."""
    return config.to_dict()


def create_default_config_file(path: str = DEFAULT_CONFIG_PATH) -> None:
    """Create a default configuration file for users to customize."""
    save_config(EngineConfig(), path)
    print(f"Created default config at: {path}")
