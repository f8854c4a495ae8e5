"""
Configuration management for the replica planner.

Handles loading and merging configuration from:
- Built-in defaults
- A YAML configuration file
- Environment variables

Command-line flags are applied on top by the CLI.
"""

import copy
import os
from typing import Any, Dict, Optional

import yaml

from replicaplanner.errors import ConfigurationError

DEFAULT_KAFKA_BIN_PATH = "/opt/kafka_2.10-0.8.2.1/bin"

DEFAULTS: Dict[str, Any] = {
    "kafka": {
        "zookeeper": None,
        "bootstrap_server": None,
        "bin_path": DEFAULT_KAFKA_BIN_PATH,
        "command_timeout_s": 120,
    },
    "planner": {
        "seed": None,
        "exclude": [],
    },
    "logging": {
        "level": "INFO",
        "format": "json",
        "output": "stderr",
    },
}

# Environment variable -> dot-notation key
ENV_OVERRIDES = {
    "REPLICA_PLANNER_ZOOKEEPER": "kafka.zookeeper",
    "REPLICA_PLANNER_BOOTSTRAP_SERVER": "kafka.bootstrap_server",
    "REPLICA_PLANNER_KAFKA_BIN_PATH": "kafka.bin_path",
    "LOG_LEVEL": "logging.level",
}


class Config:
    """Configuration manager for the replica planner."""

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            config_file: Path to a YAML configuration file, if any.
        """
        self._config: Dict[str, Any] = copy.deepcopy(DEFAULTS)

        if config_file:
            self._load_config_file(config_file)

        self._apply_env_overrides()

    def _load_config_file(self, config_file: str) -> None:
        """
        Load configuration from YAML file.

        Args:
            config_file: Path to YAML configuration file
        """
        try:
            with open(config_file, "r") as f:
                file_config = yaml.safe_load(f)
        except OSError as e:
            raise ConfigurationError(f"Cannot read config file {config_file}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_file}: {e}") from e

        if file_config is None:
            return
        if not isinstance(file_config, dict):
            raise ConfigurationError(
                f"Config file {config_file} must contain a mapping, got {type(file_config).__name__}"
            )
        self._merge_config(file_config)

    def _merge_config(self, new_config: Dict[str, Any]) -> None:
        """Deep merge new configuration into existing configuration."""
        self._config = self._deep_merge(self._config, new_config)

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """
        Deep merge two dictionaries.

        Args:
            base: Base dictionary
            override: Override dictionary

        Returns:
            Merged dictionary
        """
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides."""
        for env_name, key in ENV_OVERRIDES.items():
            if value := os.getenv(env_name):
                self.set(key, value)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            key: Configuration key in dot notation (e.g., "kafka.zookeeper")
            default: Default value if key not found

        Returns:
            Configuration value
        """
        value = self._config
        for k in key.split("."):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value

    def set(self, key: str, value: Any) -> None:
        """
        Set configuration value using dot notation.

        Args:
            key: Configuration key in dot notation
            value: Value to set
        """
        keys = key.split(".")
        config = self._config
        for k in keys[:-1]:
            if k not in config or not isinstance(config[k], dict):
                config[k] = {}
            config = config[k]
        config[keys[-1]] = value

    def to_dict(self) -> Dict[str, Any]:
        """Get entire configuration as dictionary."""
        return copy.deepcopy(self._config)
