"""Manages configuration for pycptok.

This module is responsible for loading, managing, and saving the library's
configuration settings. It aggregates settings from default values, TOML files,
and environment variables, providing a unified interface for accessing them.
"""

import copy
import logging
import os
from pathlib import Path
from typing import Dict, Any, Optional

try:
    import tomllib  # Available in Python 3.11+
except ImportError:
    import tomli as tomllib  # Fallback for Python versions < 3.11

import tomli_w

logger = logging.getLogger(__name__)

# The default path for the user-specific global configuration file.
USER_CONFIG_PATH = Path.home() / ".config" / "cptok" / "config.toml"

# Project-local configuration file, looked up in the working directory.
PROJECT_CONFIG_NAME = "cptok.toml"


class Config:
    """Handles the configuration for pycptok.

    This class loads configuration from multiple sources with a defined
    precedence:
    1.  Default values (lowest precedence).
    2.  Project-specific `cptok.toml` file.
    3.  User-level `~/.config/cptok/config.toml` file.
    4.  A custom configuration file specified at runtime.
    5.  Environment variables (highest precedence).

    Attributes:
        DEFAULT_CONFIG (Dict[str, Any]): A dictionary containing the default
            configuration values.
    """

    DEFAULT_CONFIG = {
        "read_chunk_size": 65536,  # Bytes pulled from a source per refill.
        "write_buffer_size": 8192,  # Writer flushes automatically past this.
        "exit_code": 1,  # Process exit status for fatal errors.
        "colors": True,
        "verbose": False,
        "cli": {
            "separator": "\n",
        },
    }

    INT_KEYS = ("read_chunk_size", "write_buffer_size", "exit_code")
    BOOL_KEYS = ("colors", "verbose")

    def __init__(self, config_path: Optional[Path] = None, load_files: bool = True) -> None:
        """Initializes the configuration manager.

        Args:
            config_path (Optional[Path]): An optional path to a specific
                configuration file to load. If provided, it takes precedence
                over default file locations.
            load_files (bool): When False, only defaults and environment
                variables are used.
        """
        self.config = copy.deepcopy(self.DEFAULT_CONFIG)
        if load_files:
            if config_path:
                self._load_file_config(Path(config_path))
            else:
                self._load_default_configs()
        self._load_env_config()

    def _load_default_configs(self) -> None:
        """Loads configs from standard locations if they exist."""
        project_config = Path.cwd() / PROJECT_CONFIG_NAME
        if project_config.exists():
            self._load_file_config(project_config)

        if USER_CONFIG_PATH.exists():
            self._load_file_config(USER_CONFIG_PATH)

    def _merge_configs(self, base: Dict[str, Any], new: Dict[str, Any]) -> None:
        """Recursively merges a new config dict into a base dict."""
        for key, value in new.items():
            if isinstance(value, dict) and key in base and isinstance(base[key], dict):
                self._merge_configs(base[key], value)
            else:
                base[key] = value

    def _load_file_config(self, config_path: Path) -> None:
        """Loads and merges configuration from a TOML file.

        Args:
            config_path (Path): The path to the TOML configuration file.
        """
        try:
            with open(config_path, "rb") as f:
                file_config = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.warning(f"Could not load config from {config_path}: {e}")
            return
        logger.debug(f"Loaded config from {config_path}")
        self._merge_configs(self.config, file_config)

    def _load_env_config(self) -> None:
        """Loads and merges configuration from environment variables."""
        env_mapping = {
            "CPTOK_READ_CHUNK_SIZE": "read_chunk_size",
            "CPTOK_WRITE_BUFFER_SIZE": "write_buffer_size",
            "CPTOK_EXIT_CODE": "exit_code",
            "CPTOK_COLORS": "colors",
            "CPTOK_VERBOSE": "verbose",
            "CPTOK_CLI_SEPARATOR": "cli.separator",
        }

        for env_var, config_key in env_mapping.items():
            value = os.getenv(env_var)
            if value is not None:
                self._set_nested_key(config_key, value)

    def _set_nested_key(self, key_path: str, value: str) -> None:
        """Sets a value in the config dict from an environment string.

        Args:
            key_path (str): The dot-separated key (e.g., "cli.separator").
            value (str): The string value from the environment variable.
        """
        leaf_key = key_path.split('.')[-1]

        if leaf_key in self.BOOL_KEYS:
            self.set(key_path, value.lower() in ("true", "1", "yes", "on"))
        elif leaf_key in self.INT_KEYS:
            try:
                self.set(key_path, int(value))
            except ValueError:
                logger.warning(f"Invalid integer value for {leaf_key}: {value}")
        else:
            self.set(key_path, value)

    def get(self, key: str, default: Any = None) -> Any:
        """Retrieves a configuration value using a dot-separated key.

        Args:
            key (str): The dot-separated key (e.g., "cli.separator").
            default (Any): The default value to return if the key is not found.

        Returns:
            Any: The configuration value or the default.
        """
        value = self.config
        try:
            for k in key.split('.'):
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def set(self, key: str, value: Any) -> None:
        """Sets a configuration value in memory."""
        keys = key.split('.')
        target_config = self.config
        for k in keys[:-1]:
            if not isinstance(target_config.get(k), dict):
                target_config[k] = {}
            target_config = target_config[k]
        target_config[keys[-1]] = value

    def read_chunk_size(self) -> int:
        """Returns the refill size for token readers, never below one byte."""
        return max(1, int(self.get("read_chunk_size", 65536)))

    def write_buffer_size(self) -> int:
        """Returns the automatic flush threshold for writers."""
        return max(1, int(self.get("write_buffer_size", 8192)))

    def exit_code(self) -> int:
        return int(self.get("exit_code", 1))

    def _get_user_config(self) -> Dict[str, Any]:
        """Loads and returns the contents of the user config file.

        Returns:
            Dict[str, Any]: The user configuration dictionary, or an empty
            dict if the file doesn't exist or fails to parse.
        """
        if not USER_CONFIG_PATH.exists():
            return {}
        try:
            with open(USER_CONFIG_PATH, "rb") as f:
                return tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.warning(f"Ignoring unreadable user config {USER_CONFIG_PATH}: {e}")
            return {}

    def save_user_config(self) -> None:
        """Saves settings that differ from the defaults to the user config file.

        Raises:
            IOError: If the configuration file cannot be written.
        """
        user_config = self._get_user_config()

        for key, value in self.config.items():
            if key not in self.DEFAULT_CONFIG or value != self.DEFAULT_CONFIG[key]:
                user_config[key] = value

        try:
            USER_CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
            with open(USER_CONFIG_PATH, "wb") as f:
                tomli_w.dump(user_config, f)
        except OSError as e:
            raise IOError(f"Failed to save configuration to {USER_CONFIG_PATH}: {e}") from e

    @staticmethod
    def reset_user_config() -> bool:
        """Deletes the user config file.

        Returns:
            bool: True if a file was removed, False if there was none.
        """
        if not USER_CONFIG_PATH.exists():
            return False
        USER_CONFIG_PATH.unlink()
        return True

    def __str__(self) -> str:
        return f"Config({self.config})"
