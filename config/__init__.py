"""
Configuration Module for the DDT Parser.

This module provides centralized configuration management using YAML files.
Pattern bounds, scoring weights and logging options are read from
settings.yaml; every consumer passes an in-code default so a missing key
never changes extraction results.
"""

import os
import yaml
from pathlib import Path
from typing import Any, Dict, Optional

# Environment variable that points to an alternative settings file
CONFIG_ENV_VAR = "DDT_PARSER_CONFIG"


class ConfigurationManager:
    """
    Centralized configuration management for the DDT parser.

    This class handles loading and providing access to all configuration
    parameters defined in settings.yaml.

    Attributes:
        config_path (Path): Path to the configuration file.
        config (Dict): Loaded configuration dictionary.

    Example:
        >>> config = ConfigurationManager()
        >>> config.get("extraction.header_window_lines")
        8
        >>> config.get("confidence.blend.internal_weight")
        0.7
    """

    _instance: Optional['ConfigurationManager'] = None
    _config: Dict[str, Any] = {}

    def __new__(cls, config_path: Optional[str] = None) -> 'ConfigurationManager':
        """
        Singleton pattern to ensure only one configuration instance exists.

        Args:
            config_path: Optional path to configuration file.

        Returns:
            ConfigurationManager instance.
        """
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path: Optional[str] = None) -> None:
        """
        Initialize the configuration manager.

        Args:
            config_path: Optional path to configuration file. Defaults to
                        $DDT_PARSER_CONFIG, then config/settings.yaml.
        """
        if self._initialized:
            return

        config_path = config_path or os.environ.get(CONFIG_ENV_VAR)
        if config_path is None:
            self.config_path = Path(__file__).parent / "settings.yaml"
        else:
            self.config_path = Path(config_path)

        self._load_config()
        self._initialized = True

    def _load_config(self) -> None:
        """
        Load configuration from YAML file.

        Raises:
            ConfigurationError: If the file is missing or not valid YAML.
        """
        from ddt_parser.utils.exceptions import ConfigurationError

        if not self.config_path.exists():
            raise ConfigurationError(
                str(self.config_path),
                "Configuration file not found"
            )

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                self._config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(str(self.config_path), str(e))

        self._resolve_paths()

    def _resolve_paths(self) -> None:
        """
        Resolve relative paths in the 'paths' section against the project root.
        """
        project_root = Path(__file__).parent.parent

        for key, value in (self._config.get('paths') or {}).items():
            if value and not Path(value).is_absolute():
                self._config['paths'][key] = str(project_root / value)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Args:
            key: Configuration key in dot notation (e.g., "extraction.header_window_lines").
            default: Default value if key doesn't exist.

        Returns:
            Configuration value or default.

        Example:
            >>> config.get("logging.level")
            "INFO"
            >>> config.get("nonexistent.key", "default_value")
            "default_value"
        """
        value = self._config

        try:
            for k in key.split('.'):
                value = value[k]
        except (KeyError, TypeError):
            return default

        return default if value is None else value

    def get_all(self) -> Dict[str, Any]:
        """Get a copy of the complete configuration dictionary."""
        return self._config.copy()

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()

    @classmethod
    def reset(cls) -> None:
        """
        Reset the singleton instance.
        Useful for testing or switching configuration files.
        """
        cls._instance = None


def get_config(key: str, default: Any = None) -> Any:
    """
    Convenience function to get configuration values.

    Args:
        key: Configuration key in dot notation.
        default: Default value if key doesn't exist.

    Returns:
        Configuration value or default.
    """
    return ConfigurationManager().get(key, default)


__all__ = ['ConfigurationManager', 'get_config', 'CONFIG_ENV_VAR']
