"""
Configuration Service Module

Manages application configuration read/write.
"""

from typing import Any, Dict, Optional
from pathlib import Path
import copy
import os
import sys
import yaml
import threading
import logging

logger = logging.getLogger(__name__)


class ConfigService:
    """
    Configuration Service - Singleton Pattern

    Manages application configuration, supporting reading and saving from YAML files.

    Usage Example:
        config = ConfigService("config/default_config.yaml")

        # Get configuration
        duration = config.get("notifications.transient_duration_ms", 3000)

        # Set configuration
        config.set("catalog.path", "data/techniques.json")
        config.save()
    """

    _instance: Optional['ConfigService'] = None
    _lock = threading.Lock()

    def __new__(cls, config_path: str = None) -> 'ConfigService':
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path: str = None):
        if self._initialized:
            return

        self._default_config_path = "config/default_config.yaml"
        default_path = Path(self._default_config_path)
        provided_path = Path(config_path) if config_path else None

        # A custom path is used for both loading and saving (test isolation);
        # the default template path still saves to the user directory.
        self._use_custom_path = provided_path is not None and provided_path != default_path

        if self._use_custom_path:
            self._user_config_path = provided_path
        else:
            self._user_config_path = self._get_user_config_path()

        self._config: Dict[str, Any] = {}
        self._lock = threading.Lock()
        self._initialized = True

        self._load()

    @staticmethod
    def _get_user_config_path() -> Path:
        """Get user configuration file path (platform-specific)"""
        if sys.platform == "win32":
            base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        elif sys.platform == "darwin":
            base = Path.home() / "Library" / "Application Support"
        else:
            base = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
        return base / "shodan-trainer" / "config.yaml"

    def _load(self) -> None:
        """Load and merge from default and user configuration"""
        # 1. Built-in defaults
        self._config = self._get_default_config()

        if self._use_custom_path:
            # Custom path mode: only this file, no repository template
            self._merge_file(self._user_config_path, "custom")
        else:
            # 2. Repository template, 3. user overrides
            self._merge_file(Path(self._default_config_path), "default")
            self._merge_file(self._user_config_path, "user")

    def _merge_file(self, path: Path, label: str) -> None:
        if not path.exists():
            return
        try:
            with open(path, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f) or {}
            if isinstance(loaded, dict):
                self._deep_merge(self._config, loaded)
            else:
                logger.warning("Ignoring %s configuration that is not a mapping: %s", label, path)
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Failed to load %s configuration: %s", label, e)

    def _deep_merge(self, base: Dict, override: Dict) -> None:
        """Deep merge dictionaries, override overwrites base"""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration"""
        return {
            'app': {
                'name': 'Shodan Trainer',
                'version': '1.0.0',
                'log_level': 'INFO',
            },
            'catalog': {
                'path': 'data/techniques.json',
                'levels': [6, 5, 4, 3, 2, 1],
                'sources': ['aikikai', 'aikicircle'],
            },
            'preferences': {
                'default_source': 'aikikai',
                'default_include_unclassified': False,
            },
            'notifications': {
                'transient_duration_ms': 3000,
            },
            'storage': {
                'db_path': '',
                'keys': {
                    'play_queue': 'shodan.play_queue',
                    'play_state': 'shodan.play_state',
                    'preferences': 'shodan.preferences',
                    'catalog_version': 'shodan.catalog_version',
                },
            },
        }

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Supports dot-separated nested keys, e.g., "storage.keys.play_queue".

        Args:
            key: Configuration key
            default: Default value

        Returns:
            Configuration value or the default value.
        """
        with self._lock:
            keys = key.split('.')
            value = self._config

            try:
                for k in keys:
                    value = value[k]
                return value
            except (KeyError, TypeError):
                return default

    def set(self, key: str, value: Any) -> None:
        """
        Set a configuration value.

        Args:
            key: Configuration key (dot-separated)
            value: Configuration value
        """
        with self._lock:
            keys = key.split('.')
            config = self._config

            # Navigate to the parent node
            for k in keys[:-1]:
                if k not in config:
                    config[k] = {}
                config = config[k]

            config[keys[-1]] = value

    def get_all(self) -> Dict[str, Any]:
        """Get all configurations."""
        with self._lock:
            return copy.deepcopy(self._config)

    def save(self) -> bool:
        """
        Save configuration to the user configuration file.

        Returns:
            bool: True if saving was successful.
        """
        try:
            self._user_config_path.parent.mkdir(parents=True, exist_ok=True)

            with self._lock:
                with open(self._user_config_path, 'w', encoding='utf-8') as f:
                    yaml.dump(self._config, f, allow_unicode=True, default_flow_style=False)
            logger.debug("Configuration saved to: %s", self._user_config_path)
            return True
        except (OSError, yaml.YAMLError) as e:
            logger.error("Failed to save configuration: %s", e)
            return False

    def reset(self) -> None:
        """Reset to default configuration."""
        with self._lock:
            self._config = self._get_default_config()

    @classmethod
    def reset_instance(cls) -> None:
        """Reset the singleton instance (for testing only)."""
        with cls._lock:
            cls._instance = None
