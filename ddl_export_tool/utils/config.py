"""Configuration management for the DDL export tool."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

from ddl_export_tool.utils.logger import get_logger

logger = get_logger(__name__)


class Config:
    """Application configuration stored as JSON."""

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize configuration.

        Args:
            config_path: Path to configuration file. If None, the built-in
                defaults are used and nothing is read from or written to disk.
        """
        self.config_path: Optional[Path] = Path(config_path) if config_path is not None else None

        self._config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from file or create it with defaults."""
        defaults = self._get_defaults()
        if self.config_path is None:
            self._config = defaults
        elif self.config_path.exists():
            try:
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    loaded = json.load(f)
            except (json.JSONDecodeError, IOError) as e:
                logger.warning(f"Error loading config {self.config_path}: {e}. Using defaults.")
                self._config = defaults
                return
            # Sections missing from the file fall back to defaults key by key
            for section, values in loaded.items():
                if isinstance(values, dict):
                    defaults.setdefault(section, {}).update(values)
                else:
                    defaults[section] = values
            self._config = defaults
        else:
            self._config = defaults
            self._save_config()

    def _save_config(self) -> None:
        """Save current configuration to file."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, 'w', encoding='utf-8') as f:
            json.dump(self._config, f, indent=2)

    def _get_defaults(self) -> Dict[str, Any]:
        """Get default configuration values."""
        return {
            "export": {
                "library": "work",
                "dialect": "native",
                "echo_to_log": False,
                "output": None,
            },
            "catalog": {
                "dsn": None,
                "server": None,
                "database": None,
                "auth_type": "dsn",
                "driver": "SAS",
                "timeout": 30,
            },
            "logging": {
                "level": "INFO",
                "log_dir": None,
            },
        }

    def get(self, section: str, key: Optional[str] = None, default: Any = None) -> Any:
        """Get configuration value.

        Args:
            section: Configuration section name
            key: Optional key within section. If None, returns entire section.
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        if section not in self._config:
            return default

        if key is None:
            return self._config[section]

        value = self._config[section].get(key, default)
        return default if value is None else value
