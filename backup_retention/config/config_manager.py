"""Configuration management for the backup retention system."""

import os
import yaml
from typing import Dict, List, Any, Optional

from .config_validator import ConfigValidator
from ..core.models import RetentionPolicy


class ConfigManager:
    """Manages configuration loading and validation for backup cleanup."""

    DEFAULT_CONFIG_LOCATIONS = [
        "config.yaml",
        "config.yml",
        os.path.expanduser("~/.backup-retention/config.yaml"),
        os.path.expanduser("~/.backup-retention/config.yml"),
        "/etc/backup-retention/config.yaml",
        "/etc/backup-retention/config.yml"
    ]

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration manager.

        Args:
            config_path: Optional path to config file. If not provided,
                        will search in default locations.
        """
        self.config_path = config_path
        self.config_data: Dict[str, Any] = {}
        self.validator = ConfigValidator()

    def load_config(self) -> Dict[str, Any]:
        """Load configuration from file.

        Returns:
            Dictionary containing configuration data.

        Raises:
            FileNotFoundError: If config file cannot be found.
            ValueError: If config file is invalid.
        """
        config_file = self._find_config_file()

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                self.config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in config file {config_file}: {e}")
        except OSError as e:
            raise ValueError(f"Error reading config file {config_file}: {e}")

        self.validator.validate(self.config_data)
        self._set_defaults()

        return self.config_data

    def _find_config_file(self) -> str:
        """Find configuration file in default locations.

        Returns:
            Path to configuration file.

        Raises:
            FileNotFoundError: If no config file is found.
        """
        if self.config_path:
            if os.path.exists(self.config_path):
                return self.config_path
            else:
                raise FileNotFoundError(f"Config file not found: {self.config_path}")

        for location in self.DEFAULT_CONFIG_LOCATIONS:
            if os.path.exists(location):
                return location

        raise FileNotFoundError(
            f"Configuration file not found in any of these locations:\n" +
            "\n".join(f"  - {loc}" for loc in self.DEFAULT_CONFIG_LOCATIONS) +
            "\n\nPlease copy config.example.yaml to config.yaml and customize it."
        )

    def _set_defaults(self):
        """Set default values for optional configuration parameters."""
        defaults = {
            'retention': {
                'keep_daily_backups': 30,
                'keep_monthly_backups': 12
            },
            'logging': {
                'level': 'INFO',
                'file': None,
                'max_size_mb': 5,
                'backup_count': 5
            }
        }

        for section, section_defaults in defaults.items():
            if not self.config_data.get(section):
                self.config_data[section] = {}
            for key, value in section_defaults.items():
                if key not in self.config_data[section]:
                    self.config_data[section][key] = value

        for section in ('filesystems', 'databases'):
            if self.config_data.get(section) is None:
                self.config_data[section] = []

    def get_filesystems(self) -> List[Dict[str, Any]]:
        """Get filesystem backup configurations."""
        return self.config_data.get('filesystems') or []

    def get_databases(self) -> List[Dict[str, Any]]:
        """Get database backup configurations."""
        return self.config_data.get('databases') or []

    def get_retention_policy(self) -> RetentionPolicy:
        """Get the configured retention policy.

        Returns:
            RetentionPolicy built from the retention section.
        """
        retention = self.config_data.get('retention') or {}
        return RetentionPolicy(
            daily_window_days=retention.get('keep_daily_backups', 30),
            monthly_window_months=retention.get('keep_monthly_backups', 12)
        )

    def get_email_config(self) -> Dict[str, Any]:
        """Get email configuration.

        Returns:
            Email configuration dictionary.
        """
        return self.config_data.get('email') or {}

    def get_logging_config(self) -> Dict[str, Any]:
        """Get logging configuration.

        Returns:
            Logging configuration dictionary.
        """
        return self.config_data.get('logging', {})
