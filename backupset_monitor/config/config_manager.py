"""Configuration management for the backupset monitor."""

import copy
import os
from dataclasses import dataclass
from typing import Dict, Any, Optional, Tuple

import yaml

from .config_validator import ConfigValidator, parse_notify_type
from ..core.models import NotifyType


@dataclass(frozen=True)
class MonitorSettings:
    """Resolved settings for one monitoring run."""
    backup_paths: Tuple[str, ...]
    min_backup_sets: int = 5
    notify_type: NotifyType = NotifyType.OFF
    timestamp_source: str = 'modified'
    include_hidden: bool = True
    save_reports: bool = False
    report_directory: str = 'reports'
    report_retention_days: int = 30


class ConfigManager:
    """Manages configuration loading and validation for backupset monitoring."""

    DEFAULT_CONFIG_LOCATIONS = [
        "config.yaml",
        "config.yml",
        os.path.expanduser("~/.backupset-monitor/config.yaml"),
        os.path.expanduser("~/.backupset-monitor/config.yml"),
        "/etc/backupset-monitor/config.yaml",
        "/etc/backupset-monitor/config.yml"
    ]

    DEFAULTS = {
        'monitoring': {
            'min_backup_sets': 5,
            'timestamp_source': 'modified',
            'include_hidden': True
        },
        'notifications': {
            'notify_type': 'off'
        },
        'logging': {
            'level': 'INFO',
            'file': None,
            'max_size_mb': 10,
            'backup_count': 5
        },
        'reports': {
            'save_local': False,
            'directory': 'reports',
            'retention_days': 30
        }
    }

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
                config_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in config file {config_file}: {e}")
        except OSError as e:
            raise ValueError(f"Error reading config file {config_file}: {e}")

        return self.load_dict(config_data)

    def load_dict(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        """Validate an already parsed configuration and apply defaults.

        Raises:
            ValueError: If the configuration is invalid.
        """
        # Validate configuration
        self.validator.validate(config_data)
        self.config_data = copy.deepcopy(config_data)

        # Set defaults
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

        # Search default locations in order
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
        # Merge defaults with existing config
        for section, section_defaults in self.DEFAULTS.items():
            if not self.config_data.get(section):
                self.config_data[section] = {}
            for key, value in section_defaults.items():
                if key not in self.config_data[section]:
                    self.config_data[section][key] = value

        # Email defaults only apply when email is configured
        if 'email' in self.config_data:
            email = self.config_data['email'] = dict(self.config_data['email'] or {})
            email.setdefault('smtp_port', 587)
            email.setdefault('use_tls', True)
            email.setdefault('subject_prefix', '[Backup Monitor]')

    def get_settings(self) -> MonitorSettings:
        """Build the typed settings record from the loaded configuration."""
        monitoring = self.get_monitoring_config()
        reports = self.get_reports_config()
        return MonitorSettings(
            backup_paths=tuple(self.config_data.get('backup_paths', [])),
            min_backup_sets=monitoring['min_backup_sets'],
            notify_type=parse_notify_type(self.config_data['notifications']['notify_type']),
            timestamp_source=monitoring['timestamp_source'],
            include_hidden=monitoring['include_hidden'],
            save_reports=bool(reports['save_local']),
            report_directory=reports['directory'],
            report_retention_days=reports['retention_days']
        )

    def get_email_config(self) -> Dict[str, Any]:
        """Get email configuration.

        Returns:
            Email configuration dictionary.
        """
        return self.config_data.get('email', {})

    def get_monitoring_config(self) -> Dict[str, Any]:
        """Get monitoring configuration.

        Returns:
            Monitoring configuration dictionary.
        """
        return self.config_data.get('monitoring', {})

    def get_logging_config(self) -> Dict[str, Any]:
        """Get logging configuration.

        Returns:
            Logging configuration dictionary.
        """
        return self.config_data.get('logging', {})

    def get_reports_config(self) -> Dict[str, Any]:
        """Get reports configuration.

        Returns:
            Reports configuration dictionary.
        """
        return self.config_data.get('reports', {})
