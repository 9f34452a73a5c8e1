"""Configuration management for backupset monitor."""

from .config_manager import ConfigManager, MonitorSettings
from .config_validator import ConfigValidator, parse_notify_type

__all__ = ["ConfigManager", "ConfigValidator", "MonitorSettings", "parse_notify_type"]
