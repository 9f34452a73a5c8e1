"""Configuration validation for backupset monitor."""

from typing import Dict, List, Any

from ..core.collector import TIMESTAMP_SOURCES
from ..core.models import NotifyType


class ConfigValidator:
    """Validates backupset monitor configuration."""

    REQUIRED_SECTIONS = ['backup_paths']
    REQUIRED_EMAIL_FIELDS = ['smtp_server', 'from_address', 'to_addresses']

    # Sections and the keys each of them accepts
    ALLOWED_KEYS = {
        'backup_paths': None,
        'monitoring': {'min_backup_sets', 'timestamp_source', 'include_hidden'},
        'notifications': {'notify_type'},
        'email': {'smtp_server', 'smtp_port', 'smtp_user', 'smtp_pass', 'from_address',
                  'to_addresses', 'use_tls', 'subject_prefix'},
        'logging': {'level', 'file', 'max_size_mb', 'backup_count'},
        'reports': {'save_local', 'directory', 'retention_days'},
    }

    LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR']

    def validate(self, config: Dict[str, Any]) -> None:
        """Validate configuration data.

        Args:
            config: Configuration dictionary to validate.

        Raises:
            ValueError: If configuration is invalid.
        """
        if not isinstance(config, dict):
            raise ValueError("Configuration must be a mapping")

        self._validate_structure(config)
        self._validate_backup_paths(config['backup_paths'])
        self._validate_monitoring(config.get('monitoring') or {})
        notify_type = self._validate_notifications(config.get('notifications') or {})

        if 'email' in config:
            self._validate_email_config(config['email'] or {})
        elif notify_type != NotifyType.OFF:
            raise ValueError(f"Notify type '{notify_type.value}' requires an email section")

        self._validate_logging(config.get('logging') or {})
        self._validate_reports(config.get('reports') or {})

    def _validate_structure(self, config: Dict[str, Any]) -> None:
        """Validate sections and keys against the allowlist.

        Raises:
            ValueError: If required sections are missing or unknown keys are present.
        """
        missing_sections = [section for section in self.REQUIRED_SECTIONS if section not in config]
        if missing_sections:
            raise ValueError(f"Missing required configuration sections: {missing_sections}")

        unknown_sections = sorted(str(key) for key in config if key not in self.ALLOWED_KEYS)
        if unknown_sections:
            raise ValueError(f"Unknown configuration sections: {unknown_sections}")

        for section, allowed in self.ALLOWED_KEYS.items():
            if allowed is None or config.get(section) is None:
                continue
            if not isinstance(config[section], dict):
                raise ValueError(f"Configuration section '{section}' must be a mapping")
            unknown_keys = sorted(str(key) for key in config[section] if key not in allowed)
            if unknown_keys:
                raise ValueError(f"Unknown keys in section '{section}': {unknown_keys}")

    def _validate_backup_paths(self, paths: List[Any]) -> None:
        """Validate the list of monitored paths.

        Raises:
            ValueError: If the list is empty, contains non-strings or duplicates.
        """
        if not isinstance(paths, list) or not paths:
            raise ValueError("At least one backup path must be configured")

        seen = set()
        for i, path in enumerate(paths):
            if not isinstance(path, str) or not path.strip():
                raise ValueError(f"Backup path {i} must be a non-empty string")
            if path in seen:
                raise ValueError(f"Backup path {i} is configured twice: {path}")
            seen.add(path)

    def _validate_monitoring(self, monitoring: Dict[str, Any]) -> None:
        min_backup_sets = monitoring.get('min_backup_sets', 5)
        if isinstance(min_backup_sets, bool) or not isinstance(min_backup_sets, int) \
                or min_backup_sets < 1:
            raise ValueError(f"min_backup_sets must be a positive integer: {min_backup_sets}")

        timestamp_source = monitoring.get('timestamp_source', 'modified')
        if timestamp_source not in TIMESTAMP_SOURCES:
            raise ValueError(f"timestamp_source must be one of {list(TIMESTAMP_SOURCES)}: "
                             f"{timestamp_source}")

        if not isinstance(monitoring.get('include_hidden', True), bool):
            raise ValueError("include_hidden must be true or false")

    def _validate_notifications(self, notifications: Dict[str, Any]) -> NotifyType:
        return parse_notify_type(notifications.get('notify_type', 'off'))

    def _validate_email_config(self, email_config: Dict[str, Any]) -> None:
        """Validate email configuration.

        Args:
            email_config: Email configuration dictionary.

        Raises:
            ValueError: If email configuration is invalid.
        """
        missing_fields = [field for field in self.REQUIRED_EMAIL_FIELDS if field not in email_config]
        if missing_fields:
            raise ValueError(f"Email configuration missing required fields: {missing_fields}")

        if 'smtp_port' in email_config:
            try:
                port = int(email_config['smtp_port'])
                if not (1 <= port <= 65535):
                    raise ValueError()
            except (ValueError, TypeError):
                raise ValueError(f"Email configuration has invalid SMTP port: {email_config['smtp_port']}")

        to_addresses = email_config.get('to_addresses', [])
        if not isinstance(to_addresses, list) or not to_addresses:
            raise ValueError("Email to_addresses must be a non-empty list")

    def _validate_logging(self, logging_config: Dict[str, Any]) -> None:
        level = str(logging_config.get('level', 'INFO')).upper()
        if level not in self.LOG_LEVELS:
            raise ValueError(f"Invalid log level: {logging_config.get('level')}")

    def _validate_reports(self, reports: Dict[str, Any]) -> None:
        retention_days = reports.get('retention_days', 30)
        if isinstance(retention_days, bool) or not isinstance(retention_days, int) \
                or retention_days < 0:
            raise ValueError(f"retention_days must be a non-negative integer: {retention_days}")


def parse_notify_type(value: Any) -> NotifyType:
    """Convert a configured notify type to NotifyType.

    YAML 1.1 loads an unquoted ``off`` as False, which is accepted as 'off'.
    """
    if value is False:
        return NotifyType.OFF
    for notify_type in NotifyType:
        if notify_type.value == value:
            return notify_type
    choices = [notify_type.value for notify_type in NotifyType]
    raise ValueError(f"notify_type must be one of {choices}: {value}")
