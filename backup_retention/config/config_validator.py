"""Configuration validation for backup retention."""

from typing import Dict, Any

from ..core.models import MAX_DAILY_WINDOW_DAYS, MAX_MONTHLY_WINDOW_MONTHS


class ConfigValidator:
    """Validates backup retention configuration."""

    BACKUP_SECTIONS = ['filesystems', 'databases']
    RETENTION_LIMITS = {
        'keep_daily_backups': MAX_DAILY_WINDOW_DAYS,
        'keep_monthly_backups': MAX_MONTHLY_WINDOW_MONTHS
    }
    LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
    REQUIRED_EMAIL_FIELDS = ['smtp_server', 'from_address', 'to_addresses']

    def validate(self, config: Dict[str, Any]) -> None:
        """Validate configuration data.

        Args:
            config: Configuration dictionary to validate.

        Raises:
            ValueError: If configuration is invalid.
        """
        if not isinstance(config, dict):
            raise ValueError("Configuration must be a mapping")

        for section in self.BACKUP_SECTIONS:
            self._validate_backups(section, config.get(section))

        if config.get('retention') is not None:
            self._validate_retention(config['retention'])

        if config.get('logging') is not None:
            self._validate_logging(config['logging'])

        # Validate email config if present
        if config.get('email'):
            self._validate_email_config(config['email'])

    def _validate_backups(self, section: str, backups: Any) -> None:
        """Validate a list of filesystem or database backup configurations.

        Args:
            section: Name of the section being validated.
            backups: Value of the section, may be None.

        Raises:
            ValueError: If an entry has no usable destination.
        """
        if backups is None:
            return

        if not isinstance(backups, list):
            raise ValueError(f"'{section}' must be a list")

        for i, backup in enumerate(backups):
            if not isinstance(backup, dict):
                raise ValueError(f"{section} entry {i} must be a dictionary")

            if not backup.get('destination'):
                raise ValueError(f"{section} entry {i} missing required field: destination")

    def _validate_retention(self, retention: Any) -> None:
        """Validate retention windows.

        Raises:
            ValueError: If a window is not an integer within its bounds.
        """
        if not isinstance(retention, dict):
            raise ValueError("'retention' must be a dictionary")

        for field, limit in self.RETENTION_LIMITS.items():
            if field not in retention:
                continue
            value = retention[field]
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"Retention {field} must be a non-negative integer: {value!r}")
            if value > limit:
                raise ValueError(f"Retention {field} must be at most {limit}: {value}")

    def _validate_logging(self, logging_config: Any) -> None:
        """Validate logging configuration.

        Raises:
            ValueError: If the level or rotation settings are unusable.
        """
        if not isinstance(logging_config, dict):
            raise ValueError("'logging' must be a dictionary")

        level = logging_config.get('level')
        if level is not None and str(level).upper() not in self.LOG_LEVELS:
            raise ValueError(f"Logging level must be one of {self.LOG_LEVELS}: {level!r}")

        log_file = logging_config.get('file')
        if log_file is not None and not isinstance(log_file, str):
            raise ValueError(f"Logging file must be a path: {log_file!r}")

        max_size = logging_config.get('max_size_mb')
        if max_size is not None:
            if isinstance(max_size, bool) or not isinstance(max_size, (int, float)) or max_size <= 0:
                raise ValueError(f"Logging max_size_mb must be a positive number: {max_size!r}")

        backup_count = logging_config.get('backup_count')
        if backup_count is not None:
            if isinstance(backup_count, bool) or not isinstance(backup_count, int) or backup_count < 0:
                raise ValueError(f"Logging backup_count must be a non-negative integer: {backup_count!r}")

    def _validate_email_config(self, email_config: Dict[str, Any]) -> None:
        """Validate email configuration.

        Args:
            email_config: Email configuration dictionary.

        Raises:
            ValueError: If email configuration is invalid.
        """
        if not isinstance(email_config, dict):
            raise ValueError("'email' must be a dictionary")

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
