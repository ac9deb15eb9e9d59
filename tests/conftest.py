"""
Shared pytest fixtures for backup retention tests.

This module provides fixtures for:
- Backup destination directories under tmp_path
- Backup archive factories with controlled modification times
- YAML configuration files
"""

import os
from datetime import datetime

import pytest
import yaml

from backup_retention.core.models import BackupFileRecord, RetentionPolicy
from backup_retention.core.classifier import classify


@pytest.fixture
def backup_dir(tmp_path):
    """Empty backup destination directory."""
    directory = tmp_path / "backups"
    directory.mkdir()
    return directory


@pytest.fixture
def make_backup():
    """
    Factory creating a backup file whose mtime matches the given time.

    Usage: make_backup(directory, '20240314-020000-prod.tar.gz', datetime(...))
    The mtime defaults to the date embedded in the filename.
    """
    def _make(directory, filename, modified=None):
        path = directory / filename
        path.write_bytes(b"backup data")
        if modified is None:
            modified = datetime.strptime(filename[:15], '%Y%m%d-%H%M%S')
        timestamp = modified.timestamp()
        os.utime(path, (timestamp, timestamp))
        return path

    return _make


@pytest.fixture
def make_record():
    """
    Factory building an in-memory BackupFileRecord from a filename.

    The timestamp defaults to the date embedded in the filename.
    """
    def _make(filename, timestamp=None, directory='/backups'):
        classified = classify(filename)
        assert classified is not None, f"{filename} is not a backup filename"
        return BackupFileRecord(
            path=f"{directory}/{filename}",
            filename=filename,
            timestamp=timestamp or classified.embedded_date,
            tier=classified.tier,
            embedded_date=classified.embedded_date
        )

    return _make


@pytest.fixture
def scenario_policy():
    """7 days of daily backups, 3 months of monthly backups."""
    return RetentionPolicy(daily_window_days=7, monthly_window_months=3)


@pytest.fixture
def scenario_now():
    return datetime(2024, 3, 15, 12, 0, 0)


@pytest.fixture
def write_config(tmp_path):
    """Factory writing a YAML config file and returning its path."""
    def _write(data, name='config.yaml'):
        path = tmp_path / name
        path.write_text(yaml.safe_dump(data), encoding='utf-8')
        return str(path)

    return _write
