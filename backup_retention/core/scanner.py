"""Directory scanning for backup archives."""

import os
import logging
from datetime import datetime
from typing import List, Optional

from .classifier import classify
from .models import BackupFileRecord


class DirectoryScanner:
    """Lists the backup archives found in a destination directory."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        """Initialize directory scanner.

        Args:
            logger: Logger to report diagnostics to.
        """
        self.logger = logger or logging.getLogger(__name__)

    def scan(self, directory: str) -> List[BackupFileRecord]:
        """Scan a directory and return its backup file records.

        Args:
            directory: Destination directory to scan (not recursive).

        Returns:
            List of BackupFileRecord objects in no particular order. Empty if
            the directory is missing or unreadable.
        """
        if not os.path.exists(directory):
            self.logger.warning(f"Backup directory does not exist: {directory}")
            return []

        if not os.path.isdir(directory):
            self.logger.warning(f"Backup path is not a directory: {directory}")
            return []

        records = []

        try:
            with os.scandir(directory) as entries:
                for entry in entries:
                    record = self._build_record(entry)
                    if record is not None:
                        records.append(record)
        except OSError as e:
            self.logger.warning(f"Could not read backup directory {directory}: {e}")
            return []

        self.logger.debug(f"Found {len(records)} backup files in {directory}")
        return records

    def _build_record(self, entry: os.DirEntry) -> Optional[BackupFileRecord]:
        """Classify a directory entry, returning None for non-backups."""
        classified = classify(entry.name)
        if classified is None:
            return None

        try:
            if not entry.is_file(follow_symlinks=False):
                return None
            modified_time = datetime.fromtimestamp(entry.stat(follow_symlinks=False).st_mtime)
        except (OSError, ValueError) as e:
            self.logger.debug(f"Skipping {entry.path}: {e}")
            return None

        return BackupFileRecord(
            path=os.path.abspath(entry.path),
            filename=entry.name,
            timestamp=modified_time,
            tier=classified.tier,
            embedded_date=classified.embedded_date
        )
