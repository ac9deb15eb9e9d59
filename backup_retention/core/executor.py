"""Deletion of expired backup files."""

import os
import logging
from typing import Iterable, List, Optional


class DeletionExecutor:
    """Removes files from disk, tolerating individual failures."""

    def __init__(self, logger: Optional[logging.Logger] = None, dry_run: bool = False):
        """Initialize deletion executor.

        Args:
            logger: Logger to report deletions and failures to.
            dry_run: If True, only log what would be deleted.
        """
        self.logger = logger or logging.getLogger(__name__)
        self.dry_run = dry_run

    def delete(self, paths: Iterable[str]) -> List[str]:
        """Delete each path independently.

        Args:
            paths: Files to remove.

        Returns:
            Paths actually removed, in deletion order. In dry-run mode, the
            paths that would have been removed.
        """
        deleted = []

        for path in paths:
            if self.dry_run:
                self.logger.info(f"Would delete backup file: {path}")
                deleted.append(path)
                continue

            try:
                os.remove(path)
            except OSError as e:
                self.logger.warning(f"Failed to delete backup file {path}: {e}")
                continue

            self.logger.info(f"Deleted backup file: {path}")
            deleted.append(path)

        return deleted
