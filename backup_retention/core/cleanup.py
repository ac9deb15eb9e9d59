"""Cleanup orchestration across all backup destination directories."""

import os
import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from .executor import DeletionExecutor
from .models import CleanupOutcome, DirectoryCleanupResult, RetentionPolicy
from .retention import RetentionEvaluator
from .scanner import DirectoryScanner


def resolve_backup_directories(filesystems: Optional[Iterable[Dict[str, Any]]],
                               databases: Optional[Iterable[Dict[str, Any]]]) -> List[str]:
    """Collect the unique destination directories of all backup configurations.

    Args:
        filesystems: Filesystem backup configurations.
        databases: Database backup configurations.

    Returns:
        Absolute destination paths, first occurrence order, without duplicates.
    """
    directories = []
    seen = set()

    for backup in list(filesystems or []) + list(databases or []):
        destination = backup.get('destination') if isinstance(backup, dict) else None
        if not destination:
            continue

        directory = os.path.realpath(os.path.expanduser(str(destination)))
        if directory not in seen:
            seen.add(directory)
            directories.append(directory)

    return directories


class CleanupOrchestrator:
    """Drives scan, evaluation and deletion for every destination directory."""

    def __init__(self, directories: Iterable[str], policy: Optional[RetentionPolicy] = None,
                 logger: Optional[logging.Logger] = None, dry_run: bool = False,
                 scanner: Optional[DirectoryScanner] = None,
                 evaluator: Optional[RetentionEvaluator] = None,
                 executor: Optional[DeletionExecutor] = None):
        """Initialize cleanup orchestrator.

        Args:
            directories: Destination directories to clean.
            policy: Retention policy, defaults to 30 days / 12 months.
            logger: Logger shared with the default scanner and executor.
            dry_run: If True, report deletions without removing anything.
            scanner: Directory scanner override.
            evaluator: Retention evaluator override.
            executor: Deletion executor override.
        """
        self.directories = list(directories)
        self.policy = policy or RetentionPolicy()
        self.logger = logger or logging.getLogger(__name__)
        self.dry_run = dry_run
        self.scanner = scanner or DirectoryScanner(logger=self.logger)
        self.evaluator = evaluator or RetentionEvaluator(logger=self.logger)
        self.executor = executor or DeletionExecutor(logger=self.logger, dry_run=dry_run)

    @classmethod
    def from_config(cls, config_manager, logger: Optional[logging.Logger] = None,
                    dry_run: bool = False) -> 'CleanupOrchestrator':
        """Build an orchestrator from a loaded ConfigManager."""
        directories = resolve_backup_directories(
            config_manager.get_filesystems(),
            config_manager.get_databases()
        )
        return cls(directories, config_manager.get_retention_policy(), logger=logger, dry_run=dry_run)

    def run(self, now: Optional[datetime] = None) -> CleanupOutcome:
        """Clean every configured directory.

        Args:
            now: Reference time for the retention windows, defaults to now.

        Returns:
            CleanupOutcome with the deleted paths of all directories.
        """
        now = now or datetime.now()
        outcome = CleanupOutcome(dry_run=self.dry_run)

        if not self.directories:
            self.logger.info("No backup directories configured, nothing to clean up")
            return outcome

        self.logger.info(
            f"Starting cleanup of {len(self.directories)} directories "
            f"(keep {self.policy.daily_window_days} days, {self.policy.monthly_window_months} months)"
        )

        for directory in self.directories:
            try:
                result = self.clean_directory(directory, now)
            except Exception as e:
                self.logger.error(f"Cleanup of {directory} failed: {e}")
                result = DirectoryCleanupResult(directory=directory, error_message=str(e))

            outcome.directories.append(result)
            outcome.deleted_paths.extend(result.deleted)

        self.logger.info(f"Cleanup completed, deleted {len(outcome.deleted_paths)} files")
        return outcome

    def clean_directory(self, directory: str, now: datetime) -> DirectoryCleanupResult:
        """Scan, evaluate and delete within a single directory."""
        self.logger.info(f"Cleaning up {directory}")

        if not os.path.isdir(directory):
            self.logger.warning(f"Skipping missing backup directory: {directory}")
            return DirectoryCleanupResult(directory=directory, skipped=True)

        records = self.scanner.scan(directory)
        decision = self.evaluator.evaluate(records, self.policy, now)

        for path in sorted(decision.delete):
            self.logger.debug(f"Expired {path}: {decision.reasons.get(path, '')}")

        deleted = self.executor.delete(sorted(decision.delete))
        removed = set(deleted)
        failed = [path for path in sorted(decision.delete) if path not in removed]

        return DirectoryCleanupResult(
            directory=directory,
            scanned=len(records),
            kept=sorted(decision.keep),
            deleted=deleted,
            failed=failed
        )
