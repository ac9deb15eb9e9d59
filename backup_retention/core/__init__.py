"""Core retention and cleanup functionality."""

from .classifier import classify
from .cleanup import CleanupOrchestrator, resolve_backup_directories
from .executor import DeletionExecutor
from .models import (BackupFileRecord, BackupTier, CleanupOutcome, DirectoryCleanupResult,
                     RetentionDecision, RetentionPolicy)
from .retention import RetentionEvaluator
from .sample_archives import SampleArchiveGenerator
from .scanner import DirectoryScanner

__all__ = [
    "classify", "CleanupOrchestrator", "resolve_backup_directories", "DeletionExecutor",
    "BackupFileRecord", "BackupTier", "CleanupOutcome", "DirectoryCleanupResult",
    "RetentionDecision", "RetentionPolicy", "RetentionEvaluator", "SampleArchiveGenerator",
    "DirectoryScanner",
]
