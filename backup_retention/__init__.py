"""
Backup Retention - Cleanup of dated backup archives.

This package decides which timestamped backup archives to keep under a
two-tier daily/monthly retention policy, deletes the rest and reports the
outcome, optionally by email.
"""

__version__ = "1.0.0"

from .core.cleanup import CleanupOrchestrator
from .core.models import RetentionPolicy
from .core.retention import RetentionEvaluator
from .reporters.email_reporter import EmailReporter

__all__ = ["CleanupOrchestrator", "RetentionPolicy", "RetentionEvaluator", "EmailReporter"]
