"""Data models for backup retention."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet, List, Optional

MAX_DAILY_WINDOW_DAYS = 36500
MAX_MONTHLY_WINDOW_MONTHS = 1200


class BackupTier(Enum):
    """Retention tier of a backup file, decided from its filename."""
    DAILY = "daily"
    MONTHLY = "monthly"


@dataclass(frozen=True)
class ClassifiedName:
    """What the classifier could tell from a backup filename."""
    filename: str
    extension: str
    tier: BackupTier
    embedded_date: Optional[datetime] = None
    slug: Optional[str] = None


@dataclass(frozen=True)
class BackupFileRecord:
    """A backup archive found in a destination directory.

    ``timestamp`` is the file's modification time and is used for every age
    comparison; ``embedded_date`` only decided the tier.
    """
    path: str
    filename: str
    timestamp: datetime
    tier: BackupTier
    embedded_date: Optional[datetime] = None

    @property
    def month_key(self) -> str:
        return self.timestamp.strftime('%Y-%m')

    @property
    def month_start(self) -> datetime:
        return datetime(self.timestamp.year, self.timestamp.month, 1)


@dataclass(frozen=True)
class RetentionPolicy:
    """Two-tier retention policy."""
    daily_window_days: int = 30
    monthly_window_months: int = 12

    def __post_init__(self):
        limits = {
            'daily_window_days': MAX_DAILY_WINDOW_DAYS,
            'monthly_window_months': MAX_MONTHLY_WINDOW_MONTHS
        }
        for name, limit in limits.items():
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer, got {value!r}")
            if value < 0:
                raise ValueError(f"{name} must not be negative, got {value}")
            if value > limit:
                raise ValueError(f"{name} must be at most {limit}, got {value}")


@dataclass(frozen=True)
class RetentionDecision:
    """Partition of one directory's backups into kept and deleted paths."""
    keep: FrozenSet[str]
    delete: FrozenSet[str]
    reasons: Dict[str, str] = field(default_factory=dict)


@dataclass
class DirectoryCleanupResult:
    """Result of cleaning a single destination directory."""
    directory: str
    scanned: int = 0
    kept: List[str] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    skipped: bool = False
    error_message: Optional[str] = None


@dataclass
class CleanupOutcome:
    """Aggregated result of a cleanup run over all directories."""
    deleted_paths: List[str] = field(default_factory=list)
    directories: List[DirectoryCleanupResult] = field(default_factory=list)
    dry_run: bool = False

    @property
    def has_errors(self) -> bool:
        # failed deletions and skipped directories do not fail the run
        return any(d.error_message for d in self.directories)
