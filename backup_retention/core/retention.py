"""Retention policy evaluation.

Decides which backup files in a directory survive a cleanup run. Monthly
backups are resolved first; daily backups are then resolved per month, with
the newest daily backup promoted to stand in for a month inside the monthly
window that has no monthly backup of its own.
"""

import logging
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Set

from .models import BackupFileRecord, BackupTier, RetentionDecision, RetentionPolicy


def month_start(moment: datetime) -> datetime:
    """Return the first instant of the month containing ``moment``."""
    return datetime(moment.year, moment.month, 1)


def shift_months(moment: datetime, months: int) -> datetime:
    """Move ``moment`` by a number of calendar months.

    The day is clamped to the length of the target month, so shifting
    March 31st back one month gives the last day of February.
    """
    index = moment.year * 12 + (moment.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    next_month = datetime(year + month // 12, month % 12 + 1, 1)
    last_day = (next_month - timedelta(days=1)).day
    return moment.replace(year=year, month=month, day=min(moment.day, last_day))


def daily_cutoff(policy: RetentionPolicy, now: datetime) -> datetime:
    return now - timedelta(days=policy.daily_window_days)


def monthly_cutoff(policy: RetentionPolicy, now: datetime) -> datetime:
    return shift_months(month_start(now), -policy.monthly_window_months)


def _newest(records: List[BackupFileRecord]) -> BackupFileRecord:
    return max(records, key=lambda record: (record.timestamp, record.path))


def _group_by_month(records: Iterable[BackupFileRecord]) -> Dict[str, List[BackupFileRecord]]:
    groups = defaultdict(list)
    for record in records:
        groups[record.month_key].append(record)
    return groups


class RetentionEvaluator:
    """Partitions backup records into the files to keep and to delete."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def evaluate(self, records: Iterable[BackupFileRecord], policy: RetentionPolicy,
                 now: datetime) -> RetentionDecision:
        """Evaluate the retention policy against a directory's backups.

        Args:
            records: Backup records of a single directory.
            policy: Retention policy to apply.
            now: Reference time the windows are measured from.

        Returns:
            RetentionDecision with every record's path in exactly one of
            ``keep`` or ``delete``.
        """
        records = list(records)
        keep_cutoff = daily_cutoff(policy, now)
        window_start = monthly_cutoff(policy, now)

        keep: Set[str] = set()
        delete: Set[str] = set()
        reasons: Dict[str, str] = {}
        represented: Set[str] = set()

        monthly = _group_by_month(r for r in records if r.tier is BackupTier.MONTHLY)
        daily = _group_by_month(r for r in records if r.tier is BackupTier.DAILY)

        for key in sorted(monthly):
            group = monthly[key]
            if group[0].month_start < window_start:
                for record in group:
                    delete.add(record.path)
                    reasons[record.path] = f"monthly backup for {key} is outside the monthly window"
                continue

            representative = _newest(group)
            keep.add(representative.path)
            reasons[representative.path] = f"monthly backup for {key}"
            represented.add(key)
            for record in group:
                if record is not representative:
                    delete.add(record.path)
                    reasons[record.path] = f"duplicate monthly backup for {key}"

        for key in sorted(daily):
            group = daily[key]
            promoted = None
            if key not in represented and group[0].month_start >= window_start:
                promoted = _newest(group)
                keep.add(promoted.path)
                reasons[promoted.path] = f"promoted to monthly backup for {key}"
                represented.add(key)

            for record in group:
                if record is promoted:
                    continue
                if record.timestamp >= keep_cutoff:
                    keep.add(record.path)
                    reasons[record.path] = "inside the daily window"
                else:
                    delete.add(record.path)
                    reasons[record.path] = "daily backup outside the daily window"

        self.logger.debug(
            f"Retention evaluated {len(records)} files: keep {len(keep)}, delete {len(delete)} "
            f"(daily cutoff {keep_cutoff:%Y-%m-%d %H:%M:%S}, monthly cutoff {window_start:%Y-%m-%d})"
        )

        return RetentionDecision(keep=frozenset(keep), delete=frozenset(delete), reasons=reasons)
