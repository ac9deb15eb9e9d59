"""Synthetic backup archives for verifying retention behaviour.

Fills destination directories with small fake archives whose names and
modification times are spread across both retention windows, so that a
following cleanup run can be checked by eye.
"""

import math
import os
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional

from .models import RetentionPolicy
from .retention import month_start, shift_months


class SampleArchiveGenerator:
    """Creates fake daily and monthly backup archives."""

    EXTENSIONS = ('tar', 'sql')

    def __init__(self, directories: Iterable[str], policy: Optional[RetentionPolicy] = None,
                 now: Optional[datetime] = None, logger: Optional[logging.Logger] = None):
        self.directories = list(dict.fromkeys(directories))
        self.policy = policy or RetentionPolicy()
        self.now = (now or datetime.now()).replace(microsecond=0)
        self.logger = logger or logging.getLogger(__name__)
        self.files_created: List[str] = []

    def run(self) -> Dict[str, Any]:
        """Generate the archives in every directory.

        Returns:
            Summary with the number of files created, the directories used
            and the retention policy they were generated for.
        """
        self.files_created = []

        for directory in self.directories:
            os.makedirs(directory, exist_ok=True)
            self.logger.info(f"Creating test files in {directory}")

            for date in self._recent_daily_dates():
                self._create_files(directory, date, 'daily')
            for date in self._old_daily_dates():
                self._create_files(directory, date, 'daily-old')
            for date in self._recent_monthly_dates():
                self._create_files(directory, date, 'monthly')
            for date in self._old_monthly_dates():
                self._create_files(directory, date, 'monthly-old')

        return {
            'files_created': len(self.files_created),
            'test_directories': self.directories,
            'retention_policies': {
                'keep_daily_backups': self.policy.daily_window_days,
                'keep_monthly_backups': self.policy.monthly_window_months,
            }
        }

    def _recent_daily_dates(self) -> List[datetime]:
        keep_days = self.policy.daily_window_days
        return [self._days_ago(days) for days in range(1, keep_days, 5)]

    def _old_daily_dates(self) -> List[datetime]:
        keep_days = self.policy.daily_window_days
        return [self._days_ago(days) for days in range(keep_days + 1, keep_days * 2, 15)]

    def _recent_monthly_dates(self) -> List[datetime]:
        keep_months = self.policy.monthly_window_months
        return [self._first_of_month_ago(months) for months in range(1, keep_months, 2)]

    def _old_monthly_dates(self) -> List[datetime]:
        keep_months = self.policy.monthly_window_months
        upper = math.ceil(keep_months * 1.5)
        return [self._first_of_month_ago(months) for months in range(keep_months + 1, upper, 2)]

    def _days_ago(self, days: int) -> datetime:
        date = self.now - timedelta(days=days)
        # the 1st would turn a daily backup into a monthly one
        if date.day == 1:
            date -= timedelta(days=1)
        return date

    def _first_of_month_ago(self, months: int) -> datetime:
        first = shift_months(month_start(self.now), -months)
        return first.replace(hour=self.now.hour, minute=self.now.minute, second=self.now.second)

    def _create_files(self, directory: str, date: datetime, kind: str) -> None:
        for extension in self.EXTENSIONS:
            filename = f"{date:%Y%m%d-%H%M%S}-test-{kind}.{extension}.gz"
            path = os.path.join(directory, filename)

            with open(path, 'w', encoding='utf-8') as f:
                f.write(f"Test backup file for {kind} on {date:%Y-%m-%d %H:%M:%S}\n")

            timestamp = date.timestamp()
            os.utime(path, (timestamp, timestamp))
            self.files_created.append(path)
