"""
Unit tests for retention evaluation (backup_retention/core/retention.py).

Covers the two-tier policy: monthly backups resolved first, daily backups
promoted for months inside the monthly window that have no monthly backup.
"""

from collections import defaultdict
from datetime import datetime, timedelta

import pytest

from backup_retention.core.models import RetentionPolicy
from backup_retention.core.retention import (RetentionEvaluator, daily_cutoff, month_start,
                                             monthly_cutoff, shift_months)


class TestMonthArithmetic:
    """Test calendar-month helpers."""

    def test_month_start(self):
        assert month_start(datetime(2024, 3, 15, 12, 30)) == datetime(2024, 3, 1)

    @pytest.mark.parametrize('moment,months,expected', [
        (datetime(2024, 3, 1), -3, datetime(2023, 12, 1)),
        (datetime(2024, 1, 1), -1, datetime(2023, 12, 1)),
        (datetime(2024, 12, 1), 1, datetime(2025, 1, 1)),
        (datetime(2024, 3, 31), -1, datetime(2024, 2, 29)),
        (datetime(2023, 3, 31), -1, datetime(2023, 2, 28)),
        (datetime(2024, 3, 1), -24, datetime(2022, 3, 1)),
        (datetime(2024, 3, 1), 0, datetime(2024, 3, 1)),
    ])
    def test_shift_months(self, moment, months, expected):
        assert shift_months(moment, months) == expected

    def test_cutoffs(self, scenario_policy, scenario_now):
        assert daily_cutoff(scenario_policy, scenario_now) == datetime(2024, 3, 8, 12, 0, 0)
        assert monthly_cutoff(scenario_policy, scenario_now) == datetime(2023, 12, 1)

    def test_monthly_cutoff_uses_calendar_months(self):
        """Test that 12 months back from any day in March is March 1st of last year."""
        policy = RetentionPolicy(monthly_window_months=12)

        assert monthly_cutoff(policy, datetime(2024, 3, 31, 23, 59)) == datetime(2023, 3, 1)
        assert monthly_cutoff(policy, datetime(2024, 3, 1, 0, 0)) == datetime(2023, 3, 1)


class TestScenarios:
    """The reference scenarios: 7 days, 3 months, now = 2024-03-15."""

    @pytest.fixture
    def decision(self, make_record, scenario_policy, scenario_now):
        records = [
            make_record('20240314-020000-prod.tar.gz'),
            make_record('20240301-020000-prod.tar.gz'),
            make_record('20240215-020000-prod.tar.gz'),
            make_record('20231101-020000-prod.tar.gz'),
            make_record('20240115-020000-prod.tar.gz'),
        ]
        return RetentionEvaluator().evaluate(records, scenario_policy, scenario_now)

    def test_recent_daily_backup_is_kept(self, decision):
        assert '/backups/20240314-020000-prod.tar.gz' in decision.keep

    def test_monthly_backup_inside_window_is_kept(self, decision):
        assert '/backups/20240301-020000-prod.tar.gz' in decision.keep

    def test_february_daily_is_promoted(self, decision):
        """February has no monthly backup, so its only daily backup stands in."""
        assert '/backups/20240215-020000-prod.tar.gz' in decision.keep
        assert 'promoted' in decision.reasons['/backups/20240215-020000-prod.tar.gz']

    def test_monthly_backup_outside_window_is_deleted(self, decision):
        assert '/backups/20231101-020000-prod.tar.gz' in decision.delete

    def test_old_daily_promoted_for_january(self, decision):
        assert '/backups/20240115-020000-prod.tar.gz' in decision.keep

    def test_partition_is_complete(self, decision):
        assert decision.keep.isdisjoint(decision.delete)
        assert len(decision.keep) + len(decision.delete) == 5


class TestRetentionEvaluator:
    """Test the individual evaluation rules."""

    def test_daily_in_represented_month_outside_window_is_deleted(
            self, make_record, scenario_policy, scenario_now):
        """A February daily is deleted when February has a monthly backup."""
        records = [
            make_record('20240201-020000-prod.tar.gz'),
            make_record('20240215-020000-prod.tar.gz'),
        ]

        decision = RetentionEvaluator().evaluate(records, scenario_policy, scenario_now)

        assert decision.keep == {'/backups/20240201-020000-prod.tar.gz'}
        assert decision.delete == {'/backups/20240215-020000-prod.tar.gz'}

    def test_duplicate_monthly_backups_keep_only_newest(
            self, make_record, scenario_policy, scenario_now):
        records = [
            make_record('20240201-020000-prod.tar.gz'),
            make_record('20240201-030000-prod.tar.gz'),
            make_record('20240201-010000-prod.tar.gz'),
        ]

        decision = RetentionEvaluator().evaluate(records, scenario_policy, scenario_now)

        assert decision.keep == {'/backups/20240201-030000-prod.tar.gz'}
        assert len(decision.delete) == 2

    def test_duplicate_monthly_backups_deleted_even_when_recent(self, make_record, scenario_policy):
        """Duplicates are deleted regardless of their own age."""
        now = datetime(2024, 3, 2, 12, 0, 0)
        records = [
            make_record('20240301-010000-prod.tar.gz'),
            make_record('20240301-020000-prod.tar.gz'),
        ]

        decision = RetentionEvaluator().evaluate(records, scenario_policy, now)

        assert decision.keep == {'/backups/20240301-020000-prod.tar.gz'}
        assert decision.delete == {'/backups/20240301-010000-prod.tar.gz'}

    def test_promotion_picks_newest_daily(self, make_record, scenario_policy, scenario_now):
        records = [
            make_record('20240105-020000-prod.tar.gz'),
            make_record('20240128-020000-prod.tar.gz'),
            make_record('20240117-020000-prod.tar.gz'),
        ]

        decision = RetentionEvaluator().evaluate(records, scenario_policy, scenario_now)

        assert decision.keep == {'/backups/20240128-020000-prod.tar.gz'}

    def test_daily_backups_outside_all_windows_are_deleted(
            self, make_record, scenario_policy, scenario_now):
        records = [
            make_record('20231115-020000-prod.tar.gz'),
            make_record('20231120-020000-prod.sql.gz'),
        ]

        decision = RetentionEvaluator().evaluate(records, scenario_policy, scenario_now)

        assert decision.keep == frozenset()
        assert len(decision.delete) == 2

    def test_cutoff_month_is_inside_window(self, make_record, scenario_policy, scenario_now):
        """December 2023 starts exactly at the monthly cutoff and is retained."""
        records = [
            make_record('20231201-020000-prod.tar.gz'),
            make_record('20231130-020000-prod.tar.gz'),
        ]

        decision = RetentionEvaluator().evaluate(records, scenario_policy, scenario_now)

        assert decision.keep == {'/backups/20231201-020000-prod.tar.gz'}
        assert decision.delete == {'/backups/20231130-020000-prod.tar.gz'}

    def test_daily_window_boundary_is_inclusive(self, make_record, scenario_policy, scenario_now):
        records = [
            make_record('20240301-020000-prod.tar.gz'),
            make_record('20240308-120000-prod.tar.gz'),
            make_record('20240308-115959-prod.tar.gz'),
        ]

        decision = RetentionEvaluator().evaluate(records, scenario_policy, scenario_now)

        assert '/backups/20240308-120000-prod.tar.gz' in decision.keep
        assert '/backups/20240308-115959-prod.tar.gz' in decision.delete

    def test_modification_time_drives_age(self, make_record, scenario_policy, scenario_now):
        """A file named as old but modified recently is judged by its mtime."""
        record = make_record('20231115-020000-prod.tar.gz', timestamp=datetime(2024, 3, 14, 2, 0, 0))

        decision = RetentionEvaluator().evaluate([record], scenario_policy, scenario_now)

        assert decision.keep == {record.path}

    def test_undated_file_is_daily_by_mtime(self, make_record, scenario_policy, scenario_now):
        record = make_record('production.tar.gz', timestamp=datetime(2023, 6, 1, 2, 0, 0))

        decision = RetentionEvaluator().evaluate([record], scenario_policy, scenario_now)

        assert decision.delete == {record.path}

    def test_tie_break_is_deterministic(self, make_record, scenario_policy, scenario_now):
        stamp = datetime(2024, 1, 20, 2, 0, 0)
        records = [
            make_record('20240120-020000-a.tar.gz', timestamp=stamp),
            make_record('20240120-020000-b.tar.gz', timestamp=stamp),
        ]

        first = RetentionEvaluator().evaluate(records, scenario_policy, scenario_now)
        second = RetentionEvaluator().evaluate(list(reversed(records)), scenario_policy, scenario_now)

        assert first.keep == second.keep == {'/backups/20240120-020000-b.tar.gz'}

    def test_zero_windows_keep_current_month_only(self, make_record):
        policy = RetentionPolicy(daily_window_days=0, monthly_window_months=0)
        now = datetime(2024, 3, 15, 12, 0, 0)
        records = [
            make_record('20240310-020000-prod.tar.gz'),
            make_record('20240314-020000-prod.tar.gz'),
            make_record('20240228-020000-prod.tar.gz'),
        ]

        decision = RetentionEvaluator().evaluate(records, policy, now)

        assert decision.keep == {'/backups/20240314-020000-prod.tar.gz'}

    def test_largest_windows_keep_everything(self, make_record):
        policy = RetentionPolicy(daily_window_days=36500, monthly_window_months=1200)
        records = [
            make_record('19500101-020000-prod.tar.gz'),
            make_record('20240310-020000-prod.tar.gz'),
        ]

        decision = RetentionEvaluator().evaluate(records, policy, datetime(2024, 3, 15, 12, 0, 0))

        assert decision.delete == frozenset()
        assert len(decision.keep) == 2

    def test_empty_input(self, scenario_policy, scenario_now):
        decision = RetentionEvaluator().evaluate([], scenario_policy, scenario_now)

        assert decision.keep == frozenset()
        assert decision.delete == frozenset()


class TestRetentionProperties:
    """Properties over a year of nightly backups."""

    @pytest.fixture
    def nightly_records(self, make_record):
        start = datetime(2023, 1, 1, 2, 0, 0)
        records = []
        for day in range(440):
            moment = start + timedelta(days=day)
            records.append(make_record(f"{moment:%Y%m%d-%H%M%S}-prod.tar.gz"))
            # some months lose their monthly backup
            if moment.day == 1 and moment.month in (4, 9):
                records.pop()
        return records

    @pytest.fixture
    def policy(self):
        return RetentionPolicy(daily_window_days=14, monthly_window_months=6)

    @pytest.fixture
    def now(self):
        return datetime(2024, 3, 15, 12, 0, 0)

    def _survivors(self, records, policy, now):
        decision = RetentionEvaluator().evaluate(records, policy, now)
        return [r for r in records if r.path in decision.keep]

    def test_idempotent(self, nightly_records, policy, now):
        survivors = self._survivors(nightly_records, policy, now)
        second = RetentionEvaluator().evaluate(survivors, policy, now)

        assert second.delete == frozenset()

    def test_one_survivor_per_month_outside_daily_window(self, nightly_records, policy, now):
        survivors = self._survivors(nightly_records, policy, now)
        cutoff = daily_cutoff(policy, now)
        window_start = monthly_cutoff(policy, now)

        per_month = defaultdict(list)
        for record in survivors:
            if record.timestamp < cutoff:
                per_month[record.month_key].append(record)

        for month, records in per_month.items():
            assert records[0].month_start >= window_start
            assert len(records) == 1, month

    def test_every_month_in_window_is_represented(self, nightly_records, policy, now):
        survivors = self._survivors(nightly_records, policy, now)
        window_start = monthly_cutoff(policy, now)

        months_before = {r.month_key for r in nightly_records if r.month_start >= window_start}
        months_after = {r.month_key for r in survivors}

        assert months_before <= months_after
        assert '2023-09' in months_after

    def test_daily_window_respected(self, nightly_records, policy, now):
        survivors = {r.path for r in self._survivors(nightly_records, policy, now)}
        cutoff = daily_cutoff(policy, now)

        recent = [r for r in nightly_records if cutoff <= r.timestamp <= now]
        assert recent
        assert all(r.path in survivors for r in recent)

    def test_outside_all_windows_deleted(self, nightly_records, policy, now):
        survivors = self._survivors(nightly_records, policy, now)
        window_start = monthly_cutoff(policy, now)

        assert all(r.month_start >= window_start for r in survivors)
