"""Unit tests for the daily report scheduler"""

from __future__ import annotations

from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest

from qbonotes.config import Settings
from qbonotes.observability.telemetry import get_counter
from qbonotes.reports.scheduler import (
    ReportScheduler,
    build_trigger,
    next_fire_times,
    translate_day_of_week,
    validate_cron,
)

LA = "America/Los_Angeles"


@pytest.fixture
def scheduler():
    sched = ReportScheduler(MagicMock(), timezone=LA)
    yield sched
    if sched.is_running:
        sched.stop()


@pytest.mark.parametrize(
    ("field", "expected"),
    [
        ("1-5", "mon,tue,wed,thu,fri"),
        ("0", "sun"),
        ("7", "sun"),
        ("6-7", "sun,sat"),
        ("1,3,5", "mon,wed,fri"),
        ("*", "*"),
        ("0-6", "*"),
        ("*/2", "sun,tue,thu,sat"),
        ("mon-fri", "mon,tue,wed,thu,fri"),
    ],
)
def test_translate_day_of_week(field, expected):
    assert translate_day_of_week(field) == expected


@pytest.mark.parametrize("field", ["8", "5-1", "x", "*/0"])
def test_translate_day_of_week_rejects(field):
    with pytest.raises(ValueError):
        translate_day_of_week(field)


@pytest.mark.parametrize("expression", ["0 9 * *", "0 9 * * * *", "", "61 9 * * *", "0 9 * * 9"])
def test_invalid_expressions(expression):
    assert not validate_cron(expression)
    with pytest.raises(ValueError):
        build_trigger(expression, LA)


def test_valid_expression():
    assert validate_cron("0 9 * * 1-5", LA)


def test_next_fire_times_are_weekday_mornings_in_zone():
    # Friday 2024-03-08 10:00 PST, after that day's run
    now = datetime(2024, 3, 8, 18, 0, tzinfo=UTC)

    times = next_fire_times("0 9 * * 1-5", LA, count=3, now=now)

    assert [t.date().isoformat() for t in times] == ["2024-03-11", "2024-03-12", "2024-03-13"]
    assert all(t.hour == 9 and t.minute == 0 for t in times)
    # First run after the DST switch is 09:00 PDT
    assert times[0].utcoffset().total_seconds() == -7 * 3600


class TestReportScheduler:
    def test_start_twice_is_a_noop(self, scheduler):
        assert scheduler.start("0 9 * * 1-5")
        assert not scheduler.start("0 17 * * *")

        status = scheduler.get_status()
        assert status["is_running"]
        assert status["cron_expression"] == "0 9 * * 1-5"
        assert status["timezone"] == LA
        assert status["next_run_time"] is not None

    def test_stop(self, scheduler):
        assert not scheduler.stop()

        scheduler.start("0 9 * * *")
        assert scheduler.stop()
        assert not scheduler.is_running
        assert scheduler.get_status() == {
            "is_running": False,
            "cron_expression": None,
            "timezone": LA,
            "next_run_time": None,
        }

    def test_invalid_expression_does_not_start(self, scheduler):
        with pytest.raises(ValueError):
            scheduler.start("every morning")
        assert not scheduler.is_running

    def test_scheduled_failure_is_swallowed(self):
        run_report = MagicMock(side_effect=RuntimeError("sheets down"))
        sched = ReportScheduler(run_report, timezone=LA)

        sched._run_scheduled()

        run_report.assert_called_once_with(None)
        assert get_counter("scheduler.run_failed") == 1

    def test_manual_trigger_propagates(self):
        run_report = MagicMock(side_effect=ValueError("Invalid date format. Use YYYY-MM-DD"))
        sched = ReportScheduler(run_report, timezone=LA)

        with pytest.raises(ValueError):
            sched.trigger_manual("bad")

    def test_manual_trigger_passes_date(self, scheduler):
        scheduler.trigger_manual("2024-03-10")
        scheduler.run_report.assert_called_once_with("2024-03-10")

    def test_common_schedules_are_valid(self, scheduler):
        schedules = scheduler.common_schedules()

        assert schedules["weekdays_9am"] == "0 9 * * 1-5"
        assert all(scheduler.validate(expr) for expr in schedules.values())

    def test_init_from_settings(self, scheduler):
        assert not scheduler.init_from_settings(Settings(report_schedule=None))
        assert not scheduler.init_from_settings(
            Settings(report_schedule="0 9 * * 1-5", auto_start_scheduler=False)
        )
        assert not scheduler.init_from_settings(
            Settings(report_schedule="bogus", auto_start_scheduler=True)
        )
        assert not scheduler.is_running

        assert scheduler.init_from_settings(
            Settings(report_schedule="0 9 * * 1-5", auto_start_scheduler=True)
        )
        assert scheduler.is_running
