"""
Daily report scheduler.

Wraps one APScheduler BackgroundScheduler running a single cron job. The
process entry point builds the ReportScheduler, starts it (explicitly or from
settings) and stops it on shutdown.

Expressions use standard 5-field crontab syntax, evaluated in a fixed zone.
Crontab numbers day-of-week from Sunday (0 or 7); APScheduler numbers from
Monday, so that field is rewritten to day names before building the trigger.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from datetime import datetime
from typing import Any

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from qbonotes.config import DEFAULT_REPORT_TIMEZONE, Settings
from qbonotes.observability.logging import get_logger
from qbonotes.observability.telemetry import counter
from qbonotes.reports.windowing import get_zone
from qbonotes.utils.timestamps import utc_now

logger = get_logger(__name__)

JOB_ID = "daily-report"

DAY_NAMES = ["sun", "mon", "tue", "wed", "thu", "fri", "sat"]

COMMON_SCHEDULES = {
    "daily_9am": "0 9 * * *",
    "weekdays_9am": "0 9 * * 1-5",
    "daily_5pm": "0 17 * * *",
    "weekdays_8am": "0 8 * * 1-5",
    "monday_wednesday_friday_10am": "0 10 * * 1,3,5",
    "end_of_business": "0 18 * * 1-5",
}


def _day_number(token: str) -> int:
    token = token.strip().lower()
    if token in DAY_NAMES:
        return DAY_NAMES.index(token)
    if not token.isdigit() or not 0 <= int(token) <= 7:
        raise ValueError(f"Invalid day of week: {token!r}")
    return int(token) % 7


def translate_day_of_week(field: str) -> str:
    """
    Rewrite a crontab day-of-week field into APScheduler day names.

    "1-5" -> "mon,tue,wed,thu,fri"; "0" and "7" -> "sun"; a field covering
    the whole week -> "*".

    Raises:
        ValueError: If the field is malformed
    """
    days: set[int] = set()
    for part in field.split(","):
        base, _, step_text = part.partition("/")
        step = 1
        if step_text:
            if not step_text.isdigit() or int(step_text) == 0:
                raise ValueError(f"Invalid step in day of week: {part!r}")
            step = int(step_text)

        if base == "*":
            start, end = 0, 6
        elif "-" in base:
            low, high = base.split("-", 1)
            start, end = _day_number(low), _day_number(high)
            # "5-7" ends on Sunday, which crontab spells 7
            if high.strip() == "7":
                end = 7
            if end < start:
                raise ValueError(f"Invalid day-of-week range: {part!r}")
        else:
            start = _day_number(base)
            end = 6 if step_text else start

        days.update(day % 7 for day in range(start, end + 1, step))

    if len(days) == 7:
        return "*"
    return ",".join(DAY_NAMES[day] for day in sorted(days))


def build_trigger(cron_expression: str, timezone: str) -> CronTrigger:
    """
    Parse a 5-field crontab expression into a CronTrigger.

    Raises:
        ValueError: If the expression or timezone is invalid
    """
    if not isinstance(cron_expression, str):
        raise ValueError("Cron expression must be a string")
    fields = cron_expression.split()
    if len(fields) != 5:
        raise ValueError(f"Invalid cron expression {cron_expression!r}: expected 5 fields")

    minute, hour, day, month, day_of_week = fields
    get_zone(timezone)
    return CronTrigger(
        minute=minute,
        hour=hour,
        day=day,
        month=month,
        day_of_week=translate_day_of_week(day_of_week),
        timezone=timezone,
    )


def validate_cron(cron_expression: str, timezone: str = DEFAULT_REPORT_TIMEZONE) -> bool:
    try:
        build_trigger(cron_expression, timezone)
    except ValueError:
        return False
    return True


def next_fire_times(
    cron_expression: str,
    timezone: str = DEFAULT_REPORT_TIMEZONE,
    count: int = 3,
    now: datetime | None = None,
) -> list[datetime]:
    """Upcoming firing instants (in the schedule zone) for an expression."""
    trigger = build_trigger(cron_expression, timezone)
    current = (now or utc_now()).astimezone(get_zone(timezone))
    times: list[datetime] = []
    previous = None
    for _ in range(count):
        fire_time = trigger.get_next_fire_time(previous, current)
        if fire_time is None:
            break
        times.append(fire_time)
        previous = fire_time
        current = fire_time
    return times


class ReportScheduler:
    """
    Owns the single scheduled daily-report job.

    Args:
        run_report: Pipeline to run; receives an optional YYYY-MM-DD date
        timezone: IANA zone the cron expression is evaluated in
    """

    def __init__(
        self,
        run_report: Callable[[str | None], Any],
        timezone: str = DEFAULT_REPORT_TIMEZONE,
    ):
        self.run_report = run_report
        self.timezone = timezone
        self.cron_expression: str | None = None
        self._scheduler: BackgroundScheduler | None = None
        self._lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._scheduler is not None

    def _run_scheduled(self) -> None:
        logger.info("Scheduled daily report execution started")
        try:
            self.run_report(None)
        except Exception as e:
            counter("scheduler.run_failed")
            logger.error("Scheduled daily report failed: %s", e)
            return
        counter("scheduler.run_succeeded")
        logger.info("Scheduled daily report completed")

    def start(self, cron_expression: str) -> bool:
        """
        Start the scheduled job.

        Returns:
            True if started, False if a job was already running

        Raises:
            ValueError: If the expression is invalid
        """
        trigger = build_trigger(cron_expression, self.timezone)

        with self._lock:
            if self._scheduler is not None:
                logger.warning("Report scheduler is already running (%s)", self.cron_expression)
                return False

            scheduler = BackgroundScheduler(timezone=self.timezone)
            scheduler.add_job(
                self._run_scheduled,
                trigger=trigger,
                id=JOB_ID,
                max_instances=1,
                coalesce=True,
                replace_existing=True,
            )
            scheduler.start()
            self._scheduler = scheduler
            self.cron_expression = cron_expression

        logger.info("Daily report scheduler started: %r (%s)", cron_expression, self.timezone)
        return True

    def stop(self) -> bool:
        """
        Stop the scheduled job.

        Returns:
            True if a job was stopped, False if none was running
        """
        with self._lock:
            scheduler = self._scheduler
            if scheduler is None:
                logger.warning("No report scheduler is currently running")
                return False
            self._scheduler = None
            self.cron_expression = None

        scheduler.shutdown(wait=False)
        logger.info("Daily report scheduler stopped")
        return True

    def get_status(self) -> dict[str, Any]:
        next_run = None
        scheduler = self._scheduler
        if scheduler is not None:
            job = scheduler.get_job(JOB_ID)
            if job is not None and job.next_run_time is not None:
                next_run = job.next_run_time.isoformat()
        return {
            "is_running": scheduler is not None,
            "cron_expression": self.cron_expression,
            "timezone": self.timezone,
            "next_run_time": next_run,
        }

    def trigger_manual(self, report_date: str | None = None) -> Any:
        """Run the pipeline now, outside the schedule. Errors propagate."""
        logger.info("Manual daily report triggered (date=%s)", report_date or "yesterday")
        return self.run_report(report_date)

    def validate(self, cron_expression: str) -> bool:
        return validate_cron(cron_expression, self.timezone)

    @staticmethod
    def common_schedules() -> dict[str, str]:
        return dict(COMMON_SCHEDULES)

    def init_from_settings(self, settings: Settings) -> bool:
        """
        Auto-start from DAILY_REPORT_SCHEDULE when AUTO_START_SCHEDULER is set.

        An invalid configured expression is logged, not raised.
        """
        if not settings.report_schedule:
            logger.info("No DAILY_REPORT_SCHEDULE configured")
            return False
        if not settings.auto_start_scheduler:
            logger.info(
                "Schedule %r configured but not auto-started (set AUTO_START_SCHEDULER=true)",
                settings.report_schedule,
            )
            return False
        try:
            return self.start(settings.report_schedule)
        except ValueError as e:
            logger.error("Invalid DAILY_REPORT_SCHEDULE %r: %s", settings.report_schedule, e)
            return False
