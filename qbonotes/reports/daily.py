"""
Daily report aggregation.

Reads the notes that fall on one civil date in the report zone, summarizes
them and hands the result to Google Sheets. The primary store is queried
first; the file store is the fallback for reads.
"""

from __future__ import annotations

from datetime import datetime

from qbonotes.config import DEFAULT_REPORT_TIMEZONE
from qbonotes.notes.errors import StorageError
from qbonotes.notes.file_storage import FileNoteStorage
from qbonotes.notes.models import NoteRecord
from qbonotes.notes.repository import NoteRepository
from qbonotes.observability.logging import get_logger
from qbonotes.observability.telemetry import counter, log_event
from qbonotes.reports.models import DailyReport, ReportSummary
from qbonotes.reports.sheets import GoogleSheetsReporter
from qbonotes.reports.windowing import (
    default_report_date,
    in_civil_date,
    parse_report_date,
    today_in,
    utc_bounds_for,
)

logger = get_logger(__name__)


class SheetsConnectionError(RuntimeError):
    """Raised by the report system test when Sheets cannot be reached."""


class DailyReportsService:
    def __init__(
        self,
        repository: NoteRepository | None,
        file_storage: FileNoteStorage | None,
        sheets: GoogleSheetsReporter | None = None,
        report_timezone: str = DEFAULT_REPORT_TIMEZONE,
    ):
        self.repository = repository
        self.file_storage = file_storage
        self.sheets = sheets
        self.report_timezone = report_timezone

    def resolve_date(self, report_date: str | None = None, now: datetime | None = None) -> str:
        """
        Validate an explicit date or default to yesterday in the report zone.

        Raises:
            ValueError: If report_date is not YYYY-MM-DD
        """
        if report_date:
            parse_report_date(report_date)
            return report_date
        return default_report_date(self.report_timezone, now)

    def get_notes_for_date(self, report_date: str) -> list[NoteRecord]:
        """
        Notes created on report_date (civil date in the report zone), oldest first.

        Never raises on storage failure: an unreachable database falls back to
        the file store, and an unreadable file store yields no notes.
        """
        if self.repository is not None:
            start, end = utc_bounds_for(report_date, self.report_timezone)
            try:
                candidates = self.repository.list_created_between(start, end)
            except StorageError as e:
                counter("reports.db_read_failed")
                logger.warning("Database query failed, falling back to file storage: %s", e)
            else:
                notes = [
                    n for n in candidates if in_civil_date(n.created_at, report_date, self.report_timezone)
                ]
                logger.info("Found %d notes in database for %s", len(notes), report_date)
                return notes

        if self.file_storage is None:
            return []

        try:
            notes = self.file_storage.get_for_date(report_date, self.report_timezone)
        except StorageError as e:
            logger.error("Both database and file storage failed for %s: %s", report_date, e)
            return []

        logger.info("Found %d notes in file storage for %s", len(notes), report_date)
        return notes

    @staticmethod
    def generate_summary(notes: list[NoteRecord]) -> ReportSummary:
        return ReportSummary.from_notes(notes)

    def generate_report(self, report_date: str | None = None) -> DailyReport:
        """
        Build the report for report_date (default: yesterday in the report zone).

        Raises:
            ValueError: If report_date is not YYYY-MM-DD
        """
        resolved = self.resolve_date(report_date)
        notes = self.get_notes_for_date(resolved)
        return DailyReport(date=resolved, notes=notes, summary=self.generate_summary(notes))

    def _deliver(self, report: DailyReport) -> None:
        if self.sheets is None or not self.sheets.is_configured():
            logger.warning("Google Sheets not configured, skipping daily report delivery")
            return
        self.sheets.append_daily_data(report)

    def send_daily_report(self, report_date: str | None = None) -> DailyReport:
        """
        Generate the report and append it to Google Sheets.

        Raises:
            ValueError: If report_date is not YYYY-MM-DD
            googleapiclient.errors.HttpError: If the Sheets append fails
        """
        report = self.generate_report(report_date)
        summary = report.summary
        logger.info(
            "Daily report for %s: %d transactions, $%.2f total, types=%s",
            report.date,
            summary.total_notes,
            summary.total_amount,
            summary.transaction_types,
        )

        self._deliver(report)

        counter("reports.sent")
        log_event("reports.sent", date=report.date, total_notes=summary.total_notes)
        return report

    def test_report_system(self, now: datetime | None = None) -> DailyReport:
        """
        Check Sheets connectivity, then deliver a report for today, else
        yesterday, else an empty report for today.

        Raises:
            SheetsConnectionError: If Sheets is unconfigured or unreachable
        """
        if self.sheets is None or not self.sheets.test_connection():
            raise SheetsConnectionError("Google Sheets connection failed")

        today = today_in(self.report_timezone, now)
        report = self.generate_report(today)
        if not report.notes:
            logger.info("No data for today, trying yesterday")
            report = self.generate_report(default_report_date(self.report_timezone, now))
        if not report.notes:
            logger.warning("No transaction data found, sending an empty test report")
            report = DailyReport(date=today, notes=[], summary=ReportSummary())

        self._deliver(report)
        return report
