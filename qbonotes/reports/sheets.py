"""
Google Sheets delivery for daily reports.

Appends one row per note plus a synthetic summary row to an existing sheet.
The Sheets service object is injectable; without one it is built from
service-account credentials on first use.
"""

from __future__ import annotations

from typing import Any

from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from qbonotes.config import DEFAULT_REPORT_TIMEZONE, DEFAULT_SHEET_NAME, Settings
from qbonotes.observability.logging import get_logger
from qbonotes.observability.telemetry import counter
from qbonotes.reports.models import REPORT_HEADERS, DailyReport

logger = get_logger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
TOKEN_URI = "https://oauth2.googleapis.com/token"


class GoogleSheetsReporter:
    def __init__(
        self,
        spreadsheet_id: str | None,
        service_account_email: str | None,
        private_key: str | None,
        sheet_name: str = DEFAULT_SHEET_NAME,
        report_timezone: str = DEFAULT_REPORT_TIMEZONE,
        service: Any = None,
    ):
        self.spreadsheet_id = spreadsheet_id
        self.service_account_email = service_account_email
        self.private_key = private_key
        self.sheet_name = sheet_name
        self.report_timezone = report_timezone
        self._service = service

    @classmethod
    def from_settings(cls, settings: Settings, service: Any = None) -> GoogleSheetsReporter:
        return cls(
            spreadsheet_id=settings.sheets_id,
            service_account_email=settings.service_account_email,
            private_key=settings.private_key,
            sheet_name=settings.sheet_name,
            report_timezone=settings.report_timezone,
            service=service,
        )

    def is_configured(self) -> bool:
        return bool(self.spreadsheet_id and self.service_account_email and self.private_key)

    def _ensure_service(self) -> Any:
        if self._service is not None:
            return self._service
        creds = service_account.Credentials.from_service_account_info(
            {
                "type": "service_account",
                "client_email": self.service_account_email,
                "private_key": self.private_key,
                "token_uri": TOKEN_URI,
            },
            scopes=SCOPES,
        )
        self._service = build("sheets", "v4", credentials=creds, cache_discovery=False)
        return self._service

    def build_rows(self, report: DailyReport) -> list[list[Any]]:
        rows = [report.note_row(note, self.report_timezone) for note in report.notes]
        if rows:
            summary = report.summary
            types = ", ".join(f"{kind}: {count}" for kind, count in summary.transaction_types.items())
            rows.append(
                [
                    report.date,
                    "DAILY SUMMARY",
                    f"{summary.total_notes} transactions",
                    "",
                    "",
                    round(summary.total_amount, 2),
                    types,
                    "",
                    f"Daily report for {report.date}",
                    "SYSTEM",
                    "SUMMARY",
                    "",
                ]
            )
        return rows

    def ensure_headers(self, service: Any) -> None:
        """Write the header row when row 1 is empty. Failures are logged only."""
        header_range = f"{self.sheet_name}!A1:L1"
        try:
            existing = (
                service.spreadsheets()
                .values()
                .get(spreadsheetId=self.spreadsheet_id, range=header_range)
                .execute()
                .get("values", [])
            )
            if not existing:
                service.spreadsheets().values().update(
                    spreadsheetId=self.spreadsheet_id,
                    range=header_range,
                    valueInputOption="RAW",
                    body={"values": [REPORT_HEADERS]},
                ).execute()
                logger.info("Added headers to sheet %s", self.sheet_name)
        except HttpError as e:
            logger.error("Error ensuring sheet headers: %s", e)

    def append_daily_data(self, report: DailyReport) -> int:
        """
        Append the report's rows to the sheet.

        Returns:
            Number of rows appended (0 when unconfigured)

        Raises:
            HttpError: If the append call fails
        """
        if not self.is_configured():
            logger.warning("Google Sheets not configured, skipping data append")
            return 0

        service = self._ensure_service()
        rows = self.build_rows(report)
        self.ensure_headers(service)

        if not rows:
            logger.info("No transactions for %s, nothing appended", report.date)
            return 0

        service.spreadsheets().values().append(
            spreadsheetId=self.spreadsheet_id,
            range=f"{self.sheet_name}!A:L",
            valueInputOption="RAW",
            insertDataOption="INSERT_ROWS",
            body={"values": rows},
        ).execute()

        counter("sheets.rows_appended", len(rows))
        logger.info("Added %d transactions to Google Sheet for %s", len(report.notes), report.date)
        return len(rows)

    def test_connection(self) -> bool:
        if not self.is_configured():
            logger.warning("Google Sheets not configured")
            return False

        try:
            service = self._ensure_service()
            result = service.spreadsheets().get(spreadsheetId=self.spreadsheet_id).execute()
        except (HttpError, ValueError, OSError) as e:
            logger.error("Google Sheets connection failed: %s", e)
            return False

        title = result.get("properties", {}).get("title")
        logger.info("Google Sheets connection ok: spreadsheet=%r sheet=%r", title, self.sheet_name)
        return True
