"""Unit tests for daily report aggregation and CSV export"""

from __future__ import annotations

import csv
import io
from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from qbonotes.notes.errors import StorageError
from qbonotes.reports.csv_export import csv_filename, download_headers, generate_csv
from qbonotes.reports.daily import DailyReportsService, SheetsConnectionError
from qbonotes.reports.models import REPORT_HEADERS, DailyReport, ReportSummary
from qbonotes.reports.windowing import civil_date_of

LA = "America/Los_Angeles"


@pytest.fixture
def seeded(repository, make_record):
    repository.insert(make_record("before-gap", "2024-03-10T09:59:00Z"))
    repository.insert(
        make_record(
            "after-gap",
            "2024-03-10T10:01:00Z",
            transaction_type="Expense",
            amount=100,
            customer_vendor="Office Depot",
            note="Coffee, milk and filters",
        )
    )
    repository.insert(make_record("previous-day", "2024-03-10T07:59:00Z"))
    repository.insert(make_record("next-day", "2024-03-11T08:30:00Z"))
    return repository


@pytest.fixture
def sheets():
    reporter = MagicMock()
    reporter.is_configured.return_value = True
    reporter.test_connection.return_value = True
    return reporter


def make_service(repository, file_storage, sheets=None):
    return DailyReportsService(repository, file_storage, sheets=sheets, report_timezone=LA)


class TestDailyReportsService:
    def test_notes_for_civil_date(self, seeded, file_storage):
        report = make_service(seeded, file_storage).generate_report("2024-03-10")

        assert report.date == "2024-03-10"
        assert [n.id for n in report.notes] == ["before-gap", "after-gap"]
        assert report.summary.total_notes == 2
        assert report.summary.total_amount == pytest.approx(1334.56)
        assert report.summary.transaction_types == {"Invoice": 1, "Expense": 1}

    def test_empty_day(self, seeded, file_storage):
        report = make_service(seeded, file_storage).generate_report("2024-01-01")

        assert report.notes == []
        assert report.summary.to_dict() == {
            "total_notes": 0,
            "total_amount": 0,
            "transaction_types": {},
        }

    def test_invalid_date(self, seeded, file_storage):
        with pytest.raises(ValueError):
            make_service(seeded, file_storage).generate_report("03/10/2024")

    def test_default_date_is_yesterday(self, seeded, file_storage):
        service = make_service(seeded, file_storage)
        assert service.resolve_date(now=datetime(2024, 3, 11, 18, 0, tzinfo=UTC)) == "2024-03-10"

    def test_reads_fall_back_to_file_store(self, file_storage, payload):
        repository = MagicMock()
        repository.list_created_between.side_effect = StorageError("no database")
        record = file_storage.store(payload)
        today = civil_date_of(record.created_at, LA)

        notes = make_service(repository, file_storage).get_notes_for_date(today)

        assert [n.id for n in notes] == [record.id]

    def test_no_stores_yields_nothing(self):
        assert make_service(None, None).get_notes_for_date("2024-03-10") == []

    def test_send_appends_to_sheets(self, seeded, file_storage, sheets):
        report = make_service(seeded, file_storage, sheets).send_daily_report("2024-03-10")

        sheets.append_daily_data.assert_called_once_with(report)
        assert report.summary.total_notes == 2

    def test_send_skips_unconfigured_sheets(self, seeded, file_storage, sheets):
        sheets.is_configured.return_value = False

        make_service(seeded, file_storage, sheets).send_daily_report("2024-03-10")

        sheets.append_daily_data.assert_not_called()

    def test_send_propagates_sheets_failure(self, seeded, file_storage, sheets):
        sheets.append_daily_data.side_effect = RuntimeError("quota")

        with pytest.raises(RuntimeError):
            make_service(seeded, file_storage, sheets).send_daily_report("2024-03-10")

    def test_system_test_requires_sheets(self, seeded, file_storage, sheets):
        sheets.test_connection.return_value = False

        with pytest.raises(SheetsConnectionError):
            make_service(seeded, file_storage, sheets).test_report_system()

    def test_system_test_prefers_today_then_yesterday(self, seeded, file_storage, sheets):
        service = make_service(seeded, file_storage, sheets)

        # Evening of 2024-03-10 locally: two notes today
        report = service.test_report_system(now=datetime(2024, 3, 11, 5, 0, tzinfo=UTC))
        assert report.date == "2024-03-10"
        assert report.summary.total_notes == 2

        # 2024-03-12 locally: nothing today, one note yesterday
        report = service.test_report_system(now=datetime(2024, 3, 12, 18, 0, tzinfo=UTC))
        assert report.date == "2024-03-11"
        assert report.summary.total_notes == 1

    def test_system_test_sends_empty_report(self, seeded, file_storage, sheets):
        report = make_service(seeded, file_storage, sheets).test_report_system(
            now=datetime(2024, 6, 1, 20, 0, tzinfo=UTC)
        )

        assert report.date == "2024-06-01"
        assert report.notes == []
        sheets.append_daily_data.assert_called_once_with(report)


class TestCsvExport:
    def test_layout(self, seeded, file_storage):
        report = make_service(seeded, file_storage).generate_report("2024-03-10")
        rows = list(csv.reader(io.StringIO(generate_csv(report, LA))))

        assert rows[0] == REPORT_HEADERS
        assert rows[1][1] == "Mar 10, 2024, 01:59 AM"
        assert rows[1][5] == "1234.56"
        assert rows[2][5] == "100.00"
        assert rows[2][8] == "Coffee, milk and filters"
        assert rows[3] == []
        assert rows[4][0] == "DAILY SUMMARY"
        assert rows[5][:2] == ["Total Transactions", "2"]
        assert rows[6][:2] == ["Total Amount", "$1334.56"]
        assert rows[7] == []
        assert rows[8][0] == "Transaction Types"
        assert [row[:2] for row in rows[9:]] == [["Invoice", "1"], ["Expense", "1"]]
        assert all(len(row) == len(REPORT_HEADERS) for row in rows if row)

    def test_empty_report(self):
        report = DailyReport(date="2024-01-01", notes=[], summary=ReportSummary())
        rows = list(csv.reader(io.StringIO(generate_csv(report, LA))))

        assert rows[0] == REPORT_HEADERS
        assert rows[3][:2] == ["Total Transactions", "0"]
        assert rows[4][:2] == ["Total Amount", "$0.00"]

    def test_total_matches_sum_of_sub_cent_rows(self, make_record):
        notes = [
            make_record("a", "2024-03-10T18:00:00Z", amount=1.005),
            make_record("b", "2024-03-10T19:00:00Z", amount=1.005),
            make_record("c", "2024-03-10T20:00:00Z", amount=0.333),
        ]
        report = DailyReport(date="2024-03-10", notes=notes, summary=ReportSummary.from_notes(notes))
        rows = list(csv.reader(io.StringIO(generate_csv(report, LA))))

        amounts = [row[5] for row in rows[1:4]]
        assert amounts == ["1.01", "1.01", "0.33"]
        total = sum(Decimal(amount) for amount in amounts)
        assert rows[7][:2] == ["Total Amount", f"${total}"]
        assert report.summary.to_dict()["total_amount"] == 2.35

    def test_download_headers(self):
        headers = download_headers("2024-03-10")

        assert csv_filename("2024-03-10") == "qbo-transactions-2024-03-10.csv"
        assert headers["Content-Disposition"] == 'attachment; filename="qbo-transactions-2024-03-10.csv"'
        assert headers["Cache-Control"] == "no-cache"
