"""
CSV rendering of a daily report.

Layout: header row, one row per note, a blank row, the summary block, a blank
row, then one row per transaction type.
"""

from __future__ import annotations

import csv
import io
from typing import Any

from qbonotes.observability.logging import get_logger
from qbonotes.reports.models import REPORT_HEADERS, DailyReport

logger = get_logger(__name__)

_WIDTH = len(REPORT_HEADERS)


def _pad(*cells: Any) -> list[Any]:
    return list(cells) + [""] * (_WIDTH - len(cells))


def generate_csv(report: DailyReport, tz_name: str) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")

    writer.writerow(REPORT_HEADERS)
    for note in report.notes:
        row = report.note_row(note, tz_name)
        row[5] = f"{row[5]:.2f}"
        writer.writerow(row)

    summary = report.summary
    writer.writerow([])
    writer.writerow(_pad("DAILY SUMMARY"))
    writer.writerow(_pad("Total Transactions", str(summary.total_notes)))
    writer.writerow(_pad("Total Amount", f"${summary.total_amount:.2f}"))
    writer.writerow([])
    writer.writerow(_pad("Transaction Types"))
    for kind, count in summary.transaction_types.items():
        writer.writerow(_pad(kind, str(count)))

    return buffer.getvalue()


def csv_filename(report_date: str) -> str:
    return f"qbo-transactions-{report_date}.csv"


def download_headers(report_date: str) -> dict[str, str]:
    return {
        "Content-Disposition": f'attachment; filename="{csv_filename(report_date)}"',
        "Cache-Control": "no-cache",
    }


def log_export_summary(report: DailyReport) -> None:
    logger.info(
        "CSV export for %s: %d transactions, $%.2f total, types=%s, file=%s",
        report.date,
        report.summary.total_notes,
        report.summary.total_amount,
        report.summary.transaction_types,
        csv_filename(report.date),
    )
