"""Daily report data. Derived on demand from stored notes and never persisted."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from qbonotes.notes.models import NoteRecord, TransactionType
from qbonotes.reports.windowing import format_created_at

REPORT_HEADERS = [
    "Report Date",
    "Created At",
    "Transaction Type",
    "Transaction ID",
    "Date",
    "Amount",
    "Customer/Vendor",
    "Invoice/Bill #",
    "Note",
    "Created By",
    "Status",
    "QuickBooks URL",
]


CENT = Decimal("0.01")


def to_cents(amount: float | None) -> Decimal:
    """Amount rounded half-up to whole cents. Rows and totals both use this."""
    return Decimal(str(amount or 0)).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass
class ReportSummary:
    total_notes: int = 0
    total_amount: float = 0.0
    transaction_types: dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_notes(cls, notes: list[NoteRecord]) -> ReportSummary:
        summary = cls(total_notes=len(notes))
        total = Decimal("0.00")
        for note in notes:
            total += to_cents(note.amount)
            kind = note.transaction_type or TransactionType.UNKNOWN.value
            summary.transaction_types[kind] = summary.transaction_types.get(kind, 0) + 1
        summary.total_amount = float(total)
        return summary

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_notes": self.total_notes,
            "total_amount": round(self.total_amount, 2),
            "transaction_types": dict(self.transaction_types),
        }


@dataclass
class DailyReport:
    date: str
    notes: list[NoteRecord]
    summary: ReportSummary

    def note_row(self, note: NoteRecord, tz_name: str) -> list[Any]:
        """One report row (REPORT_HEADERS order). Amount stays numeric, in whole cents."""
        return [
            self.date,
            format_created_at(note.created_at, tz_name),
            note.transaction_type or "",
            note.transaction_id or "",
            note.date or "",
            float(to_cents(note.amount)),
            note.customer_vendor or "",
            note.invoice_number or "",
            note.note or "",
            note.created_by or "",
            note.status or "",
            note.transaction_url or "",
        ]

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "summary": self.summary.to_dict(),
            "notes": [note.to_db_dict() for note in self.notes],
        }
