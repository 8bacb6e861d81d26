"""
Transaction note domain models.

A note is created once through the intake endpoint, never updated or deleted,
and read back only in aggregate (by civil date) for reporting.
"""

from __future__ import annotations

import math
from datetime import datetime
from enum import Enum
from typing import Any
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator

from qbonotes.utils.timestamps import format_utc, parse_utc, utc_now


class TransactionType(str, Enum):
    """Known transaction types. The set is open: any string is accepted on intake."""

    INVOICE = "Invoice"
    BILL = "Bill"
    EXPENSE = "Expense"
    JOURNAL_ENTRY = "JournalEntry"
    PAYMENT = "Payment"
    BANK_DEPOSIT = "Bank Deposit"
    UNKNOWN = "Unknown"


class NoteStatus(str, Enum):
    OPEN = "Open"


class NotePayload(BaseModel):
    """Body of POST /notes."""

    model_config = ConfigDict(extra="ignore")

    transaction_url: str
    transaction_id: str | None
    transaction_type: str
    date: str
    amount: float
    customer_vendor: str
    invoice_number: str = ""
    note: str
    created_by: str = ""

    @field_validator("transaction_url")
    @classmethod
    def url_is_http(cls, v: str) -> str:
        parsed = urlparse(v.strip())
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("Invalid url")
        return v.strip()

    @field_validator("transaction_id")
    @classmethod
    def missing_id_is_blank(cls, v: str | None) -> str:
        return v or ""

    @field_validator("amount", mode="before")
    @classmethod
    def amount_is_number(cls, v: Any) -> Any:
        # Numeric strings and booleans are client bugs, not amounts
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError("Expected number")
        if not math.isfinite(v):
            raise ValueError("Expected finite number")
        if v < 0:
            raise ValueError("Amount cannot be negative")
        return v

    @field_validator("note")
    @classmethod
    def note_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Note cannot be empty")
        return v.strip()

    @field_validator("invoice_number", "created_by", mode="before")
    @classmethod
    def optional_text(cls, v: Any) -> Any:
        return "" if v is None else v


class NoteRecord(BaseModel):
    """A persisted note: the payload plus server-issued id, status and timestamp."""

    model_config = ConfigDict(use_enum_values=True)

    id: str = Field(..., description="Server-issued opaque identifier")
    transaction_url: str
    transaction_id: str = ""
    transaction_type: str = TransactionType.UNKNOWN.value
    date: str = ""
    amount: float = 0.0
    customer_vendor: str = ""
    invoice_number: str = ""
    note: str
    created_by: str = ""
    status: str = NoteStatus.OPEN.value
    created_at: datetime = Field(default_factory=utc_now)

    @field_validator("created_at", mode="before")
    @classmethod
    def created_at_is_utc(cls, v: Any) -> datetime:
        return parse_utc(v)

    @classmethod
    def from_payload(
        cls, note_id: str, payload: NotePayload, created_at: datetime | None = None
    ) -> NoteRecord:
        return cls(
            id=note_id,
            created_at=created_at or utc_now(),
            status=NoteStatus.OPEN.value,
            **payload.model_dump(),
        )

    def to_db_dict(self) -> dict[str, Any]:
        """Convert to dict for storage (database row or JSONL line)."""
        data = self.model_dump()
        data["created_at"] = format_utc(self.created_at)
        return data

    @classmethod
    def from_db_row(cls, row: dict[str, Any]) -> NoteRecord:
        """Create NoteRecord from a database row or a JSONL object.

        Missing optional columns fall back to defaults; stray keys are dropped.
        """
        known = {key: row[key] for key in cls.model_fields if key in row and row[key] is not None}
        return cls(**known)
