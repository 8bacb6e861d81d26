"""Scraped transaction fields."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


@dataclass
class TransactionData:
    """
    Best-effort fields read from a transaction page.

    Every scraped field is None when nothing plausible was found; the user
    fills the gaps in the composer.
    """

    transaction_url: str
    transaction_id: str | None = None
    transaction_type: str = "Unknown"
    date: str | None = None
    amount: float | None = None
    customer_vendor: str | None = None
    invoice_number: str | None = None
    created_by: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
