"""
Note composer form state.

Seeded from scraped TransactionData; the user may edit every field except the
URL. Submission is enabled only when the note has non-whitespace text. A
failed submit keeps the form open with an inline error so it can be retried.
"""

from __future__ import annotations

import re
from typing import Any

from qbonotes.composer.client import NotesClient, NotesClientError
from qbonotes.observability.logging import get_logger
from qbonotes.scraper.types import TransactionData

logger = get_logger(__name__)

EDITABLE_FIELDS = (
    "transaction_type",
    "transaction_id",
    "date",
    "amount",
    "customer_vendor",
    "invoice_number",
)


_LEADING_NUMBER = re.compile(r"^[-+]?(?:\d+\.?\d*|\.\d+)")


def _parse_amount(text: str) -> float | None:
    """Leading number of the edited text, e.g. "12.50 USD" -> 12.5."""
    match = _LEADING_NUMBER.match(text.strip())
    return float(match.group(0)) if match else None


class NoteComposer:
    def __init__(self, transaction: TransactionData):
        self.transaction = transaction
        self.fields: dict[str, str] = {
            "transaction_type": transaction.transaction_type or "",
            "transaction_id": transaction.transaction_id or "",
            "date": transaction.date or "",
            "amount": f"{transaction.amount:.2f}" if transaction.amount is not None else "",
            "customer_vendor": transaction.customer_vendor or "",
            "invoice_number": transaction.invoice_number or "",
        }
        self.note = ""
        self.error: str | None = None
        self.is_open = True
        self.submitted_id: str | None = None

    @property
    def transaction_url(self) -> str:
        return self.transaction.transaction_url

    def update(self, field: str, value: str) -> None:
        """
        Edit one form field.

        Raises:
            ValueError: If the field is unknown or read-only
        """
        if field not in EDITABLE_FIELDS:
            raise ValueError(f"Field is not editable: {field}")
        self.fields[field] = value

    def set_note(self, text: str) -> None:
        self.note = text
        self.error = None

    @property
    def can_submit(self) -> bool:
        return self.is_open and bool(self.note.strip())

    def build_payload(self) -> dict[str, Any]:
        """Edited values win; blanks fall back to the scraped values."""
        scraped = self.transaction
        amount = _parse_amount(self.fields["amount"])
        if not amount:
            amount = scraped.amount or 0

        return {
            "transaction_url": scraped.transaction_url,
            "transaction_id": self.fields["transaction_id"] or scraped.transaction_id or "",
            "transaction_type": self.fields["transaction_type"] or scraped.transaction_type,
            "date": self.fields["date"] or scraped.date or "",
            "amount": amount,
            "customer_vendor": self.fields["customer_vendor"] or scraped.customer_vendor or "",
            "invoice_number": self.fields["invoice_number"] or scraped.invoice_number or "",
            "note": self.note.strip(),
            "created_by": scraped.created_by or "",
        }

    def submit(self, client: NotesClient) -> bool:
        """
        Send the note.

        Returns:
            True on success (the form closes); False when submission is not
            allowed or the backend call failed (error is set, form stays open)
        """
        if not self.can_submit:
            return False

        self.error = None
        try:
            self.submitted_id = client.create_note(self.build_payload())
        except NotesClientError as e:
            self.error = f"Failed to send note: {e}"
            logger.warning("Note submission failed: %s", e)
            return False

        self.is_open = False
        logger.info("Note submitted: %s", self.submitted_id)
        return True

    def close(self) -> None:
        self.is_open = False
