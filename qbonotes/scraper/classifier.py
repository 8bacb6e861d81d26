"""
Page classification by URL.

A page is a single-transaction page when its URL carries a txnId query
parameter, or when it matches a single-entity path pattern and no list/report
pattern. Plain substring tests, first match wins.
"""

from __future__ import annotations

import re
from urllib.parse import urlparse

from qbonotes.config import ACCOUNTING_HOST_MARKER
from qbonotes.notes.models import TransactionType

TXN_ID_MARKER = "txnid="
TXN_ID_PATTERN = re.compile(r"[?&]txnId=([^&#]+)", re.IGNORECASE)

SINGLE_ENTITY_PATTERNS = (
    "/invoice",
    "/bill",
    "/expense",
    "/journal",
    "/payment",
    "/deposit",
    "/transaction/",
    "create",
    "edit",
)

LIST_PAGE_PATTERNS = (
    "/invoices",
    "/bills",
    "/expenses",
    "/journals",
    "/payments",
    "/deposits",
    "/customers",
    "/vendors",
    "/items",
    "/reports",
)

# Order matters: "/invoice" is checked before "/bill" etc.
TYPE_PATTERNS = (
    ("/invoice", TransactionType.INVOICE),
    ("/bill", TransactionType.BILL),
    ("/expense", TransactionType.EXPENSE),
    ("/journal", TransactionType.JOURNAL_ENTRY),
    ("/payment", TransactionType.PAYMENT),
    ("/deposit", TransactionType.BANK_DEPOSIT),
)


def is_list_page(url: str) -> bool:
    lowered = url.lower()
    return any(pattern in lowered for pattern in LIST_PAGE_PATTERNS)


def is_transaction_page(url: str) -> bool:
    lowered = url.lower()
    if TXN_ID_MARKER in lowered:
        return True
    if not any(pattern in lowered for pattern in SINGLE_ENTITY_PATTERNS):
        return False
    return not is_list_page(lowered)


def is_accounting_host(url: str) -> bool:
    host = urlparse(url).hostname or ""
    return ACCOUNTING_HOST_MARKER in host.lower()


def should_offer_note(url: str) -> bool:
    """Whether the note button belongs on this page."""
    return is_accounting_host(url) and is_transaction_page(url)


def transaction_type_from_url(url: str) -> str:
    lowered = url.lower()
    for pattern, kind in TYPE_PATTERNS:
        if pattern in lowered:
            return kind.value
    return TransactionType.UNKNOWN.value


def transaction_id_from_url(url: str) -> str | None:
    match = TXN_ID_PATTERN.search(url)
    return match.group(1) if match else None
