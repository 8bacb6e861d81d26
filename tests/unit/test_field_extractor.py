"""Unit tests for transaction field extraction

Tests cover:
- Full extraction from a saved invoice page
- List/table elements never supply values
- Placeholder and label text rejected
- Amount parsing and the minimum plausible amount
- Missing fields come back as None
"""

from __future__ import annotations

from pathlib import Path

import pytest

from qbonotes.observability.telemetry import get_counter
from qbonotes.scraper.field_extractor import (
    TransactionFieldExtractor,
    element_value,
    get_transaction_data,
    is_from_list,
    parse_amount,
    run_cascade,
)

INVOICE_URL = "https://qbo.intuit.com/app/invoice?txnId=42"
EXPENSE_URL = "https://qbo.intuit.com/app/expense?txnId=9"
FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"


@pytest.fixture
def invoice_html() -> str:
    return (FIXTURES_DIR / "invoice_page.html").read_text()


@pytest.fixture
def expense_html() -> str:
    return (FIXTURES_DIR / "expense_page.html").read_text()


def test_extracts_invoice_page(invoice_html):
    data = get_transaction_data(INVOICE_URL, invoice_html)

    assert data.transaction_url == INVOICE_URL
    assert data.transaction_id == "42"
    assert data.transaction_type == "Invoice"
    assert data.date == "03/10/2024"
    assert data.amount == 1234.56
    assert data.customer_vendor == "Acme Corp"
    assert data.invoice_number == "1042"
    assert data.created_by == "Dana Reyes"


def test_invoice_number_in_table_is_skipped(invoice_html):
    extractor = TransactionFieldExtractor(invoice_html, INVOICE_URL)
    assert extractor.extract_invoice_number() != "0999"


def test_expense_page_skips_prompts_and_fillers(expense_html):
    data = get_transaction_data(EXPENSE_URL, expense_html)

    assert data.transaction_type == "Expense"
    assert data.customer_vendor == "Office Depot"
    assert data.invoice_number == "R-77"
    assert data.date == "03/09/2024"


def test_amount_ignores_grid_rows(expense_html):
    extractor = TransactionFieldExtractor(expense_html, EXPENSE_URL)
    assert extractor.extract_amount() == 75.0


def test_missing_fields_are_none_and_counted():
    data = get_transaction_data(INVOICE_URL, "<html><body><p>Loading...</p></body></html>")

    assert data.amount is None
    assert data.customer_vendor is None
    assert data.invoice_number is None
    assert data.created_by is None
    assert data.transaction_id == "42"
    assert get_counter("extract.partial") == 1


def test_zero_amount_is_not_plausible():
    html = '<form data-automation-id="invoice-form"><input name="amount" value="0.00"></form>'
    assert TransactionFieldExtractor(html, INVOICE_URL).extract_amount() is None


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("$1,234.56", 1234.56),
        (" 42 ", 42.0),
        ("USD 15.5", 15.5),
        ("0.00", None),
        ("-5.00", None),
        ("abc", None),
        ("", None),
    ],
)
def test_parse_amount(text, expected):
    assert parse_amount(text) == expected


def test_is_from_list_checks_ancestors():
    extractor = TransactionFieldExtractor(
        '<div class="grid-row"><span id="inner">1</span></div><span id="outer">2</span>',
        INVOICE_URL,
    )
    assert is_from_list(extractor.soup.select_one("#inner"))
    assert not is_from_list(extractor.soup.select_one("#outer"))


def test_run_cascade_returns_first_hit():
    calls = []

    def step(value):
        def _run():
            calls.append(value)
            return value

        return _run

    assert run_cascade([step(None), step("b"), step("c")]) == "b"
    assert calls == [None, "b"]
    assert run_cascade([step(None)]) is None


def test_invalid_selector_is_skipped():
    extractor = TransactionFieldExtractor("<p>x</p>", INVOICE_URL)
    assert extractor._select("div[[") == []
    assert extractor._select_one("div[[") is None


def test_whitespace_text_falls_back_to_value_attribute():
    html = """
    <form data-automation-id="invoice-form">
      <div data-automation-id="customer-combo" value="Acme Corp">
      </div>
    </form>
    """
    extractor = TransactionFieldExtractor(html, INVOICE_URL)

    assert element_value(extractor.soup.select_one("div")) == "Acme Corp"
    assert get_transaction_data(INVOICE_URL, html).customer_vendor == "Acme Corp"
