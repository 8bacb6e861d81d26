"""Unit tests for URL-based page classification"""

from __future__ import annotations

import pytest

from qbonotes.scraper.classifier import (
    is_accounting_host,
    is_list_page,
    is_transaction_page,
    should_offer_note,
    transaction_id_from_url,
    transaction_type_from_url,
)


@pytest.mark.parametrize(
    "url",
    [
        "https://qbo.intuit.com/app/invoice?txnId=42",
        "https://qbo.intuit.com/app/expense",
        "https://qbo.intuit.com/app/bill?txnId=7",
        "https://qbo.intuit.com/app/journal",
        "https://qbo.intuit.com/app/transaction/123",
        "https://qbo.intuit.com/app/create-estimate",
    ],
)
def test_single_transaction_pages(url):
    assert is_transaction_page(url)


@pytest.mark.parametrize(
    "url",
    [
        "https://qbo.intuit.com/app/invoices",
        "https://qbo.intuit.com/app/expenses",
        "https://qbo.intuit.com/app/customers",
        "https://qbo.intuit.com/app/reports/profit-loss",
        "https://qbo.intuit.com/app/homepage",
    ],
)
def test_list_and_other_pages_rejected(url):
    assert not is_transaction_page(url)


def test_txn_id_wins_over_list_pattern():
    url = "https://qbo.intuit.com/app/invoices?txnId=123"
    assert is_list_page(url)
    assert is_transaction_page(url)


def test_txn_id_is_case_insensitive():
    url = "https://qbo.intuit.com/app/sales?TXNID=77"
    assert is_transaction_page(url)
    assert transaction_id_from_url(url) == "77"


def test_transaction_id_stops_at_next_param():
    assert transaction_id_from_url("https://qbo.intuit.com/app/bill?txnId=55&tab=1") == "55"
    assert transaction_id_from_url("https://qbo.intuit.com/app/bill") is None


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("https://qbo.intuit.com/app/invoice?txnId=1", "Invoice"),
        ("https://qbo.intuit.com/app/bill?txnId=1", "Bill"),
        ("https://qbo.intuit.com/app/expense?txnId=1", "Expense"),
        ("https://qbo.intuit.com/app/journal?txnId=1", "JournalEntry"),
        ("https://qbo.intuit.com/app/payment?txnId=1", "Payment"),
        ("https://qbo.intuit.com/app/deposit?txnId=1", "Bank Deposit"),
        ("https://qbo.intuit.com/app/transaction/9", "Unknown"),
    ],
)
def test_transaction_type_from_url(url, expected):
    assert transaction_type_from_url(url) == expected


def test_accounting_host_checks_hostname_only():
    assert is_accounting_host("https://qbo.intuit.com/app/invoice")
    assert not is_accounting_host("https://example.com/qbo.intuit.com/app/invoice")


def test_should_offer_note_needs_host_and_transaction_page():
    assert should_offer_note("https://qbo.intuit.com/app/invoice?txnId=42")
    assert not should_offer_note("https://qbo.intuit.com/app/invoices")
    assert not should_offer_note("https://example.com/app/invoice?txnId=42")
