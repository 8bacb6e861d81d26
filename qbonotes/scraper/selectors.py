"""
Selector cascades for transaction field extraction.

Each tuple is tried in order; earlier selectors are more reliable. They target
the accounting app's markup as observed and will drift when its UI changes.
"""

from __future__ import annotations

from qbonotes.notes.models import TransactionType

# --- Amount ---

TRANSACTION_CONTAINERS = (
    '[data-automation-id*="transaction"]',
    '[data-automation-id*="expense"]',
    '[data-automation-id*="invoice"]',
    ".transaction-form",
    ".expense-form",
    ".invoice-form",
    'form[data-automation-id*="form"]',
    '[role="main"]',
    ".main-content",
)

AMOUNT_SELECTORS = (
    # Inputs hold the current transaction's value
    'input[data-automation-id*="amount"]',
    'input[name*="amount"]',
    'input[data-automation-id*="total"]',
    'input[name*="total"]',
    ".currency-input input",
    'input[type="number"]',
    '[data-automation-id*="totalAmount"]',
    '[data-automation-id*="lineAmount"]',
    '[data-automation-id*="transactionAmount"]',
    ".amount-field input",
    ".total-amount input",
    # Display elements, never table cells
    '[data-automation-id*="total"]:not(td)',
    '[data-automation-id*="amount"]:not(td)',
    '[data-testid*="amount"]:not(td)',
    'span[data-automation-id*="total"]',
    ".amount-field",
    ".total-amount",
)

AMOUNT_FALLBACK_SELECTORS = (
    '[data-automation-id*="total"]',
    '[data-automation-id*="amount"]',
    ".amount-field",
    ".total-amount",
    'input[name*="amount"]',
    'input[type="number"]',
)

# --- Date ---

DATE_SELECTORS = (
    'input[data-automation-id*="date"]',
    'input[name*="date"]',
    ".date-field",
    '[data-automation-id="transaction-date"]',
    'td[data-col="date"]',
    '[data-testid*="date"]',
    'input[type="date"]',
    ".date-picker input",
    'span[data-automation-id*="date"]',
)

DATE_FILLER = frozenset({"Date", "Select date"})

# --- Customer / vendor ---

INVOICE_COUNTERPARTY_SELECTORS = (
    '[data-automation-id*="customer"]',
    'input[name*="customer"]',
    ".customer-field",
    '[data-automation-id="nameAddressComboBox"] input',
    '[data-testid*="customer"]',
    'span[data-automation-id*="customer"]',
    '[data-automation-id="customerName"]',
    ".bill-to input",
    ".customer-name input",
    'input[placeholder*="customer" i]',
)

EXPENSE_COUNTERPARTY_SELECTORS = (
    'input[data-automation-id*="payee"]:not([data-automation-id*="payeeLabel"])',
    'input[data-automation-id*="vendor"]:not([data-automation-id*="vendorLabel"])',
    'input[name*="vendor"]',
    'input[name*="payee"]',
    'input[placeholder*="payee" i]',
    'input[placeholder*="vendor" i]',
    '[data-automation-id="nameAddressComboBox"] input',
    '[data-automation-id*="payeeComboBox"] input',
    '[data-automation-id*="vendorComboBox"] input',
    ".vendor-field input",
    ".payee-field input",
    ".vendor-name input",
    ".payee-name input",
    '[data-automation-id="vendorName"]',
    '[data-automation-id="payeeName"]',
    'input[data-testid*="vendor"]',
    'input[data-testid*="payee"]',
    'span[data-automation-id*="vendor"]:not([data-automation-id*="vendorLabel"])'
    ':not([data-automation-id*="label"])',
    'span[data-automation-id*="payee"]:not([data-automation-id*="payeeLabel"])'
    ':not([data-automation-id*="label"])',
)

GENERIC_COUNTERPARTY_SELECTORS = (
    '[data-automation-id*="customer"]',
    '[data-automation-id*="vendor"]',
    '[data-automation-id*="payee"]',
    'input[name*="customer"]',
    'input[name*="vendor"]',
    ".customer-field",
    ".vendor-field",
    '[data-automation-id="nameAddressComboBox"] input',
    '[data-testid*="customer"]',
    '[data-testid*="vendor"]',
    'span[data-automation-id*="customer"]',
    'span[data-automation-id*="vendor"]',
)

COMMON_COUNTERPARTY_SELECTORS = (
    'td[data-col="name"]',
    ".name-field input",
    ".entity-name",
)

COUNTERPARTY_FILLER = frozenset(
    {
        "Select...",
        "Choose a customer",
        "Choose a vendor",
        "Choose a payee",
        "Invoice",
        "Expense",
        "Bill",
        "Payee",
        "Vendor",
        "Customer",
        "payee",
        "vendor",
        "customer",
    }
)

# --- Document number ---

INVOICE_NUMBER_SELECTORS = (
    'input[data-automation-id*="invoiceNumber"]',
    'input[data-automation-id*="invoice_number"]',
    'input[name*="invoiceNumber"]',
    'input[name*="invoice_number"]',
    'input[placeholder*="invoice number" i]',
    'input[placeholder*="invoice #" i]',
    '[data-automation-id*="invoiceNumber"] input',
    ".invoice-number input",
    ".invoice-field input",
    'span[data-automation-id*="invoiceNumber"]',
    ".invoice-number",
    '[data-testid*="invoice-number"]',
)

BILL_NUMBER_SELECTORS = (
    'input[data-automation-id*="billNumber"]',
    'input[data-automation-id*="bill_number"]',
    'input[data-automation-id*="refNumber"]',
    'input[data-automation-id*="ref_number"]',
    'input[data-automation-id*="referenceNumber"]',
    'input[name*="billNumber"]',
    'input[name*="bill_number"]',
    'input[name*="refNumber"]',
    'input[name*="ref_number"]',
    'input[name*="referenceNumber"]',
    'input[placeholder*="bill number" i]',
    'input[placeholder*="bill #" i]',
    'input[placeholder*="ref number" i]',
    'input[placeholder*="ref #" i]',
    'input[placeholder*="reference number" i]',
    'input[placeholder*="reference #" i]',
    '[data-automation-id*="billNumber"] input',
    '[data-automation-id*="refNumber"] input',
    '[data-automation-id*="referenceNumber"] input',
    ".bill-number input",
    ".ref-number input",
    ".reference-number input",
    'span[data-automation-id*="billNumber"]',
    'span[data-automation-id*="refNumber"]',
    'span[data-automation-id*="referenceNumber"]',
    ".bill-number",
    ".ref-number",
    ".reference-number",
    '[data-testid*="bill-number"]',
    '[data-testid*="ref-number"]',
    '[data-testid*="reference-number"]',
)

GENERIC_NUMBER_SELECTORS = (
    'input[data-automation-id*="number"]',
    'input[name*="number"]',
    'input[placeholder*="number" i]',
    ".number-field input",
    ".document-number input",
)

NUMBER_FILLER = frozenset(
    {
        "Enter number",
        "Number",
        "Invoice Number",
        "Bill Number",
        "Reference Number",
        "Ref Number",
        "Ref #",
        "Invoice #",
        "Bill #",
    }
)

# Text containing any of these is a prompt or label, not a value
PROMPT_WORDS = ("select", "choose", "label")

# --- Author ---

CREATED_BY_SELECTORS = (
    ".user-name",
    ".current-user",
    '[data-automation-id*="user"]',
    ".user-badge",
)


def counterparty_selectors(transaction_type: str) -> tuple[str, ...]:
    if transaction_type == TransactionType.INVOICE.value:
        specific = INVOICE_COUNTERPARTY_SELECTORS
    elif transaction_type in (TransactionType.EXPENSE.value, TransactionType.BILL.value):
        specific = EXPENSE_COUNTERPARTY_SELECTORS
    else:
        specific = GENERIC_COUNTERPARTY_SELECTORS
    return specific + COMMON_COUNTERPARTY_SELECTORS


def number_selectors(transaction_type: str) -> tuple[str, ...]:
    if transaction_type == TransactionType.INVOICE.value:
        return INVOICE_NUMBER_SELECTORS
    if transaction_type in (TransactionType.EXPENSE.value, TransactionType.BILL.value):
        return BILL_NUMBER_SELECTORS
    return GENERIC_NUMBER_SELECTORS
