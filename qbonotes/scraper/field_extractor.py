"""
Field Extractor - read transaction fields out of a page's HTML.

Each field is a cascade: an ordered list of steps, each returning a value or
None; the first value wins. Steps try CSS selectors in priority order and
reject implausible text (placeholders, labels, list rows, tiny amounts).

Extraction has no side effects and never raises on a miss: a field nothing
plausible matched comes back as None.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Sequence
from typing import TypeVar

from bs4 import BeautifulSoup, Tag
from soupsieve import SelectorSyntaxError

from qbonotes.config import EXTRACT_MIN_AMOUNT
from qbonotes.observability.logging import get_logger
from qbonotes.observability.telemetry import counter
from qbonotes.scraper import selectors as sel
from qbonotes.scraper.classifier import transaction_id_from_url, transaction_type_from_url
from qbonotes.scraper.types import TransactionData

logger = get_logger(__name__)

T = TypeVar("T")

_CURRENCY_NOISE = re.compile(r"[$,\s]")
_NON_NUMERIC = re.compile(r"[^\d.-]")
_LEADING_FLOAT = re.compile(r"^-?(?:\d+\.?\d*|\.\d+)")


def run_cascade(steps: Iterable[Callable[[], T | None]]) -> T | None:
    """Evaluate steps in order and return the first non-None result."""
    for step in steps:
        value = step()
        if value is not None:
            return value
    return None


def element_value(element: Tag) -> str:
    """Text content, else the value attribute (inputs have no text)."""
    text = element.get_text().strip()
    if text:
        return text
    value = element.get("value")
    return value if isinstance(value, str) else ""


def is_from_list(element: Tag) -> bool:
    """True when the element or an ancestor is a list, table or grid."""
    node: Tag | None = element
    while isinstance(node, Tag):
        if node.name == "table":
            return True
        automation_id = str(node.get("data-automation-id") or "")
        if "list" in automation_id or "table" in automation_id:
            return True
        classes = node.get("class") or []
        if "list-item" in classes or "grid-row" in classes:
            return True
        if node.get("role") == "grid":
            return True
        node = node.parent
    return False


def parse_amount(text: str) -> float | None:
    """
    Parse a displayed amount.

    "$1,234.56" -> 1234.56. Values below the minimum plausible amount
    (including zero and negatives) are rejected.
    """
    cleaned = _NON_NUMERIC.sub("", _CURRENCY_NOISE.sub("", text))
    match = _LEADING_FLOAT.match(cleaned)
    if not match:
        return None
    amount = float(match.group(0))
    return amount if amount >= EXTRACT_MIN_AMOUNT else None


def _is_prompt(value: str) -> bool:
    lowered = value.lower()
    return any(word in lowered for word in sel.PROMPT_WORDS)


def plausible_counterparty(text: str) -> str | None:
    value = text.strip()
    if len(value) <= 1 or value in sel.COUNTERPARTY_FILLER or _is_prompt(value):
        return None
    return value


def plausible_number(text: str) -> str | None:
    value = text.strip()
    if not value or value in sel.NUMBER_FILLER or _is_prompt(value):
        return None
    return value


def plausible_date(text: str) -> str | None:
    value = text.strip()
    if not value or value in sel.DATE_FILLER:
        return None
    return value


class TransactionFieldExtractor:
    """
    Extract transaction fields from an HTML snapshot of a transaction page.

    Args:
        html: Page markup
        url: Page URL (drives the transaction type and id)
    """

    def __init__(self, html: str, url: str):
        self.url = url
        self.soup = BeautifulSoup(html or "", "html.parser")
        self.transaction_type = transaction_type_from_url(url)

    def _select(self, selector: str, root: Tag | None = None) -> list[Tag]:
        try:
            return (root or self.soup).select(selector)
        except SelectorSyntaxError as e:
            logger.debug("Skipping invalid selector %r: %s", selector, e)
            return []

    def _select_one(self, selector: str, root: Tag | None = None) -> Tag | None:
        try:
            return (root or self.soup).select_one(selector)
        except SelectorSyntaxError as e:
            logger.debug("Skipping invalid selector %r: %s", selector, e)
            return None

    def _first_text(
        self,
        selectors: Sequence[str],
        accept: Callable[[str], str | None],
        skip_lists: bool = False,
    ) -> str | None:
        """First selector whose first match yields accepted text."""
        for selector in selectors:
            element = self._select_one(selector)
            if element is None or (skip_lists and is_from_list(element)):
                continue
            value = accept(element_value(element))
            if value is not None:
                return value
        return None

    # --- Amount ---

    def _amount_in_container(self) -> float | None:
        for container_selector in sel.TRANSACTION_CONTAINERS:
            container = self._select_one(container_selector)
            if container is None:
                continue
            for selector in sel.AMOUNT_SELECTORS:
                for element in self._select(selector, container):
                    if is_from_list(element):
                        continue
                    amount = parse_amount(element_value(element))
                    if amount is not None:
                        return amount
        return None

    def _amount_document_wide(self) -> float | None:
        for selector in sel.AMOUNT_SELECTORS:
            candidates = [el for el in self._select(selector) if not is_from_list(el)]
            inputs = [el for el in candidates if el.name == "input"]
            for element in inputs or candidates:
                amount = parse_amount(element_value(element))
                if amount is not None:
                    return amount
        return None

    def _amount_fallback(self) -> float | None:
        for selector in sel.AMOUNT_FALLBACK_SELECTORS:
            for element in self._select(selector):
                if is_from_list(element):
                    continue
                amount = parse_amount(element_value(element))
                if amount is not None:
                    return amount
        return None

    def extract_amount(self) -> float | None:
        return run_cascade(
            [self._amount_in_container, self._amount_document_wide, self._amount_fallback]
        )

    # --- Text fields ---

    def extract_date(self) -> str | None:
        return self._first_text(sel.DATE_SELECTORS, plausible_date)

    def extract_customer_vendor(self) -> str | None:
        return self._first_text(
            sel.counterparty_selectors(self.transaction_type), plausible_counterparty
        )

    def extract_invoice_number(self) -> str | None:
        return self._first_text(
            sel.number_selectors(self.transaction_type), plausible_number, skip_lists=True
        )

    def extract_created_by(self) -> str | None:
        for selector in sel.CREATED_BY_SELECTORS:
            element = self._select_one(selector)
            if element is None:
                continue
            text = element.get_text().strip()
            if text:
                return text
        return None

    def extract(self) -> TransactionData:
        data = TransactionData(
            transaction_url=self.url,
            transaction_id=transaction_id_from_url(self.url),
            transaction_type=self.transaction_type,
            date=self.extract_date(),
            amount=self.extract_amount(),
            customer_vendor=self.extract_customer_vendor(),
            invoice_number=self.extract_invoice_number(),
            created_by=self.extract_created_by(),
        )

        missing = [name for name, value in data.to_dict().items() if value is None]
        if missing:
            counter("extract.partial")
            logger.debug("Extraction for %s missed fields: %s", self.url, ", ".join(missing))
        return data


def get_transaction_data(url: str, html: str) -> TransactionData:
    return TransactionFieldExtractor(html, url).extract()
