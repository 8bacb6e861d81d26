"""
Transaction page detection and field scraping.
"""

from qbonotes.scraper.classifier import (
    is_accounting_host,
    is_transaction_page,
    should_offer_note,
    transaction_id_from_url,
    transaction_type_from_url,
)
from qbonotes.scraper.field_extractor import TransactionFieldExtractor, get_transaction_data
from qbonotes.scraper.types import TransactionData
from qbonotes.scraper.watcher import UrlChangeWatcher

__all__ = [
    # Classification
    "is_accounting_host",
    "is_transaction_page",
    "should_offer_note",
    "transaction_id_from_url",
    "transaction_type_from_url",
    # Extraction
    "TransactionData",
    "TransactionFieldExtractor",
    "get_transaction_data",
    # Navigation
    "UrlChangeWatcher",
]
