"""qbonotes - transaction notes for an accounting web app"""

from __future__ import annotations

__version__ = "1.0.0"


# Lazy imports so the scraper can be used without loading the API stack
def __getattr__(name: str):
    if name in ("NotePayload", "NoteRecord", "TransactionType"):
        from qbonotes.notes import models

        return getattr(models, name)

    if name in ("TransactionData", "get_transaction_data", "is_transaction_page"):
        from qbonotes import scraper

        return getattr(scraper, name)

    if name == "NoteComposer":
        from qbonotes.composer.composer import NoteComposer

        return NoteComposer

    if name == "create_app":
        from qbonotes.api.app import create_app

        return create_app

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)


__all__ = [
    "NoteComposer",
    "NotePayload",
    "NoteRecord",
    "TransactionData",
    "TransactionType",
    "create_app",
    "get_transaction_data",
    "is_transaction_page",
]
