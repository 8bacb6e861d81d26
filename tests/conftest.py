"""
Pytest configuration for qbonotes tests

Provides note payloads, tmp_path-backed settings and stores, and an API client
wired to those stores. Nothing here touches the network.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

import pytest
from fastapi.testclient import TestClient

from qbonotes.api.app import create_app
from qbonotes.api.dependencies import AppServices, build_services
from qbonotes.config import Settings
from qbonotes.infrastructure.database import Database
from qbonotes.notes.file_storage import FileNoteStorage
from qbonotes.notes.models import NotePayload, NoteRecord
from qbonotes.notes.repository import NoteRepository
from qbonotes.observability.telemetry import reset_counters


INVOICE_URL = "https://qbo.intuit.com/app/invoice?txnId=42"


@pytest.fixture(autouse=True)
def _reset_telemetry():
    reset_counters()
    yield
    reset_counters()


@pytest.fixture
def note_body() -> dict[str, Any]:
    """A valid POST /notes body"""
    return {
        "transaction_url": INVOICE_URL,
        "transaction_id": "42",
        "transaction_type": "Invoice",
        "date": "03/10/2024",
        "amount": 1234.56,
        "customer_vendor": "Acme Corp",
        "invoice_number": "1042",
        "note": "Approved by finance",
        "created_by": "Dana Reyes",
    }


@pytest.fixture
def payload(note_body) -> NotePayload:
    return NotePayload.model_validate(note_body)


@pytest.fixture
def make_record(note_body):
    """Build a NoteRecord with a chosen id, creation instant and overrides"""

    def _make(note_id: str, created_at: str | datetime, **overrides: Any) -> NoteRecord:
        body = {**note_body, **overrides}
        return NoteRecord.from_payload(note_id, NotePayload.model_validate(body), created_at=created_at)

    return _make


@pytest.fixture
def database(tmp_path) -> Database:
    db = Database(tmp_path / "qbonotes.db")
    db.initialize()
    return db


@pytest.fixture
def repository(database) -> NoteRepository:
    return NoteRepository(database)


@pytest.fixture
def file_storage(tmp_path) -> FileNoteStorage:
    return FileNoteStorage(tmp_path / "fallback")


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        env="development",
        db_path=tmp_path / "qbonotes.db",
        storage_dir=tmp_path / "fallback",
    )


@pytest.fixture
def services(settings) -> AppServices:
    return build_services(settings)


@pytest.fixture
def client(services):
    with TestClient(create_app(services=services)) as test_client:
        yield test_client
