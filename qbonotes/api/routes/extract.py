"""
Server-side extraction helper.

POST /extract classifies a URL and scrapes fields from an HTML snapshot, for
callers that cannot run the extractor themselves.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from qbonotes.config import EXTRACT_MAX_HTML_CHARS
from qbonotes.observability.logging import get_logger
from qbonotes.observability.telemetry import counter, time_block
from qbonotes.scraper.classifier import is_transaction_page
from qbonotes.scraper.field_extractor import get_transaction_data

router = APIRouter(tags=["extract"])
logger = get_logger(__name__)


class ExtractRequest(BaseModel):
    url: str = Field(..., min_length=1)
    html: str = ""


@router.post("/extract")
def extract_transaction(request: ExtractRequest) -> dict[str, Any]:
    if len(request.html) > EXTRACT_MAX_HTML_CHARS:
        raise HTTPException(status_code=413, detail="HTML snapshot too large")

    with time_block("extract.request"):
        data = get_transaction_data(request.url, request.html)

    counter("extract.requests")
    return {
        "is_transaction_page": is_transaction_page(request.url),
        "transaction": data.to_dict(),
    }
