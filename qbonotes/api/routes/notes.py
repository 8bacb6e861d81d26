"""
Notes intake endpoint.

POST /notes validates the raw JSON body itself so every problem comes back as
one "field: message" string in a 400, rather than FastAPI's 422 shape.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from qbonotes.api.dependencies import AppServices, get_services
from qbonotes.notes.errors import StorageError
from qbonotes.notes.validation import validate_note_payload
from qbonotes.observability.logging import get_logger
from qbonotes.observability.telemetry import counter
from qbonotes.utils.error_sanitizer import get_safe_error_detail

router = APIRouter(tags=["notes"])
logger = get_logger(__name__)


def _validation_failed(details: list[str]) -> JSONResponse:
    counter("notes.validation_failed")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Validation failed", "details": details},
    )


@router.post("/notes", status_code=status.HTTP_201_CREATED)
async def create_note(request: Request, services: AppServices = Depends(get_services)) -> JSONResponse:
    """
    Create a transaction note.

    Side Effects:
        - Writes the note to the primary or fallback store
        - Posts a Slack notification (best-effort)
    """
    try:
        body = await request.json()
    except ValueError:
        return _validation_failed(["body: Invalid JSON"])

    result = validate_note_payload(body)
    if not result.success or result.data is None:
        logger.info("Rejected note payload: %s", result.errors)
        return _validation_failed(result.errors)

    try:
        note_id = services.intake.create_note(result.data)
    except StorageError as e:
        counter("notes.storage_failed")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Internal server error",
                "details": get_safe_error_detail(e, 500, context="Note could not be stored"),
            },
        )

    return JSONResponse(status_code=status.HTTP_201_CREATED, content={"id": note_id, "success": True})
