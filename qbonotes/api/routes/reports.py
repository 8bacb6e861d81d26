"""
Reporting and scheduler endpoints.

Dates are YYYY-MM-DD and default to yesterday in the report zone. Routes that
take an optional date are registered with and without the path parameter.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse, Response
from googleapiclient.errors import HttpError
from pydantic import BaseModel, Field

from qbonotes.api.dependencies import AppServices, get_services
from qbonotes.observability.logging import get_logger
from qbonotes.reports.csv_export import (
    csv_filename,
    download_headers,
    generate_csv,
    log_export_summary,
)
from qbonotes.reports.daily import SheetsConnectionError
from qbonotes.reports.models import DailyReport
from qbonotes.utils.error_sanitizer import get_safe_error_detail
from qbonotes.utils.timestamps import format_utc, utc_now

router = APIRouter(prefix="/reports", tags=["reports"])
logger = get_logger(__name__)


class ManualReportRequest(BaseModel):
    date: str | None = None


class SchedulerStartRequest(BaseModel):
    cron_expression: str | None = Field(default=None, alias="cronExpression")


def _failure(status_code: int, error: str, details: Any = None, **extra: Any) -> JSONResponse:
    content: dict[str, Any] = {"success": False, "error": error}
    if details is not None:
        content["details"] = details
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content)


def _build_report(services: AppServices, date: str | None) -> DailyReport | JSONResponse:
    try:
        return services.reports.generate_report(date)
    except ValueError as e:
        return _failure(status.HTTP_400_BAD_REQUEST, "Invalid date", str(e))


def _preview_body(report: DailyReport) -> dict[str, Any]:
    return {
        "success": True,
        "report": {
            "date": report.date,
            "summary": report.summary.to_dict(),
            "transactions": [
                {
                    "id": note.id,
                    "created_at": format_utc(note.created_at),
                    "transaction_type": note.transaction_type,
                    "amount": note.amount,
                    "customer_vendor": note.customer_vendor,
                    "note": note.note,
                    "created_by": note.created_by,
                }
                for note in report.notes
            ],
        },
        "message": f"Found {report.summary.total_notes} transactions for {report.date}",
    }


@router.get("/preview")
@router.get("/preview/{date}")
def preview_report(date: str | None = None, services: AppServices = Depends(get_services)) -> Any:
    report = _build_report(services, date)
    if isinstance(report, JSONResponse):
        return report
    return _preview_body(report)


@router.get("/csv")
@router.get("/csv/{date}")
def download_csv(date: str | None = None, services: AppServices = Depends(get_services)) -> Response:
    report = _build_report(services, date)
    if isinstance(report, JSONResponse):
        return report

    content = generate_csv(report, services.reports.report_timezone)
    log_export_summary(report)
    return Response(
        content=content,
        media_type="text/csv",
        headers=download_headers(report.date),
    )


@router.get("/csv-preview")
@router.get("/csv-preview/{date}")
def preview_csv(date: str | None = None, services: AppServices = Depends(get_services)) -> Any:
    report = _build_report(services, date)
    if isinstance(report, JSONResponse):
        return report

    return {
        "success": True,
        "date": report.date,
        "filename": csv_filename(report.date),
        "summary": report.summary.to_dict(),
        "csv": generate_csv(report, services.reports.report_timezone),
    }


@router.post("/manual")
def manual_report(
    request: ManualReportRequest | None = None, services: AppServices = Depends(get_services)
) -> Any:
    date = request.date if request else None
    try:
        report = services.scheduler.trigger_manual(date)
    except ValueError as e:
        return _failure(status.HTTP_400_BAD_REQUEST, "Invalid date", str(e))
    except HttpError as e:
        return _failure(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Manual daily report failed",
            get_safe_error_detail(e, 500, context="Google Sheets delivery failed"),
        )

    return {
        "success": True,
        "message": f"Manual daily report completed for {report.date}",
        "date": report.date,
        "summary": report.summary.to_dict(),
        "timestamp": format_utc(utc_now()),
    }


@router.get("/status")
def report_status(services: AppServices = Depends(get_services)) -> dict[str, Any]:
    settings = services.settings
    return {
        "success": True,
        "scheduler": services.scheduler.get_status(),
        "google_sheets": {
            "configured": services.sheets.is_configured(),
            "spreadsheet_id": "SET" if settings.sheets_id else "NOT SET",
            "sheet_name": settings.sheet_name,
        },
        "environment": {
            "env": settings.env,
            "daily_report_schedule": settings.report_schedule or "NOT SET",
            "auto_start_scheduler": settings.auto_start_scheduler,
            "report_timezone": settings.report_timezone,
        },
        "storage": {
            "database_enabled": settings.db_enabled,
            "file": services.file_storage.stats(),
        },
        "common_schedules": services.scheduler.common_schedules(),
    }


@router.get("/test")
def test_report_system(services: AppServices = Depends(get_services)) -> Any:
    try:
        report = services.reports.test_report_system()
    except (SheetsConnectionError, HttpError) as e:
        return _failure(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Daily report test failed",
            get_safe_error_detail(e, 500, context="Google Sheets connection failed"),
        )

    return {
        "success": True,
        "message": "Daily report system test completed successfully",
        "date": report.date,
        "timestamp": format_utc(utc_now()),
    }


@router.post("/scheduler/start")
def start_scheduler(
    request: SchedulerStartRequest | None = None, services: AppServices = Depends(get_services)
) -> Any:
    scheduler = services.scheduler
    cron_expression = (request.cron_expression if request else None) or services.settings.report_schedule
    if not cron_expression:
        return _failure(
            status.HTTP_400_BAD_REQUEST,
            "cronExpression is required",
            examples=scheduler.common_schedules(),
        )

    try:
        started = scheduler.start(cron_expression)
    except ValueError as e:
        return _failure(
            status.HTTP_400_BAD_REQUEST,
            "Invalid cron expression",
            str(e),
            examples=scheduler.common_schedules(),
        )

    return {
        "success": True,
        "message": "Daily report scheduler started" if started else "Daily report scheduler already running",
        "started": started,
        "cronExpression": scheduler.cron_expression,
    }


@router.post("/scheduler/stop")
def stop_scheduler(services: AppServices = Depends(get_services)) -> dict[str, Any]:
    stopped = services.scheduler.stop()
    return {
        "success": True,
        "message": "Daily report scheduler stopped" if stopped else "No scheduler was running",
        "stopped": stopped,
    }
