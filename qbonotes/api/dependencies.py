"""
Service wiring for the API process.

build_services() constructs every service object once from Settings; the app
factory stores the result on ``app.state.services`` and routes read it through
``get_services``. Tests pass their own AppServices to create_app().
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from typing import Any

import requests
from fastapi import Request

from qbonotes.config import Settings
from qbonotes.infrastructure.database import Database
from qbonotes.notes.file_storage import FileNoteStorage
from qbonotes.notes.repository import NoteRepository
from qbonotes.notes.service import NoteIntakeService
from qbonotes.notify.slack import SlackNotifier
from qbonotes.observability.logging import get_logger
from qbonotes.reports.daily import DailyReportsService
from qbonotes.reports.scheduler import ReportScheduler
from qbonotes.reports.sheets import GoogleSheetsReporter

logger = get_logger(__name__)


@dataclass
class AppServices:
    settings: Settings
    repository: NoteRepository | None
    file_storage: FileNoteStorage
    notifier: SlackNotifier
    intake: NoteIntakeService
    sheets: GoogleSheetsReporter
    reports: DailyReportsService
    scheduler: ReportScheduler


def _open_repository(settings: Settings) -> NoteRepository | None:
    if not settings.db_enabled:
        logger.info("Primary store disabled, notes go to file storage at %s", settings.storage_dir)
        return None

    database = Database(settings.db_path)
    try:
        database.initialize()
        database.validate_schema()
    except (sqlite3.Error, OSError, RuntimeError, ValueError) as e:
        # Keep the repository: each call fails over to file storage on its own
        logger.error("Primary store unavailable at startup: %s", e)
    return NoteRepository(database)


def build_services(
    settings: Settings,
    sheets_service: Any = None,
    http_session: requests.Session | None = None,
) -> AppServices:
    repository = _open_repository(settings)
    file_storage = FileNoteStorage(settings.storage_dir)

    notifier = SlackNotifier.from_settings(settings, session=http_session)
    if not notifier.configured:
        logger.warning("Slack not configured; note notifications disabled")

    sheets = GoogleSheetsReporter.from_settings(settings, service=sheets_service)
    if not sheets.is_configured():
        logger.warning("Google Sheets not configured; daily reports will not be delivered")

    intake = NoteIntakeService(
        repository=repository,
        file_storage=file_storage,
        notifier=notifier,
        write_fallback=settings.write_fallback,
    )
    reports = DailyReportsService(
        repository=repository,
        file_storage=file_storage,
        sheets=sheets,
        report_timezone=settings.report_timezone,
    )
    scheduler = ReportScheduler(reports.send_daily_report, timezone=settings.report_timezone)

    return AppServices(
        settings=settings,
        repository=repository,
        file_storage=file_storage,
        notifier=notifier,
        intake=intake,
        sheets=sheets,
        reports=reports,
        scheduler=scheduler,
    )


def get_services(request: Request) -> AppServices:
    return request.app.state.services
