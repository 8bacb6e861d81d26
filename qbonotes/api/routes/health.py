"""Health check and debug endpoints.

- /health - liveness
- /debug - which integrations are configured (booleans only, never values)
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Depends

from qbonotes.api.dependencies import AppServices, get_services
from qbonotes.config import APP_VERSION

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check() -> dict[str, Any]:
    return {
        "ok": True,
        "service": "qbonotes",
        "version": APP_VERSION,
        "timestamp": datetime.now(UTC).isoformat(),
    }


@router.get("/debug")
def debug_config(services: AppServices = Depends(get_services)) -> dict[str, Any]:
    settings = services.settings
    return {
        "env": settings.env,
        "database": {
            "enabled": settings.db_enabled,
            "reachable": services.repository.ping() if services.repository else False,
        },
        "file_storage": services.file_storage.stats(),
        "write_fallback": settings.write_fallback,
        "slack": {
            "has_webhook_url": bool(settings.slack_webhook_url),
            "has_bot_token": bool(settings.slack_bot_token),
            "channel_count": len(settings.slack_channels),
        },
        "google_sheets": {"configured": settings.sheets_configured},
        "scheduler": {
            "has_schedule": bool(settings.report_schedule),
            "auto_start": settings.auto_start_scheduler,
            "running": services.scheduler.is_running,
        },
        "report_timezone": settings.report_timezone,
    }
