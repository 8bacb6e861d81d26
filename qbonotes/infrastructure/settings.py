"""
Application-wide settings and environment configuration
"""

from __future__ import annotations

import os
from pathlib import Path

# Project paths
QBONOTES_ROOT = Path(__file__).parent.parent

# Environment
ENV = os.getenv("QBONOTES_ENV", "development")

# API Configuration
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", os.getenv("PORT", "3000")))
LOG_LEVEL = os.getenv("QBONOTES_LOG_LEVEL", "INFO")

# Primary store (sqlite)
DEFAULT_DB_PATH = QBONOTES_ROOT / "data" / "qbonotes.db"

# Fallback store (append-only JSONL)
DEFAULT_STORAGE_DIR = "/tmp/qbo-notes"
FALLBACK_DATA_FILE = "transactions.jsonl"

# Accounting app the helper runs against
ACCOUNTING_HOST_MARKER = "qbo.intuit.com"

# Local auth cache for the composer
DEFAULT_AUTH_FILE = Path.home() / ".qbonotes" / "auth.json"

# Backend the composer talks to
QBONOTES_API_URL = os.getenv("QBONOTES_API_URL", "http://localhost:3000")


def is_development() -> bool:
    """Check if running in development"""
    return ENV == "development"
