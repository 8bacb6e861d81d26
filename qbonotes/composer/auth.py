"""
Local subscription check with a cached result.

The cache (validity, plan, user id, email, capture time) is trusted for six
hours. Registering new credentials or logging out invalidates it. In bypass
mode any stored email is accepted and a "bypass" result is cached.
"""

from __future__ import annotations

import json
import time
from collections.abc import Callable
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

import requests

from qbonotes.config import AUTH_CACHE_SECONDS, DEFAULT_AUTH_FILE, HTTP_TIMEOUT_SECONDS, Settings
from qbonotes.observability.logging import get_logger

logger = get_logger(__name__)

CACHE_KEY = "auth_cache"
EMAIL_KEY = "user_email"


@dataclass
class AuthCache:
    is_valid: bool
    plan: str | None
    user_id: str | None
    user_email: str
    timestamp: float

    def is_fresh(self, now: float, max_age: float = AUTH_CACHE_SECONDS) -> bool:
        return now - self.timestamp < max_age


class AuthCacheStore:
    """JSON file holding the stored email and the cached auth result."""

    def __init__(self, path: Path | str = DEFAULT_AUTH_FILE):
        self.path = Path(path)

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Unreadable auth file %s: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    def get_email(self) -> str | None:
        return self._read().get(EMAIL_KEY) or None

    def set_email(self, email: str) -> None:
        data = self._read()
        data[EMAIL_KEY] = email
        self._write(data)

    def get_cache(self) -> AuthCache | None:
        raw = self._read().get(CACHE_KEY)
        if not isinstance(raw, dict):
            return None
        try:
            return AuthCache(**raw)
        except TypeError:
            return None

    def set_cache(self, cache: AuthCache) -> None:
        data = self._read()
        data[CACHE_KEY] = asdict(cache)
        self._write(data)

    def clear_cache(self) -> None:
        data = self._read()
        if data.pop(CACHE_KEY, None) is not None:
            self._write(data)

    def clear_all(self) -> None:
        self.path.unlink(missing_ok=True)


class AuthService:
    def __init__(
        self,
        store: AuthCacheStore,
        endpoint: str | None = None,
        bypass: bool = True,
        session: requests.Session | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.endpoint = endpoint
        self.bypass = bypass
        self.session = session or requests.Session()
        self.clock = clock

    @classmethod
    def from_settings(cls, settings: Settings, session: requests.Session | None = None) -> AuthService:
        return cls(
            AuthCacheStore(settings.auth_file),
            endpoint=settings.auth_endpoint,
            bypass=settings.auth_bypass,
            session=session,
        )

    def validate_subscription(self) -> bool:
        """
        Whether the stored user may submit notes.

        Uses the cached result while fresh; otherwise asks the endpoint and
        caches the answer. Any failure reads as "not valid".
        """
        email = self.store.get_email()

        if self.bypass:
            if not email:
                logger.info("Auth bypass: no user email stored")
                return False
            self.store.set_cache(
                AuthCache(
                    is_valid=True,
                    plan="bypass",
                    user_id="bypass-user",
                    user_email=email,
                    timestamp=self.clock(),
                )
            )
            return True

        cached = self.store.get_cache()
        if cached is not None and cached.is_fresh(self.clock()):
            return cached.is_valid

        if not email:
            logger.info("No user email stored")
            return False
        if not self.endpoint:
            logger.warning("No subscription endpoint configured")
            return False

        try:
            response = self.session.post(
                self.endpoint, json={"userEmail": email}, timeout=HTTP_TIMEOUT_SECONDS
            )
            if not response.ok:
                logger.error("Subscription check failed: HTTP %s", response.status_code)
                return False
            result = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.error("Subscription check error: %s", e)
            return False

        is_valid = bool(result.get("valid"))
        self.store.set_cache(
            AuthCache(
                is_valid=is_valid,
                plan=result.get("plan"),
                user_id=result.get("userId"),
                user_email=email,
                timestamp=self.clock(),
            )
        )
        return is_valid

    def set_user_credentials(self, email: str) -> None:
        self.store.set_email(email)
        self.store.clear_cache()

    def get_auth_status(self) -> dict[str, Any] | None:
        """Cached status only; never calls the endpoint."""
        cached = self.store.get_cache()
        if cached is None or not cached.is_fresh(self.clock()):
            return None
        return {"is_valid": cached.is_valid, "plan": cached.plan, "user_id": cached.user_id}

    def logout(self) -> None:
        self.store.clear_all()
        logger.info("User logged out")

    def has_stored_credentials(self) -> bool:
        return self.store.get_email() is not None
