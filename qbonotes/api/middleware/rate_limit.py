"""Rate limiting middleware for the qbonotes API

Per-IP sliding windows (per minute and per hour). Buckets live in TTLCaches
so idle clients expire without a cleanup pass.
"""

from __future__ import annotations

import ipaddress
import time
from collections.abc import Callable
from typing import Any

from cachetools import TTLCache
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from qbonotes.config import RATE_LIMIT_MAX_IPS, RATE_LIMIT_RPH, RATE_LIMIT_RPM
from qbonotes.infrastructure.settings import is_development
from qbonotes.observability.telemetry import log_event

EXEMPT_PATHS = frozenset({"/health"})


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: Any,
        requests_per_minute: int = RATE_LIMIT_RPM,
        requests_per_hour: int = RATE_LIMIT_RPH,
    ) -> None:
        super().__init__(app)
        self.requests_per_minute = requests_per_minute
        self.requests_per_hour = requests_per_hour

        # Request tracking: {ip: [timestamp, ...]}
        self.minute_buckets: TTLCache[str, list[float]] = TTLCache(maxsize=RATE_LIMIT_MAX_IPS, ttl=120)
        self.hour_buckets: TTLCache[str, list[float]] = TTLCache(maxsize=RATE_LIMIT_MAX_IPS, ttl=7200)

    def _is_valid_ip(self, ip_str: str) -> bool:
        try:
            ipaddress.ip_address(ip_str)
            return True
        except ValueError:
            return False

    def _get_client_ip(self, request: Request) -> str:
        """Socket IP; forwarded headers are honoured only in development."""
        if is_development():
            forwarded = request.headers.get("X-Forwarded-For")
            if forwarded:
                ip = forwarded.split(",")[0].strip()
                if self._is_valid_ip(ip):
                    return ip

        return request.client.host if request.client else "unknown"

    def _clean_old_requests(self, bucket: list[float], max_age_seconds: int, now: float) -> list[float]:
        return [ts for ts in bucket if now - ts < max_age_seconds]

    def _limited(self, client_ip: str, limit: str, count: int, maximum: int, retry_after: int) -> Response:
        log_event("api.rate_limit.request_exceeded", ip=client_ip, limit=limit, count=count)
        return JSONResponse(
            status_code=429,
            content={
                "error": f"Rate limit exceeded. Maximum {maximum} requests per {limit}.",
                "retry_after": retry_after,
            },
            headers={"Retry-After": str(retry_after)},
        )

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in EXEMPT_PATHS:
            return await call_next(request)

        client_ip = self._get_client_ip(request)
        now = time.time()

        minute_bucket = self._clean_old_requests(self.minute_buckets.get(client_ip, []), 60, now)
        hour_bucket = self._clean_old_requests(self.hour_buckets.get(client_ip, []), 3600, now)

        if len(minute_bucket) >= self.requests_per_minute:
            self.minute_buckets[client_ip] = minute_bucket
            return self._limited(client_ip, "minute", len(minute_bucket), self.requests_per_minute, 60)

        if len(hour_bucket) >= self.requests_per_hour:
            self.hour_buckets[client_ip] = hour_bucket
            return self._limited(client_ip, "hour", len(hour_bucket), self.requests_per_hour, 3600)

        minute_bucket.append(now)
        hour_bucket.append(now)
        self.minute_buckets[client_ip] = minute_bucket
        self.hour_buckets[client_ip] = hour_bucket

        response = await call_next(request)

        response.headers["X-RateLimit-Limit-Minute"] = str(self.requests_per_minute)
        response.headers["X-RateLimit-Remaining-Minute"] = str(
            self.requests_per_minute - len(minute_bucket)
        )
        response.headers["X-RateLimit-Limit-Hour"] = str(self.requests_per_hour)
        response.headers["X-RateLimit-Remaining-Hour"] = str(
            self.requests_per_hour - len(hour_bucket)
        )
        return response
