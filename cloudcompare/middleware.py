from __future__ import annotations

import logging
import math
import re
import threading
import time
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings
from .errors import EngineError, RateLimitExceeded

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}

MAX_STRING_LENGTH = 1000

_ANGLE_BRACKETS = re.compile(r"[<>]")
_JAVASCRIPT_SCHEME = re.compile(r"javascript:", re.I)
_EVENT_HANDLER = re.compile(r"on\w+=", re.I)


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def error_response(exc: EngineError) -> JSONResponse:
    headers = None
    if isinstance(exc, RateLimitExceeded):
        headers = {"Retry-After": str(exc.retry_after)}
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": {**exc.to_dict(), "timestamp": utc_timestamp()}},
        headers=headers,
    )


# ── Input sanitization ───────────────────────────────────────────────────


def sanitize_string(value: str) -> str:
    value = _ANGLE_BRACKETS.sub("", value)
    value = _JAVASCRIPT_SCHEME.sub("", value)
    value = _EVENT_HANDLER.sub("", value)
    return value.strip()[:MAX_STRING_LENGTH]


def sanitize_payload(value: Any) -> Any:
    """Recursively clean every string in a JSON-like value (keys included)."""
    if isinstance(value, str):
        return sanitize_string(value)
    if isinstance(value, list):
        return [sanitize_payload(v) for v in value]
    if isinstance(value, dict):
        return {sanitize_string(k) if isinstance(k, str) else k: sanitize_payload(v) for k, v in value.items()}
    return value


# ── Rate limiting ────────────────────────────────────────────────────────


class RateLimiter:
    """Fixed-window request counter per client key, held in memory.

    Expired windows are swept at most once per window length, so the map
    only holds clients seen within roughly the last two windows.
    """

    def __init__(self, max_requests: int, window_seconds: float) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._windows: dict[str, tuple[float, int]] = {}
        self._last_sweep: float | None = None
        self._lock = threading.Lock()

    def hit(self, key: str, now: float | None = None) -> None:
        """Count one request for ``key``; raise ``RateLimitExceeded`` when
        the current window is already full."""
        now = time.monotonic() if now is None else now
        with self._lock:
            self._sweep(now)
            started, count = self._windows.get(key, (now, 0))
            if now - started >= self.window_seconds:
                started, count = now, 0
            if count >= self.max_requests:
                retry_after = math.ceil(self.window_seconds - (now - started))
                raise RateLimitExceeded(max(retry_after, 1))
            self._windows[key] = (started, count + 1)

    def _sweep(self, now: float) -> None:
        # caller holds the lock
        if self._last_sweep is None:
            self._last_sweep = now
            return
        if now - self._last_sweep < self.window_seconds:
            return
        self._windows = {
            key: window
            for key, window in self._windows.items()
            if now - window[0] < self.window_seconds
        }
        self._last_sweep = now

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()
            self._last_sweep = None


def install_middleware(app: FastAPI, settings: Settings) -> None:
    """Register CORS, rate limiting, security headers and request logging.

    Starlette runs the last-registered middleware first, so request
    logging wraps everything and sees the final status code.
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    limiter = RateLimiter(settings.rate_limit_requests, settings.rate_limit_window_seconds)
    app.state.rate_limiter = limiter

    @app.middleware("http")
    async def rate_limit(request: Request, call_next):
        client = request.client.host if request.client else "unknown"
        try:
            limiter.hit(client)
        except RateLimitExceeded as exc:
            logger.warning("Rate limit exceeded for %s", client)
            return error_response(exc)
        return await call_next(request)

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        logger.info(
            "%s %s %s %.1fms",
            request.method,
            request.url.path,
            response.status_code,
            (time.time() - start_time) * 1000,
        )
        return response
