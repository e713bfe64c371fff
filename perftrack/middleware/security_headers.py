# perftrack/middleware/security_headers.py
from __future__ import annotations

from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Baseline headers for a JSON-only API."""

    async def dispatch(self, request: Request, call_next: Callable):
        response = await call_next(request)

        response.headers.setdefault("x-content-type-options", "nosniff")
        response.headers.setdefault("x-frame-options", "DENY")
        response.headers.setdefault("referrer-policy", "no-referrer")
        # the interactive docs need their own scripts
        if not request.url.path.startswith(("/docs", "/redoc")):
            response.headers.setdefault("content-security-policy", "default-src 'none'; frame-ancestors 'none'")
        response.headers.setdefault("cache-control", "no-store")

        return response
