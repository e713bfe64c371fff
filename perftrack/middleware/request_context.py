# perftrack/middleware/request_context.py
from __future__ import annotations

import logging
import time
import uuid
from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("perftrack.access")


def _client_ip(request: Request) -> str:
    # behind a proxy the caller is the first X-Forwarded-For hop
    xff = request.headers.get("x-forwarded-for")
    if xff:
        return xff.split(",")[0].strip()
    return request.client.host if request.client else ""


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Tags every request with an id (echoed as ``x-request-id``) and logs the
    ones worth a second look: rejected credentials, missing roles and server
    errors. Routes record their own domain events through ``log_activity``.
    """

    async def dispatch(self, request: Request, call_next: Callable):
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            logger.exception("unhandled error request_id=%s %s %s", request_id, request.method, request.url.path)
            raise

        response.headers["x-request-id"] = request_id
        elapsed_ms = (time.perf_counter() - started) * 1000

        if response.status_code in (401, 403):
            actor = getattr(request.state, "actor", None) or {}
            logger.warning(
                "%s request_id=%s %s %s status=%d actor=%s ip=%s",
                "permission_denied" if response.status_code == 403 else "auth_missing_or_invalid",
                request_id,
                request.method,
                request.url.path,
                response.status_code,
                actor.get("user_id"),
                _client_ip(request),
            )
        elif response.status_code >= 500:
            logger.error("request_id=%s %s %s status=%d %.1fms", request_id, request.method,
                         request.url.path, response.status_code, elapsed_ms)
        else:
            logger.debug("request_id=%s %s %s status=%d %.1fms", request_id, request.method,
                         request.url.path, response.status_code, elapsed_ms)
        return response
