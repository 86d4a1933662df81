"""Shared FastAPI middleware."""

from __future__ import annotations

import logging
import time
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response, JSONResponse

from app.core.config import get_settings

logger = logging.getLogger(__name__)

_WRITE_METHODS = {"POST", "PUT", "PATCH"}


class MaxBodySizeMiddleware(BaseHTTPMiddleware):
    """
    Reject write requests whose bodies exceed MAX_REQUEST_BODY_BYTES.

    Article content is stored as one serialized block document, so a single
    publish carries the whole story; anything past the limit is refused
    before it reaches the database.
    """

    async def dispatch(self, request: Request, call_next: Callable[[Request], Response]) -> Response:
        if request.method not in _WRITE_METHODS:
            return await call_next(request)

        limit = int(get_settings().MAX_REQUEST_BODY_BYTES)

        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > limit:
            return JSONResponse({"detail": "Payload too large."}, status_code=413)

        # Starlette caches request.body() so downstream handlers still can read it.
        body = await request.body()
        if body and len(body) > limit:
            return JSONResponse({"detail": "Payload too large."}, status_code=413)

        return await call_next(request)


class RequestLogMiddleware(BaseHTTPMiddleware):
    """Log one line per request with status and duration."""

    async def dispatch(self, request: Request, call_next: Callable[[Request], Response]) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        log = logger.warning if response.status_code >= 500 else logger.info
        log(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.0f}ms)")
        return response
