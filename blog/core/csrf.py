"""Double-submit cookie CSRF protection for the form and fetch writes.

Safe requests hand out a ``csrf_token`` cookie; every state-changing request
must echo it back in the ``X-CSRF-Token`` header.
"""

from __future__ import annotations

import logging
import secrets
from typing import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from blog.config import CSRF_COOKIE_SECURE


logger = logging.getLogger("blog.csrf")

CSRF_COOKIE_NAME = "csrf_token"
CSRF_HEADER_NAME = "X-CSRF-Token"
CSRF_SAFE_METHODS = {"GET", "HEAD", "OPTIONS", "TRACE"}


def generate_csrf_token() -> str:
    return secrets.token_urlsafe(32)


class CSRFMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, exclude_paths: list[str] | None = None):
        super().__init__(app)
        self.exclude_paths = exclude_paths or ["/health", "/static"]

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if any(request.url.path.startswith(path) for path in self.exclude_paths):
            return await call_next(request)

        if request.method in CSRF_SAFE_METHODS:
            response = await call_next(request)
            if CSRF_COOKIE_NAME not in request.cookies:
                response.set_cookie(
                    key=CSRF_COOKIE_NAME,
                    value=generate_csrf_token(),
                    httponly=False,  # article.js reads it
                    secure=CSRF_COOKIE_SECURE,
                    samesite="lax",
                    max_age=86400,
                )
            return response

        csrf_cookie = request.cookies.get(CSRF_COOKIE_NAME)
        csrf_header = request.headers.get(CSRF_HEADER_NAME)

        if not csrf_cookie or not csrf_header:
            logger.warning(
                "CSRF token missing",
                extra={"event": "csrf_missing", "path": request.url.path, "method": request.method},
            )
            return JSONResponse(status_code=403, content={"detail": "CSRF token missing"})

        if not secrets.compare_digest(csrf_cookie.encode(), csrf_header.encode()):
            logger.warning(
                "CSRF token mismatch",
                extra={"event": "csrf_mismatch", "path": request.url.path, "method": request.method},
            )
            return JSONResponse(status_code=403, content={"detail": "CSRF token invalid"})

        return await call_next(request)
