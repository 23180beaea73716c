"""
Route gate middleware for the Historian API.

Every request must carry the access cookie (the mirror marker written by
POST /access) holding the configured shared secret. Anything else is
redirected to the access page. The access page itself, health probes and
documentation/static assets are exempt.

The secret is read from settings on every request so a changed key takes
effect without rebuilding the app.
"""

from __future__ import annotations

from typing import Callable

from fastapi import Request, Response, status
from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware

from historian.auth.access_gate import matches_secret
from historian.config import ACCESS_COOKIE_NAME, ACCESS_PAGE_PATH
from historian.infrastructure import settings
from historian.observability.logging import get_logger
from historian.observability.telemetry import counter

logger = get_logger(__name__)

# Exact paths that never require the access cookie
GATE_EXEMPT_PATHS = {
    ACCESS_PAGE_PATH,
    "/health",
    "/health/db",
    "/favicon.ico",
    "/openapi.json",
}

# Path prefixes that never require the access cookie
GATE_EXEMPT_PREFIXES = (
    f"{ACCESS_PAGE_PATH}/",
    "/docs",
    "/redoc",
    "/static/",
)


def is_exempt(path: str) -> bool:
    return path in GATE_EXEMPT_PATHS or path.startswith(GATE_EXEMPT_PREFIXES)


class RouteGateMiddleware(BaseHTTPMiddleware):
    """Redirect requests without a valid access cookie to the access page."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.url.path
        if is_exempt(path):
            return await call_next(request)

        if matches_secret(request.cookies.get(ACCESS_COOKIE_NAME), settings.HISTORIAN_ACCESS_KEY):
            return await call_next(request)

        counter("access.redirected")
        logger.info("Redirecting %s %s to access page", request.method, path)
        return RedirectResponse(url=ACCESS_PAGE_PATH, status_code=status.HTTP_303_SEE_OTHER)
