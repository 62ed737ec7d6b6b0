"""Request gatekeeping middleware: security headers, CORS and the IP limit.

Registration order in the application factory makes security headers the
outermost layer, so every response (including 403, 204 and 429 short-circuits)
carries them.
"""

from __future__ import annotations

import logging

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from rate_my_decision.api.dependencies import ip_rate_limit_key
from rate_my_decision.core.errors import RateLimitError
from rate_my_decision.core.settings import Settings
from rate_my_decision.services.rate_limiter import FixedWindowLimiter

logger = logging.getLogger(__name__)

SECURITY_HEADERS: dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'; base-uri 'none'",
}
HSTS_VALUE = "max-age=31536000; includeSubDomains"

CORS_ALLOW_METHODS = "GET, POST, OPTIONS"
CORS_ALLOW_HEADERS = "Content-Type, X-API-Key"
CORS_MAX_AGE = "300"


def error_response(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


def rate_limited_response(exc: RateLimitError) -> JSONResponse:
    """Render a 429 with both the header and the body retry hint."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "retry_after_seconds": exc.retry_after_seconds},
        headers={"Retry-After": str(exc.retry_after_seconds)},
    )


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Attach the fixed security headers to every response."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers[name] = value
        if request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = HSTS_VALUE
        return response


class CORSGateMiddleware(BaseHTTPMiddleware):
    """Allowlist-based CORS.

    Allowed origins are reflected (or answered with ``*`` in wildcard mode).
    Preflight requests never reach the routes: 403 for a disallowed origin,
    204 otherwise.
    """

    def __init__(self, app, settings: Settings) -> None:
        super().__init__(app)
        self.allow_any_origin = settings.allow_any_origin
        self.allowed_origins = settings.allowed_origins

    def is_origin_allowed(self, origin: str) -> bool:
        return self.allow_any_origin or origin in self.allowed_origins

    def _apply_headers(self, response: Response, origin: str) -> None:
        if not origin or not self.is_origin_allowed(origin):
            return
        if self.allow_any_origin:
            response.headers["Access-Control-Allow-Origin"] = "*"
        else:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers.append("Vary", "Origin")
        response.headers["Access-Control-Allow-Methods"] = CORS_ALLOW_METHODS
        response.headers["Access-Control-Allow-Headers"] = CORS_ALLOW_HEADERS
        response.headers["Access-Control-Max-Age"] = CORS_MAX_AGE

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        origin = request.headers.get("origin", "").strip()

        if request.method == "OPTIONS":
            if origin and not self.is_origin_allowed(origin):
                return error_response(403, "origin not allowed")
            response: Response = Response(status_code=204)
        else:
            response = await call_next(request)

        self._apply_headers(response, origin)
        return response


class IPRateLimitMiddleware(BaseHTTPMiddleware):
    """Fixed-window limit per client IP; preflight requests are exempt."""

    def __init__(self, app, settings: Settings, limiter: FixedWindowLimiter) -> None:
        super().__init__(app)
        self.settings = settings
        self.limiter = limiter

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.method == "OPTIONS":
            return await call_next(request)

        key = ip_rate_limit_key(request, self.settings)
        decision = self.limiter.allow(key)
        if not decision.allowed:
            logger.warning("Rate limited %s for %ds", key, decision.retry_after_seconds)
            return rate_limited_response(RateLimitError(decision.retry_after_seconds))
        return await call_next(request)
