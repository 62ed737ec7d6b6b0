# src/rate_my_decision/main.py
"""Main entry point for the Rate My Decision application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from rate_my_decision.api.endpoints import decisions_router, responses_router, system_router
from rate_my_decision.api.middleware import (
    CORSGateMiddleware,
    IPRateLimitMiddleware,
    SecurityHeadersMiddleware,
    error_response,
    rate_limited_response,
)
from rate_my_decision.core.errors import DecisionServiceError, RateLimitError
from rate_my_decision.core.settings import Settings, settings as default_settings
from rate_my_decision.services.rate_limiter import FixedWindowLimiter

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


async def _service_error_handler(request: Request, exc: DecisionServiceError) -> JSONResponse:
    if isinstance(exc, RateLimitError):
        return rate_limited_response(exc)
    return error_response(exc.status_code, exc.message)


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render framework validation failures (path and query parameters) as 400s."""
    errors = exc.errors()
    if not errors:
        return error_response(400, "invalid request")
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ())[1:])
    message = str(first.get("msg", "is invalid"))
    return error_response(400, f"{field}: {message}" if field else message)


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail), headers=exc.headers)


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """Build the application with its gatekeeping middleware and routes.

    Each call gets its own rate limiters, so tests can build isolated apps
    from explicit settings.
    """
    app_settings = app_settings or default_settings
    configure_logging(app_settings.log_level)

    app = FastAPI(
        title=app_settings.app_name,
        description="Share a life decision, collect anonymous ratings and get a recommendation",
        version=app_settings.app_version,
    )
    app.state.settings = app_settings
    app.state.ip_limiter = FixedWindowLimiter(
        app_settings.ip_rate_limit_per_minute, window=app_settings.rate_limit_window_seconds
    )
    app.state.viewer_limiter = FixedWindowLimiter(
        app_settings.viewer_rate_limit_per_minute, window=app_settings.rate_limit_window_seconds
    )

    # Last added runs first: security headers wrap CORS, which wraps the IP limit.
    app.add_middleware(IPRateLimitMiddleware, settings=app_settings, limiter=app.state.ip_limiter)
    app.add_middleware(CORSGateMiddleware, settings=app_settings)
    app.add_middleware(SecurityHeadersMiddleware)

    app.add_exception_handler(DecisionServiceError, _service_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)

    app.include_router(system_router)
    app.include_router(decisions_router)
    app.include_router(responses_router)

    logger.info(
        "%s %s ready (write keys: %s, cors: %s)",
        app_settings.app_name,
        app_settings.app_version,
        "configured" if app_settings.api_keys else "open",
        "*" if app_settings.allow_any_origin else ",".join(sorted(app_settings.allowed_origins)),
    )
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("rate_my_decision.main:app", host="0.0.0.0", port=8000)
