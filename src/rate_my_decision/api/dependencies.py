"""FastAPI dependencies shared by the route modules."""

from __future__ import annotations

import ipaddress
import logging
import uuid
from typing import Annotated

from fastapi import Depends, Path, Request
from sqlalchemy.orm import Session

from rate_my_decision.core.errors import AuthError, RateLimitError
from rate_my_decision.core.settings import Settings
from rate_my_decision.db.session import get_db
from rate_my_decision.services.normalizer import normalize_slug_param
from rate_my_decision.services.rate_limiter import (
    IP_KEY_PREFIX,
    VIEWER_KEY_PREFIX,
    FixedWindowLimiter,
)

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-API-Key"


def get_settings(request: Request) -> Settings:
    """Return the settings the running application was built with."""
    return request.app.state.settings


def get_viewer_limiter(request: Request) -> FixedWindowLimiter:
    return request.app.state.viewer_limiter


SessionDep = Annotated[Session, Depends(get_db)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
ViewerLimiterDep = Annotated[FixedWindowLimiter, Depends(get_viewer_limiter)]


def _parse_ip(raw: str | None) -> str | None:
    if not raw:
        return None
    try:
        return str(ipaddress.ip_address(raw.strip()))
    except ValueError:
        return None


def client_ip(request: Request, settings: Settings) -> str:
    """Resolve the caller's IP, honouring proxy headers only when trusted."""
    if settings.trust_proxy_headers:
        forwarded_for = request.headers.get("x-forwarded-for", "").strip()
        if forwarded_for:
            ip = _parse_ip(forwarded_for.split(",")[0])
            if ip:
                return ip
        ip = _parse_ip(request.headers.get("x-real-ip"))
        if ip:
            return ip

    peer = request.client.host if request.client else None
    return _parse_ip(peer) or "unknown"


def ip_rate_limit_key(request: Request, settings: Settings) -> str:
    return IP_KEY_PREFIX + client_ip(request, settings)


def require_write_api_key(request: Request, settings: SettingsDep) -> None:
    """Gate write routes behind the configured API keys.

    With no keys configured the service runs in open-write mode.
    """
    keys = settings.api_keys
    if not keys:
        return
    supplied = request.headers.get(API_KEY_HEADER, "").strip()
    if not supplied:
        raise AuthError("missing API key")
    if supplied not in keys:
        raise AuthError("invalid API key")


def enforce_viewer_rate_limit(limiter: FixedWindowLimiter, viewer_id: uuid.UUID) -> None:
    """Apply the per-viewer window to an operation carrying a viewer id."""
    decision = limiter.allow(f"{VIEWER_KEY_PREFIX}{viewer_id}")
    if not decision.allowed:
        logger.warning("Viewer %s rate limited for %ds", viewer_id, decision.retry_after_seconds)
        raise RateLimitError(decision.retry_after_seconds)


def slug_path(slug: Annotated[str, Path()]) -> str:
    """Validate the ``{slug}`` path segment."""
    return normalize_slug_param(slug)


SlugDep = Annotated[str, Depends(slug_path)]
