"""System endpoints."""

from __future__ import annotations

from fastapi import APIRouter

router = APIRouter(tags=["system"])


@router.get("/health")
def health_check() -> dict[str, bool]:
    """Liveness check; does not touch the database."""
    return {"ok": True}
