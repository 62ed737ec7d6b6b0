"""Route modules for the Rate My Decision API."""

from .decisions import router as decisions_router
from .responses import router as responses_router
from .system import router as system_router

__all__ = [
    "decisions_router",
    "responses_router",
    "system_router",
]
