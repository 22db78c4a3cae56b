"""API endpoints package for briefgate."""

from briefgate.app.api.briefs import router as briefs_router

__all__ = [
    "briefs_router",
]
