"""API endpoint modules for version 1."""

from .admin import router as admin_router
from .auth import router as auth_router
from .issues import router as issues_router

__all__ = [
    "admin_router",
    "auth_router",
    "issues_router",
]
