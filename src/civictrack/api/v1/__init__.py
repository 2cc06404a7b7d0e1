"""Version 1 API endpoints."""

from .endpoints import admin_router, auth_router, issues_router

__all__ = [
    "admin_router",
    "auth_router",
    "issues_router",
]
