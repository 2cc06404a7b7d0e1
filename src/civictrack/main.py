# src/civictrack/main.py
"""Main entry point for the CivicTrack application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError

from civictrack.api.v1 import admin_router, auth_router, issues_router
from civictrack.core.errors import CivicTrackError
from civictrack.core.logging import configure_logging
from civictrack.core.settings import settings

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="CivicTrack API",
    description="Citizen reporting of local infrastructure issues",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers
app.include_router(auth_router, prefix="/api")
app.include_router(issues_router, prefix="/api")
app.include_router(admin_router, prefix="/api")

# Uploaded photos; the directory is created lazily on first upload.
app.mount(
    "/uploads",
    StaticFiles(directory=settings.upload_dir, check_dir=False),
    name="uploads",
)


@app.exception_handler(CivicTrackError)
async def civictrack_error_handler(request: Request, exc: CivicTrackError) -> JSONResponse:
    """Render domain errors as ``{"detail": ...}`` with their status code."""
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed input as 400 rather than FastAPI's default 422."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid data", "errors": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Hide persistence failures behind an opaque 500."""
    logger.error("Store failure on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal storage error"},
    )


@app.on_event("startup")
async def on_startup() -> None:
    configure_logging(settings.log_level)
    logger.info("%s %s starting", settings.app_name, settings.app_version)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": "CivicTrack API",
        "version": settings.app_version,
        "description": "Citizen reporting of local infrastructure issues",
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("civictrack.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
