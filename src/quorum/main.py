# src/quorum/main.py
"""Main entry point for the Quorum application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from quorum.api.v1 import (
    admin_router,
    announcements_router,
    answers_router,
    auth_router,
    changes_router,
    notifications_router,
    questions_router,
    users_router,
    votes_router,
)
from quorum.core.errors import QuorumError
from quorum.core.logging import configure_logging
from quorum.core.settings import settings
from quorum.db.session import create_tables

configure_logging()
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title=f"{settings.app_name} API",
    description="Community question and answer API",
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
app.include_router(auth_router, prefix="/api/v1")
app.include_router(questions_router, prefix="/api/v1")
app.include_router(answers_router, prefix="/api/v1")
app.include_router(votes_router, prefix="/api/v1")
app.include_router(notifications_router, prefix="/api/v1")
app.include_router(users_router, prefix="/api/v1")
app.include_router(announcements_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")
app.include_router(changes_router, prefix="/api/v1")


@app.exception_handler(QuorumError)
async def quorum_error_handler(request: Request, exc: QuorumError) -> JSONResponse:
    """Render domain errors in the same shape as ``HTTPException``."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.on_event("startup")
async def on_startup() -> None:
    if settings.auto_create_tables:
        create_tables()
        logger.info("Database tables ensured")


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": f"{settings.app_name} API",
        "version": settings.app_version,
        "description": "Community question and answer API",
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("quorum.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
