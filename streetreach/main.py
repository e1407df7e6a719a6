"""Street Reach - Outreach client records service."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from httpx import HTTPError, HTTPStatusError
from pydantic import ValidationError

from streetreach.clients.record_store import get_record_store
from streetreach.routers import (
    admin_users,
    encounters,
    export,
    health,
    persons,
    status_changes,
)
from streetreach.settings import settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan management."""
    # Startup
    yield
    # Shutdown
    if get_record_store.cache_info().currsize:
        await get_record_store().supabase.close()


app = FastAPI(
    title="Street Reach",
    description="Outreach client records - intake, duplicate detection, service logging and reporting",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origin_regex=settings.allowed_origin_regex,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(HTTPStatusError)
async def handle_httpx_status_error(
    request: Request, exc: HTTPStatusError
) -> JSONResponse:
    """Handle HTTP status errors from httpx clients (e.g., Supabase)."""
    content = None
    if exc.response.content:
        try:
            content = exc.response.json()
        except (ValueError, UnicodeDecodeError):
            content = exc.response.text
    return JSONResponse(
        status_code=exc.response.status_code,
        content={"detail": content},
    )


@app.exception_handler(HTTPError)
async def handle_httpx_error(request: Request, exc: HTTPError) -> JSONResponse:
    """Handle network/connection errors from httpx clients."""
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Service temporarily unavailable"},
    )


@app.exception_handler(ValidationError)
async def handle_validation_error(
    request: Request, exc: ValidationError
) -> JSONResponse:
    """Handle Pydantic ValidationError and return 422."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": exc.errors(include_url=False, include_context=False)},
    )


@app.exception_handler(Exception)
async def handle_unhandled_exceptions(request: Request, exc: Exception) -> JSONResponse:
    """Catch and log all unhandled exceptions."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# Register routers
app.include_router(health.router)
app.include_router(persons.router)
app.include_router(encounters.router)
app.include_router(status_changes.router)
app.include_router(admin_users.router)
app.include_router(export.router)


@app.get("/")
def root() -> dict[str, str]:
    """Root endpoint."""
    return {"service": "streetreach", "version": "0.1.0"}
