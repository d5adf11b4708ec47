"""FastAPI application for the agent registry.

Provides REST endpoints over one shared registry for:
- Discovery (list, get, create, patch, delete, search, stats)
- Management (drafts, status changes)
- Ledger (identity contracts, anchoring)
- Query cache inspection
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from agentreg import __version__
from agentreg.config import Settings
from agentreg.errors import (
    AgentRegistryError,
    NotFoundError,
    RecordValidationError,
    StoreClosedError,
)
from agentreg.runtime import Registry, open_registry
from agentreg.web.routers import agents, ledger, management, query

logger = logging.getLogger(__name__)


def _error(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


def create_app(registry: Optional[Registry] = None, settings: Optional[Settings] = None) -> FastAPI:
    """Build the app around ``registry``, or open one from ``settings``.

    A registry opened here is closed on application shutdown; one passed in
    stays owned by the caller.
    """
    owned = registry is None
    if registry is None:
        registry = open_registry(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if owned:
            registry.close()

    app = FastAPI(
        title="agentreg API",
        description="REST API for the unified agent record store and query engine.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.registry = registry

    # ---------------------------------------------------------------------------
    # CORS middleware (allow all origins for development)
    # ---------------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ---------------------------------------------------------------------------
    # Error mapping
    # ---------------------------------------------------------------------------

    @app.exception_handler(NotFoundError)
    async def not_found(request: Request, exc: NotFoundError):
        return _error(status.HTTP_404_NOT_FOUND, exc)

    @app.exception_handler(RecordValidationError)
    async def invalid(request: Request, exc: RecordValidationError):
        return _error(422, exc)

    @app.exception_handler(StoreClosedError)
    async def closed(request: Request, exc: StoreClosedError):
        return _error(status.HTTP_503_SERVICE_UNAVAILABLE, exc)

    @app.exception_handler(AgentRegistryError)
    async def registry_error(request: Request, exc: AgentRegistryError):
        logger.warning("Unhandled registry error on %s: %s", request.url.path, exc)
        return _error(status.HTTP_400_BAD_REQUEST, exc)

    # ---------------------------------------------------------------------------
    # Include routers
    # ---------------------------------------------------------------------------
    app.include_router(agents.router)
    app.include_router(management.router)
    app.include_router(ledger.router)
    app.include_router(query.router)

    @app.get("/", tags=["meta"])
    async def root():
        """Return basic API information."""
        return {
            "name": "agentreg API",
            "version": __version__,
            "docs": "/docs",
            "openapi": "/openapi.json",
        }

    @app.get("/health", tags=["meta"])
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "agents": len(registry.store)}

    return app
