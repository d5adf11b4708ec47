"""FastAPI dependencies."""

from __future__ import annotations

from fastapi import Request

from agentreg.runtime import Registry


def get_registry(request: Request) -> Registry:
    """Return the registry the application was created with."""
    return request.app.state.registry
