"""HTTP surface for the agent registry (FastAPI)."""

from agentreg.web.app import create_app

__all__ = ["create_app"]
