"""HTTP API routes for the agent runtime."""

from .router import create_router

__all__ = ["create_router"]
