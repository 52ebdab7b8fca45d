"""FastAPI app wiring for the freelance agents runtime."""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import AsyncIterator, Callable, Optional, cast

from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..resume.analyzer import TextGenerator
from ..runtime.api import create_router
from ..runtime.storage import Container
from ..runtime.storage.file_repos import STATE_VERSION


def create_app(
    project_dir: Optional[Path] = None,
    enable_cors: bool = True,
    *,
    clock: Optional[Callable[[], datetime]] = None,
    text_client_factory: Optional[Callable[[Container], TextGenerator]] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        project_dir (Optional[Path]): Default project directory used when request-level
            ``project_dir`` query parameters are not provided.
        enable_cors (bool): Whether to install permissive CORS middleware for browser
            clients.
        clock (Optional[Callable[[], datetime]]): Clock forwarded to agent runs.
        text_client_factory (Optional[Callable[[Container], TextGenerator]]): Builds
            the text-generation client for the resume route.

    Returns:
        FastAPI: Configured application with a per-project container cache
        stored on ``app.state``.
    """
    @asynccontextmanager
    async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            yield
        finally:
            app.state.containers = {}

    app = FastAPI(
        title="Freelance Agents",
        description="Per-user agent runs and notification ledger for freelancers",
        version=__version__,
        lifespan=_lifespan,
    )

    if enable_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.state.default_project_dir = project_dir
    app.state.containers = {}

    def _resolve_project_dir(project_dir_param: Optional[str] = None) -> Path:
        if project_dir_param:
            return Path(project_dir_param).expanduser().resolve()
        if app.state.default_project_dir:
            return Path(app.state.default_project_dir).resolve()
        return Path.cwd().resolve()

    def _resolve_container(project_dir_param: Optional[str] = None) -> Container:
        resolved = _resolve_project_dir(project_dir_param)
        key = str(resolved)
        cache = cast(dict[str, Container], app.state.containers)
        if key not in cache:
            cache[key] = Container(resolved)
        return cache[key]

    app.include_router(create_router(_resolve_container, clock=clock, text_client_factory=text_client_factory))

    @app.get("/")
    async def root(project_dir: Optional[str] = Query(None)) -> dict[str, object]:
        """Return basic service metadata for the selected project context."""
        container = _resolve_container(project_dir)
        return {
            "name": "Freelance Agents",
            "version": __version__,
            "project": str(container.project_dir),
            "project_id": container.project_id,
            "schema_version": STATE_VERSION,
        }

    @app.get("/healthz")
    async def healthz() -> dict[str, object]:
        return {"status": "ok", "version": __version__}

    return app


app = create_app()
