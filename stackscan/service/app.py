"""FastAPI application entrypoint for stackscan service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..errors import ConfigError, PathNotFoundError
from ..logging import get_logger
from ..orchestrator import ProjectAnalyzer
from ..workspace import WorkspaceAnalyzer

_LOGGER = get_logger("service")


class AnalyzeRequest(BaseModel):
    path: str


class ProfileResponse(BaseModel):
    profile: Dict[str, Any]
    components: List[str]
    cancelled: bool = False


class WorkspaceResponse(BaseModel):
    workspace: Dict[str, Any]
    project_count: int
    cancelled: bool = False


class HealthResponse(BaseModel):
    status: str


def create_app(
    analyzer_factory: Callable[[], ProjectAnalyzer] = ProjectAnalyzer,
    workspace_factory: Callable[[], WorkspaceAnalyzer] = WorkspaceAnalyzer,
) -> FastAPI:
    """Create the FastAPI application exposing stackscan operations."""
    app = FastAPI(title="StackScan Service", version="0.1.0")

    async def get_analyzer() -> ProjectAnalyzer:
        return analyzer_factory()

    async def get_workspace_analyzer() -> WorkspaceAnalyzer:
        return workspace_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/analyze", response_model=ProfileResponse)
    async def analyze_project(
        payload: AnalyzeRequest,
        analyzer: ProjectAnalyzer = Depends(get_analyzer),
    ) -> ProfileResponse:
        loop = asyncio.get_running_loop()
        profile = await loop.run_in_executor(None, analyzer.analyze, payload.path)
        return ProfileResponse(
            profile=profile.to_dict(),
            components=[component.id for component in profile.components],
            cancelled=profile.cancelled,
        )

    @app.post("/workspace", response_model=WorkspaceResponse)
    async def analyze_workspace(
        payload: AnalyzeRequest,
        analyzer: WorkspaceAnalyzer = Depends(get_workspace_analyzer),
    ) -> WorkspaceResponse:
        loop = asyncio.get_running_loop()
        workspace = await loop.run_in_executor(None, analyzer.analyze, payload.path)
        return WorkspaceResponse(
            workspace=workspace.to_dict(),
            project_count=workspace.summary.project_count,
            cancelled=workspace.cancelled,
        )

    @app.exception_handler(PathNotFoundError)
    async def path_not_found_handler(_: Any, exc: PathNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ConfigError)
    async def config_error_handler(_: Any, exc: ConfigError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(*, host: str = "127.0.0.1", port: int = 8000) -> None:
    """Serve the application with uvicorn until interrupted."""
    _LOGGER.info("Starting stackscan service on %s:%d", host, port)
    uvicorn.run(create_app(), host=host, port=port)


__all__ = ["create_app", "run_service"]
