"""FastAPI application entrypoint for onbored service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, Optional

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..llm.runner import PROVIDERS
from ..models import Report
from ..orchestrator import Orchestrator


class AnalyzeRequest(BaseModel):
    path: str
    output_dir: Optional[str] = None
    ai_provider: Optional[str] = None


class HealthResponse(BaseModel):
    status: str


def _default_orchestrator() -> Orchestrator:
    return Orchestrator()


def create_app(
    orchestrator_factory: Callable[[], Orchestrator] = _default_orchestrator,
) -> FastAPI:
    """Create the FastAPI application exposing the analysis pipeline."""

    app = FastAPI(title="onbored", version="0.1.0")

    async def get_orchestrator() -> Orchestrator:
        # One orchestrator per request; runs share no state.
        return orchestrator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/analyze")
    async def analyze_repo(
        payload: AnalyzeRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> Dict[str, Any]:
        if payload.ai_provider is not None and payload.ai_provider not in PROVIDERS:
            raise ValueError(f"Unknown AI provider: {payload.ai_provider}")

        def _run_analysis() -> Report:
            return orchestrator.run(
                payload.path,
                output_dir=payload.output_dir,
                ai_provider=payload.ai_provider,
            )

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:  # pragma: no cover
            report = _run_analysis()
        else:
            report = await loop.run_in_executor(None, _run_analysis)
        return report.to_dict()

    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(
        _: Any, exc: FileNotFoundError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(RuntimeError)
    async def runtime_error_handler(
        _: Any, exc: RuntimeError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(ValueError)
    async def value_error_handler(
        _: Any, exc: ValueError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(
    host: str = "127.0.0.1", port: int = 8000
) -> None:  # pragma: no cover - integration path
    uvicorn.run(create_app(), host=host, port=port)
