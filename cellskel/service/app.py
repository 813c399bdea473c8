"""FastAPI application entrypoint for cellskel service mode."""

from __future__ import annotations

import asyncio
from typing import Callable, List, Optional

import uvicorn
from fastapi import Depends, FastAPI
from pydantic import BaseModel

from ..engine import SkeletonEngine
from ..models import Cell, SkeletonResult


class CellPayload(BaseModel):
    index: int
    raw_text: Optional[str] = None
    language: Optional[str] = None


class SkeletonizeRequest(BaseModel):
    cells: List[CellPayload]
    language: Optional[str] = None


class VariantPayload(BaseModel):
    bucket: str
    index: int


class SkeletonResultPayload(BaseModel):
    index: int
    text: str
    original_lines: int
    skeleton_lines: int
    compression_ratio: float
    language: str
    bucket: Optional[str] = None
    duplicate_of: Optional[int] = None
    variant_of: Optional[VariantPayload] = None


class SkeletonizeResponse(BaseModel):
    results: List[SkeletonResultPayload]


class HealthResponse(BaseModel):
    status: str


def _default_engine() -> SkeletonEngine:
    return SkeletonEngine()


def _to_payload(result: SkeletonResult) -> SkeletonResultPayload:
    variant = None
    if result.variant_of is not None:
        variant = VariantPayload(bucket=result.variant_of[0], index=result.variant_of[1])
    return SkeletonResultPayload(
        index=result.index,
        text=result.text,
        original_lines=result.original_lines,
        skeleton_lines=result.skeleton_lines,
        compression_ratio=result.compression_ratio,
        language=result.language,
        bucket=result.bucket,
        duplicate_of=result.duplicate_of,
        variant_of=variant,
    )


def create_app(
    engine_factory: Callable[[], SkeletonEngine] = _default_engine,
) -> FastAPI:
    """Create the FastAPI application exposing cell skeletonization."""

    app = FastAPI(title="CellSkel Service", version="0.1.0")

    async def get_engine() -> SkeletonEngine:
        return engine_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/skeletonize", response_model=SkeletonizeResponse)
    async def skeletonize(
        payload: SkeletonizeRequest,
        engine: SkeletonEngine = Depends(get_engine),
    ) -> SkeletonizeResponse:
        cells = [
            Cell(
                index=item.index,
                raw_text=item.raw_text,
                language=item.language or payload.language,
            )
            for item in payload.cells
        ]

        def _run() -> List[SkeletonResult]:
            return engine.skeletonize_document(cells)

        loop = asyncio.get_running_loop()
        results = await loop.run_in_executor(None, _run)
        return SkeletonizeResponse(results=[_to_payload(result) for result in results])

    return app


def run_service(
    host: str = "127.0.0.1", port: int = 8000
) -> None:  # pragma: no cover - integration path
    app = create_app()
    uvicorn.run(app, host=host, port=port)


__all__ = [
    "CellPayload",
    "HealthResponse",
    "SkeletonResultPayload",
    "SkeletonizeRequest",
    "SkeletonizeResponse",
    "create_app",
    "run_service",
]
