"""
api/routers/health.py

Health endpoints.

GET /health/        — Basic liveness check
GET /health/ready   — Readiness check (export engine present, output dir writable)
"""

import os
import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from api.dependencies import get_export_engine
from config.settings import OUTPUT_DIR
from modules.export.export_engine import ExportEngine

router = APIRouter()


@router.get(
    "/",
    summary="Liveness check",
    description="Returns 200 if the server is alive.",
)
async def health_live():
    """Simple liveness probe — used by Docker/K8s health checks."""
    return {"status": "alive", "timestamp": time.time()}


@router.get(
    "/ready",
    summary="Readiness check",
    description="Returns 503 if the export directory cannot be written.",
)
async def health_ready(export_engine: ExportEngine = Depends(get_export_engine)):
    out_dir = export_engine.output_dir or OUTPUT_DIR
    if not (out_dir.is_dir() and os.access(out_dir, os.W_OK)):
        return JSONResponse(
            status_code=503,
            content={
                "status": "not_ready",
                "issues": [f"Output directory not writable: {out_dir}"],
            },
        )
    return {"status": "ready", "timestamp": time.time()}
