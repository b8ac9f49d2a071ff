"""
api/main.py

Main entry point for the FastAPI application.
Initializes the app, middleware (CORS), and routers.
The shared ExportEngine is created in the lifespan handler and
kept on app.state for the dependency layer.
"""

import sys
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Add project root to sys.path
sys.path.append(str(Path(__file__).parent.parent))

from loguru import logger

from config.settings import (
    API_HOST, API_PORT, API_RELOAD, OUTPUT_DIR, PROJECT_NAME, VERSION,
)
from api.routers import export, health
from modules.export.export_engine import ExportEngine


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifecycle manager:
    1. Create the export engine and output directory on startup.
    2. Log shutdown.
    """
    logger.info(f"Starting up {PROJECT_NAME}...")

    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    app.state.export_engine = ExportEngine()
    logger.info(f"Export engine ready (output: {OUTPUT_DIR})")

    yield

    logger.info("Shutting down...")


app = FastAPI(
    title=PROJECT_NAME,
    version=VERSION,
    lifespan=lifespan,
    description="Exports hospital inventory tables as XLSX, PDF, CSV and DOCX files",
)

# CORS - Allow all for development convenience
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include Routers
app.include_router(health.router, prefix="/health", tags=["Health"])
app.include_router(export.router, prefix="/export", tags=["Export"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=API_HOST,
        port=API_PORT,
        reload=API_RELOAD,
    )
