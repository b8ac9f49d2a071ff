"""
api/dependencies.py

FastAPI dependency injection for shared module instances.
The export engine is created once at startup and injected into
route handlers via FastAPI's dependency system.

Usage in routers:
    from api.dependencies import get_export_engine

    @router.post("/")
    async def example(engine: ExportEngine = Depends(get_export_engine)):
        ...
"""

from fastapi import Request

from modules.export.export_engine import ExportEngine


def get_export_engine(request: Request) -> ExportEngine:
    return request.app.state.export_engine
