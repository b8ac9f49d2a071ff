"""
api/routers/export.py

Export endpoints.
Builds an ExportJob from the request body, runs ExportEngine and
returns the generated file as a download.

GET  /export/formats            — supported formats and extensions
GET  /export/columns/inventory  — the inventory column schema
POST /export/
Body (multi-table):
{
    "format": "spreadsheet" | "pdf" | "csv" | "document",
    "filename": "multi_table_inventory_export_2026-10-19T14-30-00",
    "title": "Multi-Table Inventory Report",
    "includeStats": true,
    "columnKeys": ["code", "generic_name", "status"],
    "tables": [
        {"id": "t1", "department": "medical", "classification": "Medicines",
         "data": [...], "stats": {"totalItems": 1, "lowStockItems": 1, ...}}
    ]
}
The legacy single-table shape (data / department / classification /
stats at the top level) is accepted too. Explicit "columns" may name a
registered formatter ("quantity", "date").
Each export is written to its own directory under OUTPUT_DIR and
removed after the response is sent.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import FileResponse
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field
from starlette.background import BackgroundTask

from api.dependencies import get_export_engine
from models.schemas import (
    FORMAT_ALIASES, ColumnConfig, DataTable, ExportFormat, ExportJob, TableStats,
)
from modules.export.columns import (
    INVENTORY_COLUMNS, NAMED_FORMATTERS, select_inventory_columns,
)
from modules.export.errors import UnsupportedExportFormatError
from modules.export.export_engine import ExportEngine, discard_export
from modules.export.formatters import make_export_filename

router = APIRouter()

MEDIA_TYPES = {
    ExportFormat.SPREADSHEET: "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ExportFormat.PDF:         "application/pdf",
    ExportFormat.CSV:         "text/csv; charset=utf-8",
    ExportFormat.DOCUMENT:    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}


# ── Request Models ─────────────────────────────────────────────────────────
class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class StatsPayload(_CamelModel):
    total_items:        int = Field(0, alias="totalItems")
    low_stock_items:    int = Field(0, alias="lowStockItems")
    out_of_stock_items: int = Field(0, alias="outOfStockItems")
    expired_items:      int = Field(0, alias="expiredItems")
    maintenance_items:  Optional[int] = Field(None, alias="maintenanceItems")

    def to_stats(self) -> TableStats:
        return TableStats(
            total_items=self.total_items,
            low_stock_items=self.low_stock_items,
            out_of_stock_items=self.out_of_stock_items,
            expired_items=self.expired_items,
            maintenance_items=self.maintenance_items,
        )


class ColumnPayload(_CamelModel):
    key:       str
    header:    str
    width:     Optional[int] = None
    formatter: Optional[str] = None   # name from NAMED_FORMATTERS

    def to_column(self) -> ColumnConfig:
        formatter = None
        if self.formatter:
            if self.formatter not in NAMED_FORMATTERS:
                raise ValueError(f"Unknown formatter: {self.formatter!r}")
            formatter = NAMED_FORMATTERS[self.formatter]
        return ColumnConfig(self.key, self.header, self.width, formatter)


class TablePayload(_CamelModel):
    id:             str
    department:     str
    classification: str
    data:           List[Dict[str, Any]] = []
    stats:          StatsPayload = StatsPayload()


class ExportRequest(_CamelModel):
    format:         str
    filename:       Optional[str] = None
    title:          str = "Inventory Report"
    include_stats:  bool = Field(False, alias="includeStats")
    columns:        Optional[List[ColumnPayload]] = None
    column_keys:    Optional[List[str]] = Field(None, alias="columnKeys")
    tables:         Optional[List[TablePayload]] = None

    # Legacy single-table fields
    data:           Optional[List[Dict[str, Any]]] = None
    department:     Optional[str] = None
    classification: Optional[str] = None
    stats:          Optional[StatsPayload] = None

    def to_job(self) -> ExportJob:
        """Raises ValueError / KeyError for unknown formatters or columns."""
        if self.columns:
            columns = [c.to_column() for c in self.columns]
        elif self.column_keys:
            columns = select_inventory_columns(self.column_keys)
        else:
            columns = list(INVENTORY_COLUMNS)

        tables = None
        if self.tables:
            tables = [
                DataTable(
                    id=t.id,
                    department=t.department,
                    classification=t.classification,
                    data=t.data,
                    stats=t.stats.to_stats(),
                )
                for t in self.tables
            ]

        return ExportJob(
            format=self.format,
            filename=self.filename or make_export_filename("inventory_export"),
            title=self.title,
            columns=columns,
            include_stats=self.include_stats,
            tables=tables,
            data=self.data,
            department=self.department,
            classification=self.classification,
            stats=self.stats.to_stats() if self.stats else None,
        )


# ── Endpoints ──────────────────────────────────────────────────────────────
@router.get(
    "/formats",
    summary="Supported export formats",
)
async def list_formats():
    return {
        "formats": [
            {"format": f.value, "extension": f.extension} for f in ExportFormat
        ],
        "aliases": {alias: f.value for alias, f in FORMAT_ALIASES.items()},
    }


@router.get(
    "/columns/inventory",
    summary="Inventory column schema",
)
async def inventory_columns():
    return {
        "columns": [
            {"key": c.key, "header": c.header, "width": c.width}
            for c in INVENTORY_COLUMNS
        ]
    }


@router.post(
    "/",
    summary="Export tables to a file",
    description="Generates a downloadable XLSX, PDF, CSV or DOCX file from tabular data.",
)
async def export_tables(
    request: ExportRequest,
    export_engine: ExportEngine = Depends(get_export_engine),
):
    """
    Generate and download export file. The file is deleted once sent.
    """
    try:
        job = request.to_job()
    except (ValueError, KeyError) as e:
        raise HTTPException(status_code=400, detail=str(e).strip("'\""))

    try:
        result = await run_in_threadpool(export_engine.export, job)
    except UnsupportedExportFormatError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Export request failed: {e}")
        raise HTTPException(status_code=500, detail=f"Export failed: {e}")

    return FileResponse(
        path=result.file_path,
        filename=result.filename,
        media_type=MEDIA_TYPES[result.format],
        background=BackgroundTask(discard_export, result),
    )
