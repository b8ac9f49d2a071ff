"""
models/schemas.py

Shared data structures for the export pipeline.

ColumnConfig  — one exportable field (key, header, width, formatter)
TableStats    — caller-supplied summary counters for one table
DataTable     — one named dataset tied to a department/classification
ExportFormat  — supported output formats and their file extensions
ExportJob     — a single export request (multi-table or legacy shape)
ExportResult  — description of the file written by the orchestrator

Jobs are built fresh per export action and consumed once.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Union


Row = Dict[str, Any]


# ── Column Schema ──────────────────────────────────────────────────────────
@dataclass(frozen=True)
class ColumnConfig:
    """
    Static description of one exportable field.
    `width` is a layout hint (characters for spreadsheets).
    `formatter` receives the raw value and must return a display string.
    """
    key:       str
    header:    str
    width:     Optional[int] = None
    formatter: Optional[Callable[[Any], str]] = None


def validate_columns(columns: Sequence[ColumnConfig]) -> None:
    """Raise ValueError if any key is empty or repeated."""
    seen = set()
    for col in columns:
        if not col.key:
            raise ValueError(f"Column key must be non-empty (header={col.header!r})")
        if col.key in seen:
            raise ValueError(f"Duplicate column key: {col.key!r}")
        seen.add(col.key)


# ── Tables ─────────────────────────────────────────────────────────────────
@dataclass
class TableStats:
    """
    Summary counters precomputed by the caller.
    Display-only: never cross-checked against the table rows.
    """
    total_items:        int = 0
    low_stock_items:    int = 0
    out_of_stock_items: int = 0
    expired_items:      int = 0
    maintenance_items:  Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_items":        self.total_items,
            "low_stock_items":    self.low_stock_items,
            "out_of_stock_items": self.out_of_stock_items,
            "expired_items":      self.expired_items,
            "maintenance_items":  self.maintenance_items,
        }


@dataclass
class DataTable:
    id:             str
    department:     str
    classification: str
    data:           List[Row] = field(default_factory=list)
    stats:          TableStats = field(default_factory=TableStats)


# ── Formats ────────────────────────────────────────────────────────────────
class ExportFormat(str, Enum):
    SPREADSHEET = "spreadsheet"
    PDF         = "pdf"
    CSV         = "csv"
    DOCUMENT    = "document"

    @property
    def extension(self) -> str:
        return _EXTENSIONS[self]


_EXTENSIONS = {
    ExportFormat.SPREADSHEET: "xlsx",
    ExportFormat.PDF:         "pdf",
    ExportFormat.CSV:         "csv",
    ExportFormat.DOCUMENT:    "docx",
}

# Names accepted at the boundary in addition to the canonical values
FORMAT_ALIASES = {
    "excel": ExportFormat.SPREADSHEET,
    "xlsx":  ExportFormat.SPREADSHEET,
    "word":  ExportFormat.DOCUMENT,
    "docx":  ExportFormat.DOCUMENT,
}


# ── Export Job ─────────────────────────────────────────────────────────────
@dataclass
class ExportJob:
    """
    One export request.

    Either `tables` is given, or the legacy single-table quadruple
    (`data`, `department`, `classification`, `stats`). The assembler
    resolves both shapes into a plain table list before rendering.
    """
    format:         Union[str, ExportFormat]
    filename:       str
    title:          str
    columns:        List[ColumnConfig] = field(default_factory=list)
    include_stats:  bool = False
    tables:         Optional[List[DataTable]] = None

    # Legacy single-table fields
    data:           Optional[List[Row]] = None
    department:     Optional[str] = None
    classification: Optional[str] = None
    stats:          Optional[TableStats] = None


# ── Export Result ──────────────────────────────────────────────────────────
@dataclass
class ExportResult:
    """
    Result of a file export operation.
    Returned to the API layer which serves the file to the user.
    """
    file_path:       Path
    format:          ExportFormat
    filename:        str
    file_size_bytes: int
    created_at:      str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file_path":       str(self.file_path),
            "format":          self.format.value,
            "filename":        self.filename,
            "file_size_bytes": self.file_size_bytes,
            "created_at":      self.created_at,
        }
