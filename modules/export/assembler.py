"""
modules/export/assembler.py

Table Assembler for the export pipeline.

Resolves the two accepted job shapes into one canonical NormalizedJob:
  - multi-table jobs  (job.tables non-empty)  → passed through unchanged
  - legacy jobs       (data + department + classification [+ stats])
                      → a single synthesized DataTable
  - anything else     → an empty table list (renderers emit a title-only doc)

Also provides aggregate_stats() for the cross-table summary section.
The sum is purely additive: rows are never de-duplicated across tables
and stats are never checked against row counts.
"""

from dataclasses import dataclass, field
from typing import List, Sequence

from models.schemas import (
    ColumnConfig, DataTable, ExportFormat, ExportJob, TableStats,
)


@dataclass
class NormalizedJob:
    """ExportJob after assembly. `tables` is never in the legacy shape."""
    format:        ExportFormat
    filename:      str
    title:         str
    columns:       List[ColumnConfig] = field(default_factory=list)
    include_stats: bool = False
    tables:        List[DataTable] = field(default_factory=list)

    @property
    def is_multi_table(self) -> bool:
        return len(self.tables) > 1


def normalize_tables(job: ExportJob) -> List[DataTable]:
    if job.tables:
        return list(job.tables)

    if job.data is not None and job.department and job.classification:
        return [
            DataTable(
                id=f"{job.department}_{job.classification}",
                department=job.department,
                classification=job.classification,
                data=job.data,
                stats=job.stats or TableStats(),
            )
        ]

    return []


def normalize(job: ExportJob, export_format: ExportFormat) -> NormalizedJob:
    """
    Build the canonical job handed to renderers.
    `export_format` is the already-resolved format (see ExportEngine).
    """
    return NormalizedJob(
        format=export_format,
        filename=job.filename,
        title=job.title,
        columns=list(job.columns),
        include_stats=job.include_stats,
        tables=normalize_tables(job),
    )


def aggregate_stats(tables: Sequence[DataTable]) -> TableStats:
    """Sum every counter across tables; missing maintenance counts as 0."""
    total = TableStats(maintenance_items=0)
    for table in tables:
        s = table.stats
        total.total_items        += s.total_items
        total.low_stock_items    += s.low_stock_items
        total.out_of_stock_items += s.out_of_stock_items
        total.expired_items      += s.expired_items
        total.maintenance_items  += s.maintenance_items or 0
    return total


def stats_lines(stats: TableStats, always_maintenance: bool = False) -> List[str]:
    """
    Human-readable statistics lines shared by the text-oriented renderers.
    Maintenance is listed only when the caller supplied it, unless forced
    (aggregates always carry it).
    """
    lines = [
        f"Total Items: {stats.total_items}",
        f"Low Stock: {stats.low_stock_items}",
        f"Out of Stock: {stats.out_of_stock_items}",
        f"Expired: {stats.expired_items}",
    ]
    if always_maintenance or stats.maintenance_items is not None:
        lines.append(f"Maintenance Required: {stats.maintenance_items or 0}")
    return lines
