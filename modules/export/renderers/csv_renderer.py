"""
modules/export/renderers/csv_renderer.py

CSV renderer (stdlib csv module).

One flat UTF-8 text stream. Multi-table jobs become labelled sections:

    Multi-Table Inventory Report
    Generated: ...
    Total Tables: 2

    === Medical - Medicines ===
    Total Items: 12

    Code,Generic Name,...
    ...

Every line goes through csv.writer, so any value containing a comma,
a double quote or a line break is quoted with inner quotes doubled,
whatever the column formatter returned.
"""

import csv
import io
from typing import List

from models.schemas import DataTable
from modules.export.assembler import NormalizedJob
from modules.export.formatters import (
    apply_column, capitalize_label, format_report_date, table_label,
)


def _write_grid(writer, job: NormalizedJob, table: DataTable) -> None:
    writer.writerow([col.header for col in job.columns])
    for record in table.data:
        writer.writerow([apply_column(col, record.get(col.key)) for col in job.columns])


def _single(writer, job: NormalizedJob, table: DataTable) -> None:
    writer.writerow([
        f"{job.title} - {capitalize_label(table.department)} "
        f"{capitalize_label(table.classification)}"
    ])
    writer.writerow([f"Generated: {format_report_date()}"])
    writer.writerow([f"Total Items: {len(table.data)}"])
    writer.writerow([])
    _write_grid(writer, job, table)


def _multi(writer, job: NormalizedJob, tables: List[DataTable]) -> None:
    writer.writerow([job.title])
    writer.writerow([f"Generated: {format_report_date()}"])
    writer.writerow([f"Total Tables: {len(tables)}"])
    writer.writerow([])

    for index, table in enumerate(tables):
        writer.writerow([])
        writer.writerow([f"=== {table_label(table)} ==="])
        writer.writerow([f"Total Items: {len(table.data)}"])
        writer.writerow([])
        _write_grid(writer, job, table)
        if index < len(tables) - 1:
            writer.writerow([])


def render(job: NormalizedJob) -> bytes:
    """Render the job as CSV text and return it UTF-8 encoded."""
    buf    = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")

    if len(job.tables) == 1:
        _single(writer, job, job.tables[0])
    elif job.tables:
        _multi(writer, job, job.tables)
    else:
        writer.writerow([job.title])
        writer.writerow([f"Generated: {format_report_date()}"])

    return buf.getvalue().encode("utf-8")
