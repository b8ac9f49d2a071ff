"""
modules/export/renderers/xlsx_renderer.py

Spreadsheet renderer (openpyxl).

Single table → one "Inventory Report" sheet.
Multi table  → a "Summary" sheet followed by one sheet per table,
               each laid out exactly like the single-table sheet.

Sheet layout:
  title (merged across data columns, bold, centered, light-blue fill)
  department / classification / generated / total lines
  optional statistics block
  header row (navy, white bold text, frozen below)
  data rows (alternating fill, status cells coloured by tone)
"""

import io
import re
from typing import List, Optional

import openpyxl
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from config.settings import DEFAULT_COLUMN_WIDTH, SHEET_NAME_MAX_LEN
from models.schemas import DataTable
from modules.export.assembler import NormalizedJob, aggregate_stats, stats_lines
from modules.export.formatters import (
    TONE_HEX, apply_column, capitalize_label, classification_icon, clean_text,
    format_report_date, status_tone, table_label,
)


SINGLE_SHEET_NAME  = "Inventory Report"
SUMMARY_SHEET_NAME = "Summary"

# ── Styles ─────────────────────────────────────────────────────────────────
TITLE_FILL       = PatternFill("solid", fgColor="E3F2FD")
TABLE_TITLE_FILL = PatternFill("solid", fgColor="F0F9FF")
HEADER_FILL      = PatternFill("solid", fgColor="1E3A5F")
ALT_ROW_FILL     = PatternFill("solid", fgColor="EBF5FB")
WHITE_FILL       = PatternFill("solid", fgColor="FFFFFF")

HEADER_FONT  = Font(name="Calibri", bold=True, color="FFFFFF", size=11)
SECTION_FONT = Font(name="Calibri", bold=True, size=11)

CENTER_ALIGN = Alignment(horizontal="center", vertical="center")
LEFT_ALIGN   = Alignment(horizontal="left",   vertical="center", wrap_text=True)

THIN_BORDER = Border(
    left=Side(style="thin"),  right=Side(style="thin"),
    top=Side(style="thin"),   bottom=Side(style="thin"),
)

_ILLEGAL_SHEET_CHARS = re.compile(r"[\\/*?:\[\]]")


class _SheetWriter:
    """Appends rows top to bottom, tracking the current row index."""

    def __init__(self, ws: Worksheet):
        self.ws  = ws
        self.row = 0

    def line(self, *values) -> int:
        self.row += 1
        for col_idx, value in enumerate(values, start=1):
            self.ws.cell(row=self.row, column=col_idx, value=clean_text(value))
        return self.row

    def blank(self):
        self.row += 1


# ── Sheet Names ────────────────────────────────────────────────────────────
def safe_sheet_name(name: str, existing: Optional[List[str]] = None) -> str:
    """
    Make `name` valid as an Excel sheet name: illegal characters replaced,
    at most 31 characters, unique among `existing`. Never raises.
    """
    base = _ILLEGAL_SHEET_CHARS.sub("_", clean_text(name or "")).strip() or "Sheet"
    base = base[:SHEET_NAME_MAX_LEN]
    existing = existing or []
    candidate = base
    n = 2
    while candidate in existing:
        suffix    = f" ({n})"
        candidate = base[:SHEET_NAME_MAX_LEN - len(suffix)] + suffix
        n += 1
    return candidate


# ── Building Blocks ────────────────────────────────────────────────────────
def _write_title(writer: _SheetWriter, title: str, span: int,
                 fill: PatternFill, size: int) -> None:
    row  = writer.line(title)
    cell = writer.ws.cell(row=row, column=1)
    cell.font      = Font(name="Calibri", bold=True, size=size)
    cell.alignment = CENTER_ALIGN
    cell.fill      = fill
    if span > 1:
        writer.ws.merge_cells(
            start_row=row, start_column=1, end_row=row, end_column=span
        )
    writer.ws.row_dimensions[row].height = 26


def _write_stats_block(writer: _SheetWriter, heading: str, lines: List[str]) -> None:
    row = writer.line(heading)
    writer.ws.cell(row=row, column=1).font = SECTION_FONT
    for text in lines:
        writer.line(text)
    writer.blank()


def _write_data_grid(writer: _SheetWriter, job: NormalizedJob, table: DataTable) -> None:
    ws      = writer.ws
    columns = job.columns

    header_row = writer.line(*[col.header for col in columns])
    for col_idx in range(1, len(columns) + 1):
        cell = ws.cell(row=header_row, column=col_idx)
        cell.font      = HEADER_FONT
        cell.fill      = HEADER_FILL
        cell.alignment = CENTER_ALIGN
        cell.border    = THIN_BORDER
    ws.row_dimensions[header_row].height = 22

    for offset, record in enumerate(table.data):
        row  = writer.line(*[apply_column(col, record.get(col.key)) for col in columns])
        fill = ALT_ROW_FILL if offset % 2 else WHITE_FILL
        for col_idx, col in enumerate(columns, start=1):
            cell = ws.cell(row=row, column=col_idx)
            if isinstance(cell.value, str) and cell.value.startswith("="):
                cell.data_type = "s"   # keep user text from becoming a formula
            cell.fill      = fill
            cell.alignment = LEFT_ALIGN
            cell.border    = THIN_BORDER
            if col.key == "status":
                tone = status_tone(record.get(col.key))
                cell.font = Font(name="Calibri", bold=True, color=TONE_HEX[tone])

    for col_idx, col in enumerate(columns, start=1):
        ws.column_dimensions[get_column_letter(col_idx)].width = col.width or DEFAULT_COLUMN_WIDTH

    if columns:
        ws.freeze_panes = f"A{header_row + 1}"


def _write_table_sheet(ws: Worksheet, job: NormalizedJob, table: DataTable,
                       title: str, fill: PatternFill, title_size: int) -> None:
    writer = _SheetWriter(ws)
    _write_title(writer, title, len(job.columns), fill, title_size)
    writer.blank()
    writer.line(f"Department: {capitalize_label(table.department)}")
    writer.line(
        f"Classification: {capitalize_label(table.classification)} "
        f"{classification_icon(table.classification)}"
    )
    writer.line(f"Generated: {format_report_date()}")
    writer.line(f"Total Items: {len(table.data)}")
    writer.blank()

    if job.include_stats:
        _write_stats_block(writer, "INVENTORY STATISTICS", stats_lines(table.stats))

    _write_data_grid(writer, job, table)


def _write_summary_sheet(ws: Worksheet, job: NormalizedJob) -> None:
    writer = _SheetWriter(ws)
    _write_title(writer, job.title, 2, TITLE_FILL, 16)
    writer.blank()
    writer.line(f"Generated: {format_report_date()}")
    writer.line(f"Total Tables: {len(job.tables)}")
    writer.blank()

    if job.include_stats:
        totals = aggregate_stats(job.tables)
        _write_stats_block(
            writer, "SUMMARY STATISTICS", stats_lines(totals, always_maintenance=True)
        )

    row = writer.line("TABLE BREAKDOWN")
    ws.cell(row=row, column=1).font = SECTION_FONT
    for table in job.tables:
        writer.line(table_label(table), f"{len(table.data)} items")

    ws.column_dimensions["A"].width = 45
    ws.column_dimensions["B"].width = 15


# ── Public API ─────────────────────────────────────────────────────────────
def render(job: NormalizedJob) -> bytes:
    """Render the job as an .xlsx workbook and return its bytes."""
    wb = openpyxl.Workbook()
    wb.remove(wb.active)  # remove default empty sheet

    tables = job.tables
    if len(tables) == 1:
        ws = wb.create_sheet(title=SINGLE_SHEET_NAME)
        _write_table_sheet(ws, job, tables[0], job.title, TITLE_FILL, 16)

    elif tables:
        _write_summary_sheet(wb.create_sheet(title=SUMMARY_SHEET_NAME), job)
        for table in tables:
            name = safe_sheet_name(
                f"{capitalize_label(table.department)}_{table.classification}",
                wb.sheetnames,
            )
            title = f"{table_label(table)} {classification_icon(table.classification)}"
            _write_table_sheet(wb.create_sheet(title=name), job, table, title, TABLE_TITLE_FILL, 14)

    else:
        ws     = wb.create_sheet(title=SINGLE_SHEET_NAME)
        writer = _SheetWriter(ws)
        _write_title(writer, job.title, len(job.columns), TITLE_FILL, 16)
        writer.blank()
        writer.line(f"Generated: {format_report_date()}")
        ws.column_dimensions["A"].width = 45

    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()
