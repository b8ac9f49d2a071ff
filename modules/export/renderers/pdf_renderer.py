"""
modules/export/renderers/pdf_renderer.py

PDF renderer (reportlab platypus).

Single table:
  centered title, "<Department> Department" heading,
  classification / generated / total lines,
  optional two-column statistics block,
  striped data table (blue bold header, grey banding) that paginates
  automatically with the header repeated on every page.

Multi table:
  title, generated / table count, optional aggregate statistics,
  TABLE BREAKDOWN listing, then per table a heading and a data table
  capped at PDF_MAX_ROWS_PER_TABLE rows, followed by a note when rows
  were omitted. A page break is forced before a table heading when less
  than PDF_PAGE_BREAK_THRESHOLD_MM remains on the page.

Every page carries "Page N | Generated by <APP_NAME>" in the footer;
single-table reports read "Page N of M". Table rows taller than a page
are split across pages.
Wide schemas (more than 8 columns) use landscape A4.
"""

import io
from typing import List, Optional, Tuple
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.colors import HexColor
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import (
    CondPageBreak, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle,
)

from config.settings import (
    APP_NAME, DEFAULT_COLUMN_WIDTH,
    PDF_MAX_ROWS_PER_TABLE, PDF_PAGE_BREAK_THRESHOLD_MM,
)
from models.schemas import ColumnConfig, DataTable, TableStats
from modules.export.assembler import NormalizedJob, aggregate_stats, stats_lines
from modules.export.formatters import (
    TONE_HEX, apply_column, capitalize_label, clean_text, format_report_date,
    status_tone, table_label,
)


HEADER_BLUE  = HexColor("#1976D2")
BAND_GREY    = HexColor("#F5F5F5")
MARGIN       = 12 * mm
LANDSCAPE_AT = 8   # columns

_base = getSampleStyleSheet()

TITLE_STYLE = ParagraphStyle(
    "ReportTitle", parent=_base["Title"],
    fontName="Helvetica-Bold", fontSize=20, leading=24,
    alignment=TA_CENTER, spaceAfter=6 * mm,
)
HEADING_STYLE = ParagraphStyle(
    "ReportHeading", parent=_base["Heading2"],
    fontName="Helvetica-Bold", fontSize=14, leading=18,
    spaceBefore=2 * mm, spaceAfter=3 * mm,
)
SECTION_STYLE = ParagraphStyle(
    "ReportSection", parent=_base["Normal"],
    fontName="Helvetica-Bold", fontSize=12, leading=15, spaceAfter=2 * mm,
)
BODY_STYLE = ParagraphStyle(
    "ReportBody", parent=_base["Normal"],
    fontName="Helvetica", fontSize=11, leading=15,
)
STAT_STYLE = ParagraphStyle(
    "ReportStat", parent=BODY_STYLE, fontSize=10, leading=13,
)
NOTE_STYLE = ParagraphStyle(
    "ReportNote", parent=BODY_STYLE,
    fontName="Helvetica-Oblique", fontSize=10, leading=13, spaceBefore=2 * mm,
)
HEAD_CELL_STYLE = ParagraphStyle(
    "HeadCell", parent=_base["Normal"],
    fontName="Helvetica-Bold", fontSize=9, leading=11, textColor=colors.white,
)
BODY_CELL_STYLE = ParagraphStyle(
    "BodyCell", parent=_base["Normal"],
    fontName="Helvetica", fontSize=8, leading=10,
)
TONE_CELL_STYLES = {
    tone: ParagraphStyle(
        f"BodyCell-{tone.value}", parent=BODY_CELL_STYLE,
        fontName="Helvetica-Bold", textColor=HexColor(f"#{hex_}"),
    )
    for tone, hex_ in TONE_HEX.items()
}


def _para(text: str, style: ParagraphStyle) -> Paragraph:
    return Paragraph(escape(clean_text(text)), style)


# ── Page Setup ─────────────────────────────────────────────────────────────
def page_size_for(columns: List[ColumnConfig]) -> Tuple[float, float]:
    return landscape(A4) if len(columns) > LANDSCAPE_AT else A4


def footer_text(page: int, total_pages: Optional[int] = None) -> str:
    """Footer line; the "of M" part is only present when the total is known."""
    marker = f"Page {page} of {total_pages}" if total_pages else f"Page {page}"
    return f"{marker} | Generated by {APP_NAME}"


def _footer_drawer(total_pages: Optional[int] = None):
    def draw(canvas, doc) -> None:
        canvas.saveState()
        canvas.setFont("Helvetica", 8)
        canvas.drawCentredString(
            doc.pagesize[0] / 2, 7 * mm,
            footer_text(canvas.getPageNumber(), total_pages),
        )
        canvas.restoreState()
    return draw


# ── Building Blocks ────────────────────────────────────────────────────────
def _stats_block(lines: List[str], avail_width: float) -> Table:
    """Lay statistics out in two columns, filled left to right."""
    cells = [_para(text, STAT_STYLE) for text in lines]
    if len(cells) % 2:
        cells.append("")
    rows = [cells[i:i + 2] for i in range(0, len(cells), 2)]
    block = Table(rows, colWidths=[avail_width / 2] * 2, hAlign="LEFT")
    block.setStyle(TableStyle([
        ("LEFTPADDING",   (0, 0), (-1, -1), 0),
        ("TOPPADDING",    (0, 0), (-1, -1), 1),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 1),
    ]))
    return block


def data_table(records: List[dict], columns: List[ColumnConfig],
               avail_width: float) -> Table:
    """Striped table: header row plus one row per record."""
    widths = [col.width or DEFAULT_COLUMN_WIDTH for col in columns]
    scale  = avail_width / sum(widths)

    rows = [[_para(col.header, HEAD_CELL_STYLE) for col in columns]]
    for record in records:
        row = []
        for col in columns:
            style = BODY_CELL_STYLE
            if col.key == "status":
                style = TONE_CELL_STYLES[status_tone(record.get(col.key))]
            row.append(_para(apply_column(col, record.get(col.key)), style))
        rows.append(row)

    table = Table(rows, colWidths=[w * scale for w in widths], repeatRows=1, splitInRow=1)
    table.setStyle(TableStyle([
        ("BACKGROUND",     (0, 0), (-1, 0),  HEADER_BLUE),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, BAND_GREY]),
        ("VALIGN",         (0, 0), (-1, -1), "TOP"),
        ("LINEBELOW",      (0, 0), (-1, 0),  0.5, HEADER_BLUE),
        ("TOPPADDING",     (0, 0), (-1, -1), 3),
        ("BOTTOMPADDING",  (0, 0), (-1, -1), 3),
    ]))
    return table


def capped_rows(table: DataTable, limit: int) -> Tuple[List[dict], int]:
    """First `limit` records and the number of records left out."""
    shown = table.data[:limit]
    return shown, len(table.data) - len(shown)


# ── Story ──────────────────────────────────────────────────────────────────
def _single_story(job: NormalizedJob, table: DataTable, avail_width: float) -> list:
    story = [
        _para(job.title, TITLE_STYLE),
        _para(f"{capitalize_label(table.department)} Department", HEADING_STYLE),
        _para(f"Classification: {capitalize_label(table.classification)}", BODY_STYLE),
        _para(f"Generated: {format_report_date()}", BODY_STYLE),
        _para(f"Total Items: {len(table.data)}", BODY_STYLE),
        Spacer(1, 5 * mm),
    ]
    if job.include_stats:
        story += [
            _para("INVENTORY STATISTICS", SECTION_STYLE),
            _stats_block(stats_lines(table.stats), avail_width),
            Spacer(1, 6 * mm),
        ]
    if job.columns:
        story.append(data_table(table.data, job.columns, avail_width))
    return story


def _multi_story(job: NormalizedJob, avail_width: float) -> list:
    tables = job.tables
    story = [
        _para(job.title, TITLE_STYLE),
        _para(f"Generated: {format_report_date()}", BODY_STYLE),
        _para(f"Total Tables: {len(tables)}", BODY_STYLE),
        Spacer(1, 5 * mm),
    ]
    if job.include_stats:
        totals: TableStats = aggregate_stats(tables)
        story += [
            _para("SUMMARY STATISTICS", HEADING_STYLE),
            _stats_block(stats_lines(totals, always_maintenance=True), avail_width),
            Spacer(1, 6 * mm),
        ]

    story.append(_para("TABLE BREAKDOWN", HEADING_STYLE))
    for table in tables:
        story.append(_para(f"{table_label(table)}: {len(table.data)} items", STAT_STYLE))
    story.append(Spacer(1, 6 * mm))

    for table in tables:
        story.append(CondPageBreak(PDF_PAGE_BREAK_THRESHOLD_MM * mm))
        story.append(_para(table_label(table), HEADING_STYLE))

        shown, omitted = capped_rows(table, PDF_MAX_ROWS_PER_TABLE)
        if job.columns:
            story.append(data_table(shown, job.columns, avail_width))
        if omitted:
            story.append(_para(
                f"Note: Showing first {len(shown)} of {len(table.data)} items. "
                f"Full data available in Excel export.",
                NOTE_STYLE,
            ))
        story.append(Spacer(1, 6 * mm))
    return story


def build_story(job: NormalizedJob, page_size: Optional[Tuple[float, float]] = None) -> list:
    """Flowables for the whole document, without page decorations."""
    page_size   = page_size or page_size_for(job.columns)
    avail_width = page_size[0] - 2 * MARGIN

    if len(job.tables) == 1:
        return _single_story(job, job.tables[0], avail_width)
    if job.tables:
        return _multi_story(job, avail_width)
    return [
        _para(job.title, TITLE_STYLE),
        _para(f"Generated: {format_report_date()}", BODY_STYLE),
    ]


# ── Public API ─────────────────────────────────────────────────────────────
def _build(job: NormalizedJob, page_size: Tuple[float, float],
           total_pages: Optional[int] = None) -> Tuple[bytes, int]:
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer, pagesize=page_size,
        leftMargin=MARGIN, rightMargin=MARGIN,
        topMargin=MARGIN, bottomMargin=15 * mm,
        title=clean_text(job.title), author=APP_NAME,
    )
    draw = _footer_drawer(total_pages)
    doc.build(build_story(job, page_size), onFirstPage=draw, onLaterPages=draw)
    return buffer.getvalue(), doc.page


def render(job: NormalizedJob) -> bytes:
    """
    Render the job as a paginated PDF and return its bytes.

    Single-table reports are laid out twice so the footer can read
    "Page N of M"; multi-table reports print "Page N".
    """
    page_size = page_size_for(job.columns)
    payload, page_count = _build(job, page_size)
    if len(job.tables) == 1:
        payload, _ = _build(job, page_size, total_pages=page_count)
    return payload
