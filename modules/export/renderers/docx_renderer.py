"""
modules/export/renderers/docx_renderer.py

Word document renderer (python-docx).

Structure:
- Running header: "<APP_NAME> - Healthcare Management System"
- Footer: "Generated on <date> | Page <n>" with a live PAGE field
- Title (Title style, blue) and generation line
- Single table: optional "Inventory Statistics" heading + colour-coded
  stats line, then one real Word table
- Multi table: "Executive Summary" with aggregate figures, then per table
  a heading, a condensed stats line and the full table (no row cap).
  Both stats sections are always present in multi mode.

All tables come from add_data_table: blue header row with white bold
text, zebra-striped body rows, status cells coloured by tone.
"""

import io
from typing import List

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Inches, Pt, RGBColor

from config.settings import APP_TAGLINE
from models.schemas import ColumnConfig, TableStats
from modules.export.assembler import NormalizedJob, aggregate_stats
from modules.export.formatters import (
    TONE_HEX, StatusTone, apply_column, capitalize_label, clean_text, count_tone,
    format_report_date, status_tone,
)


BRAND_BLUE  = "1E40AF"
MUTED_GREY  = "666666"
STRIPE_FILL = "F8FAFC"


def _rgb(hex_color: str) -> RGBColor:
    return RGBColor.from_string(hex_color.upper())


# ── Low-level Helpers ──────────────────────────────────────────────────────
def _set_cell_background(cell, hex_color: str):
    """Set DOCX table cell background color using XML manipulation."""
    tc   = cell._tc
    tcPr = tc.get_or_add_tcPr()
    shd  = OxmlElement("w:shd")
    shd.set(qn("w:val"),   "clear")
    shd.set(qn("w:color"), "auto")
    shd.set(qn("w:fill"),  hex_color)
    tcPr.append(shd)


def _add_page_field(paragraph):
    """Append a PAGE field so Word fills in the current page number."""
    run = paragraph.add_run()
    fldChar1 = OxmlElement("w:fldChar")
    fldChar1.set(qn("w:fldCharType"), "begin")

    instrText = OxmlElement("w:instrText")
    instrText.set(qn("xml:space"), "preserve")
    instrText.text = "PAGE"

    fldChar2 = OxmlElement("w:fldChar")
    fldChar2.set(qn("w:fldCharType"), "end")

    run._r.append(fldChar1)
    run._r.append(instrText)
    run._r.append(fldChar2)
    return run


def _add_run(paragraph, text: str, size: float, color: str = None, bold: bool = False):
    run = paragraph.add_run(clean_text(text))
    run.font.size = Pt(size)
    run.bold      = bold
    if color:
        run.font.color.rgb = _rgb(color)
    return run


def _add_heading(doc, text: str, level: int):
    heading = doc.add_heading(clean_text(text), level=level)
    for run in heading.runs:
        run.font.color.rgb = _rgb(BRAND_BLUE)
    return heading


# ── Page Furniture ─────────────────────────────────────────────────────────
def _setup_page(doc, generated: str) -> None:
    section = doc.sections[0]
    section.top_margin    = Inches(1)
    section.bottom_margin = Inches(1)
    section.left_margin   = Inches(1)
    section.right_margin  = Inches(1)

    header_para = section.header.paragraphs[0]
    header_para.alignment = WD_ALIGN_PARAGRAPH.CENTER
    _add_run(header_para, APP_TAGLINE, 10, BRAND_BLUE, bold=True)

    footer_para = section.footer.paragraphs[0]
    footer_para.alignment = WD_ALIGN_PARAGRAPH.CENTER
    _add_run(footer_para, f"Generated on {generated} | Page ", 9, MUTED_GREY)
    _add_page_field(footer_para)


def _add_title_block(doc, title: str, generated: str) -> None:
    title_para = doc.add_heading(clean_text(title), level=0)
    title_para.alignment = WD_ALIGN_PARAGRAPH.CENTER
    for run in title_para.runs:
        run.font.color.rgb = _rgb(BRAND_BLUE)

    info = doc.add_paragraph()
    info.alignment = WD_ALIGN_PARAGRAPH.CENTER
    info.paragraph_format.space_after = Pt(24)
    _add_run(info, f"Generated on: {generated}", 11, MUTED_GREY)


# ── Statistics ─────────────────────────────────────────────────────────────
def _add_stats_line(doc, stats: TableStats):
    """Pipe-separated counters; each span coloured by whether it needs attention."""
    para = doc.add_paragraph()
    para.paragraph_format.space_after = Pt(10)
    _add_run(para, f"Total Items: {stats.total_items} | ", 10)
    _add_run(para, f"Low Stock: {stats.low_stock_items} | ", 10,
             TONE_HEX[count_tone(stats.low_stock_items, StatusTone.WARNING)])
    _add_run(para, f"Out of Stock: {stats.out_of_stock_items} | ", 10,
             TONE_HEX[count_tone(stats.out_of_stock_items, StatusTone.DANGER)])
    _add_run(para, f"Expired: {stats.expired_items}", 10,
             TONE_HEX[count_tone(stats.expired_items, StatusTone.DANGER)])
    return para


def _add_summary_figures(doc, totals: TableStats) -> None:
    attention = totals.low_stock_items + totals.out_of_stock_items
    figures = [
        (f"Total Items Across All Departments: {totals.total_items}", 11, None),
        (f"Items Requiring Attention: {attention}", 11,
         TONE_HEX[count_tone(attention, StatusTone.DANGER)]),
        (f"Low Stock Items: {totals.low_stock_items}", 10,
         TONE_HEX[count_tone(totals.low_stock_items, StatusTone.WARNING)]),
        (f"Out of Stock Items: {totals.out_of_stock_items}", 10,
         TONE_HEX[count_tone(totals.out_of_stock_items, StatusTone.DANGER)]),
        (f"Expired Items: {totals.expired_items}", 10,
         TONE_HEX[count_tone(totals.expired_items, StatusTone.DANGER)]),
        (f"Maintenance Required: {totals.maintenance_items or 0}", 10,
         TONE_HEX[count_tone(totals.maintenance_items or 0, StatusTone.WARNING)]),
    ]
    for text, size, color in figures:
        para = doc.add_paragraph()
        para.paragraph_format.space_after = Pt(4)
        _add_run(para, text, size, color)


# ── Tables ─────────────────────────────────────────────────────────────────
def add_data_table(doc, records: List[dict], columns: List[ColumnConfig]):
    """Build one Word table from a row set. Shared by single and multi mode."""
    if not columns:
        return None

    table = doc.add_table(rows=1, cols=len(columns))
    table.style   = "Table Grid"
    table.autofit = True

    for cell, col in zip(table.rows[0].cells, columns):
        para = cell.paragraphs[0]
        para.alignment = WD_ALIGN_PARAGRAPH.CENTER
        _add_run(para, col.header, 10, "FFFFFF", bold=True)
        _set_cell_background(cell, BRAND_BLUE)

    for index, record in enumerate(records):
        fill = "FFFFFF" if index % 2 == 0 else STRIPE_FILL
        for cell, col in zip(table.add_row().cells, columns):
            raw  = record.get(col.key)
            text = apply_column(col, raw)
            color = TONE_HEX[status_tone(raw)] if col.key == "status" else "000000"
            _add_run(cell.paragraphs[0], text, 9, color)
            _set_cell_background(cell, fill)

    doc.add_paragraph()
    return table


# ── Public API ─────────────────────────────────────────────────────────────
def render(job: NormalizedJob) -> bytes:
    """Render the job as a .docx document and return its bytes."""
    doc       = Document()
    generated = format_report_date()

    _setup_page(doc, generated)
    _add_title_block(doc, job.title, generated)

    tables = job.tables
    if len(tables) == 1:
        table = tables[0]
        if job.include_stats:
            _add_heading(doc, "Inventory Statistics", level=2)
            _add_stats_line(doc, table.stats)
        add_data_table(doc, table.data, job.columns)

    elif tables:
        _add_heading(doc, "Executive Summary", level=1)
        para = doc.add_paragraph()
        _add_run(para, f"Tables Included: {len(tables)}", 11)
        _add_summary_figures(doc, aggregate_stats(tables))

        for table in tables:
            _add_heading(
                doc,
                f"{capitalize_label(table.department)} Department - "
                f"{capitalize_label(table.classification)}",
                level=2,
            )
            _add_stats_line(doc, table.stats)
            add_data_table(doc, table.data, job.columns)

    buffer = io.BytesIO()
    doc.save(buffer)
    return buffer.getvalue()
