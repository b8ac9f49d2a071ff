"""
modules/export/chart_export.py

Chart export utility.

Exports a dashboard chart plus its underlying data as PDF or DOCX.
The chart image comes from a caller-supplied `capture` callable that
returns PNG bytes (or None). Before calling it the exporter waits
CHART_CAPTURE_SETTLE_SEC so in-flight animations can finish; this is
a timing heuristic only.

If capture fails or returns nothing, the document carries a note
instead of the image. Everything else propagates to the caller.

Output file: OUTPUT_DIR/export-XXXX/{slug(title)}_chart.{pdf|docx}
"""

import io
import re
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, List, Optional, Union
from xml.sax.saxutils import escape

from docx import Document
from docx.shared import Inches, Pt, RGBColor
from loguru import logger
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.platypus import Image, Paragraph, SimpleDocTemplate, Spacer

from config.settings import CHART_CAPTURE_SETTLE_SEC, OUTPUT_DIR
from models.schemas import ColumnConfig, ExportFormat, ExportResult
from modules.export.errors import UnsupportedExportFormatError
from modules.export.export_engine import resolve_format, save_export
from modules.export.formatters import clean_text
from modules.export.renderers import docx_renderer, pdf_renderer


CHART_FORMATS = (ExportFormat.PDF, ExportFormat.DOCUMENT)

CHART_IMAGE_WIDTH_MM  = 170
CHART_IMAGE_HEIGHT_MM = 90

MISSING_CHART_NOTE = "[Chart visualization could not be captured - please view in application]"


@dataclass
class ChartExportData:
    title:    str
    subtitle: Optional[str] = None
    data:     List[Any] = field(default_factory=list)
    capture:  Optional[Callable[[], Optional[bytes]]] = None


# ── Helpers ────────────────────────────────────────────────────────────────
def chart_filename(title: str, extension: str) -> str:
    """Lower-case slug of the title, e.g. ward_occupancy_q3_chart.pdf."""
    slug = re.sub(r"[^a-z0-9]", "_", title.lower())
    slug = re.sub(r"_+", "_", slug)
    return f"{slug}_chart.{extension}"


def humanize_key(key: str) -> str:
    """Split camelCase and capitalize: bedCount becomes Bed Count."""
    spaced = re.sub(r"([A-Z])", r" \1", key)
    return (spaced[:1].upper() + spaced[1:]).strip()


def columns_from_records(records: List[Any]) -> List[ColumnConfig]:
    """Derive a column schema from the keys of the first record."""
    if not records or not isinstance(records[0], dict):
        return []
    return [ColumnConfig(key=k, header=humanize_key(k)) for k in records[0].keys()]


# ── Exporter ───────────────────────────────────────────────────────────────
class ChartExporter:
    """
    Usage:
        exporter = ChartExporter()
        result = exporter.export("pdf", ChartExportData(
            title="Ward Occupancy",
            data=[{"ward": "A", "bedCount": 12}],
            capture=lambda: png_bytes,
        ))
    """

    def __init__(self, output_dir: Optional[Path] = None,
                 settle_sec: Optional[float] = None):
        self.output_dir = Path(output_dir) if output_dir else None
        self.settle_sec = CHART_CAPTURE_SETTLE_SEC if settle_sec is None else settle_sec

    def capture_image(self, chart: ChartExportData) -> Optional[bytes]:
        """Wait for the chart to settle, then capture it. Failures return None."""
        if chart.capture is None:
            return None
        if self.settle_sec > 0:
            time.sleep(self.settle_sec)
        try:
            image = chart.capture()
            if image:
                ImageReader(io.BytesIO(image)).getSize()
            return image or None
        except Exception as e:
            logger.warning(f"Could not capture chart image: {e}")
            return None

    # ── PDF ────────────────────────────────────────────────────────────────
    def render_pdf(self, chart: ChartExportData, image: Optional[bytes]) -> bytes:
        avail_width = A4[0] - 2 * pdf_renderer.MARGIN
        story = [Paragraph(escape(clean_text(chart.title)), pdf_renderer.TITLE_STYLE)]
        if chart.subtitle:
            story.append(Paragraph(escape(clean_text(chart.subtitle)), pdf_renderer.BODY_STYLE))
            story.append(Spacer(1, 6 * mm))

        if image:
            story.append(Image(
                io.BytesIO(image),
                width=CHART_IMAGE_WIDTH_MM * mm,
                height=CHART_IMAGE_HEIGHT_MM * mm,
            ))
        else:
            story.append(Paragraph(escape(MISSING_CHART_NOTE), pdf_renderer.NOTE_STYLE))
        story.append(Spacer(1, 8 * mm))

        columns = columns_from_records(chart.data)
        if columns:
            story.append(pdf_renderer.data_table(chart.data, columns, avail_width))

        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer, pagesize=A4,
            leftMargin=pdf_renderer.MARGIN, rightMargin=pdf_renderer.MARGIN,
            topMargin=pdf_renderer.MARGIN, bottomMargin=15 * mm,
            title=chart.title,
        )
        doc.build(story)
        return buffer.getvalue()

    # ── DOCX ───────────────────────────────────────────────────────────────
    def render_docx(self, chart: ChartExportData, image: Optional[bytes]) -> bytes:
        doc = Document()
        doc.add_heading(clean_text(chart.title), level=1)

        if chart.subtitle:
            run = doc.add_paragraph().add_run(clean_text(chart.subtitle))
            run.italic = True
            run.font.size = Pt(12)
            run.font.color.rgb = RGBColor(0x66, 0x66, 0x66)

        heading = doc.add_paragraph().add_run("Chart Visualization")
        heading.bold = True
        heading.font.size = Pt(12)

        if image:
            doc.add_picture(io.BytesIO(image), width=Inches(6))
        else:
            note = doc.add_paragraph().add_run(
                "Please view the interactive chart in the web application "
                "for visual representation of this data."
            )
            note.italic = True
            note.font.color.rgb = RGBColor(0x66, 0x66, 0x66)

        if chart.data:
            summary = doc.add_paragraph().add_run("Data Summary")
            summary.bold = True
            summary.font.size = Pt(14)

            columns = columns_from_records(chart.data)
            if columns:
                docx_renderer.add_data_table(doc, chart.data, columns)
            else:
                for item in chart.data:
                    doc.add_paragraph(clean_text(str(item)))

        buffer = io.BytesIO()
        doc.save(buffer)
        return buffer.getvalue()

    # ── Public API ─────────────────────────────────────────────────────────
    def export(self, export_format: Union[str, ExportFormat],
               chart: ChartExportData) -> ExportResult:
        """
        Export `chart` as PDF or DOCX.

        Raises:
            UnsupportedExportFormatError: format other than pdf/document
            ValueError: chart has no title
        """
        resolved = resolve_format(export_format)
        if resolved not in CHART_FORMATS:
            raise UnsupportedExportFormatError(export_format)
        if not chart or not chart.title:
            raise ValueError("Missing required export data (title)")

        logger.info(f"ChartExporter: generating {resolved.value.upper()} — '{chart.title}'")

        image = self.capture_image(chart)
        if resolved is ExportFormat.PDF:
            payload = self.render_pdf(chart, image)
        else:
            payload = self.render_docx(chart, image)

        out_dir  = self.output_dir or OUTPUT_DIR
        filename = chart_filename(chart.title, resolved.extension)
        out_path = save_export(payload, out_dir, filename)

        logger.info(f"Chart exported: {filename}")
        return ExportResult(
            file_path=out_path,
            format=resolved,
            filename=filename,
            file_size_bytes=out_path.stat().st_size,
            created_at=datetime.now(timezone.utc).isoformat(),
        )
