"""
modules/export/export_engine.py

Export Orchestrator for the MediTrack export service.

Single entry point that turns an ExportJob into a file on disk:
  1. resolve job.format (aliases allowed) — unknown formats fail fast
  2. normalize the job into a canonical table list (assembler)
  3. dispatch to the matching renderer, which returns bytes
  4. write the bytes atomically to OUTPUT_DIR/export-XXXX/{filename}.{extension}
     (one fresh directory per export; discard_export() removes it)

Formats:
  spreadsheet — .xlsx (openpyxl)
  pdf         — .pdf  (reportlab)
  csv         — .csv  (stdlib csv)
  document    — .docx (python-docx)

Renderer and formatter exceptions propagate unchanged: no retry,
no fallback format, no partial file.
"""

import os
import re
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

from loguru import logger

from config.settings import OUTPUT_DIR
from models.schemas import (
    FORMAT_ALIASES, ExportFormat, ExportJob, ExportResult, validate_columns,
)
from modules.export.assembler import normalize
from modules.export.errors import UnsupportedExportFormatError
from modules.export.renderers import (
    csv_renderer, docx_renderer, pdf_renderer, xlsx_renderer,
)


RENDERERS = {
    ExportFormat.SPREADSHEET: xlsx_renderer,
    ExportFormat.PDF:         pdf_renderer,
    ExportFormat.CSV:         csv_renderer,
    ExportFormat.DOCUMENT:    docx_renderer,
}


def resolve_format(value: Union[str, ExportFormat]) -> ExportFormat:
    """Map a requested format (canonical name or alias) to an ExportFormat."""
    if isinstance(value, ExportFormat):
        return value
    key = str(value).lower().strip()
    if key in FORMAT_ALIASES:
        return FORMAT_ALIASES[key]
    try:
        return ExportFormat(key)
    except ValueError:
        raise UnsupportedExportFormatError(value) from None


def _safe_basename(name: str) -> str:
    """Strip path separators and unsafe characters; keep dashes, dots, underscores."""
    safe = re.sub(r"[^\w\-. ]", "_", name or "").strip(" .")
    return safe or "export"


def write_atomic(payload: bytes, destination: Path) -> None:
    """Write to a temp file beside `destination`, then rename over it."""
    fd, tmp_name = tempfile.mkstemp(dir=str(destination.parent), suffix=".part")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(payload)
        os.replace(tmp_name, destination)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


def save_export(payload: bytes, out_dir: Path, filename: str) -> Path:
    """
    Write `payload` as out_dir/export-XXXX/{filename}.
    Every call gets its own directory, so concurrent exports that share
    a filename never overwrite each other.
    """
    out_dir.mkdir(parents=True, exist_ok=True)
    job_dir  = Path(tempfile.mkdtemp(prefix="export-", dir=str(out_dir)))
    out_path = job_dir / filename
    try:
        write_atomic(payload, out_path)
    except BaseException:
        job_dir.rmdir()
        raise
    return out_path


def discard_export(result: ExportResult) -> None:
    """Delete an exported file and its per-export directory once served."""
    result.file_path.unlink(missing_ok=True)
    job_dir = result.file_path.parent
    if job_dir.is_dir() and not any(job_dir.iterdir()):
        job_dir.rmdir()
    logger.debug(f"Discarded export: {result.filename}")


# ── Public API ─────────────────────────────────────────────────────────────
class ExportEngine:
    """
    Renders ExportJobs to files.

    Usage:
        engine = ExportEngine()
        result = engine.export(ExportJob(
            format="csv",
            filename=make_export_filename("medical_Medicines_inventory"),
            title="Medicines Report",
            columns=INVENTORY_COLUMNS,
            tables=[table],
        ))
        print(result.file_path)

    Each call builds its own workbook/document; instances hold no
    per-export state and may be shared across concurrent requests.
    """

    def __init__(self, output_dir: Optional[Path] = None):
        self.output_dir = Path(output_dir) if output_dir else None

    def render(self, job: ExportJob) -> bytes:
        """Render a job to bytes without touching the filesystem."""
        export_format = resolve_format(job.format)
        validate_columns(job.columns)
        normalized = normalize(job, export_format)
        return RENDERERS[export_format].render(normalized)

    def export(self, job: ExportJob) -> ExportResult:
        """
        Render `job` and save it as {filename}.{extension} inside a fresh
        per-export directory under the output directory.

        Raises:
            UnsupportedExportFormatError: job.format is not a known format
                (raised before any rendering; nothing is written).
            Any exception from a column formatter or document library,
            unchanged.
        """
        export_format = resolve_format(job.format)

        logger.info(
            f"ExportEngine: generating {export_format.value.upper()} — "
            f"'{job.title or 'untitled'}'"
        )

        out_dir  = self.output_dir or OUTPUT_DIR
        filename = f"{_safe_basename(job.filename)}.{export_format.extension}"

        try:
            payload  = self.render(job)
            out_path = save_export(payload, out_dir, filename)
        except Exception as e:
            logger.error(f"Export failed ({export_format.value}): {e}")
            raise

        size = out_path.stat().st_size
        logger.info(f"{export_format.extension.upper()} exported: {filename} ({size} bytes)")

        return ExportResult(
            file_path=out_path,
            format=export_format,
            filename=filename,
            file_size_bytes=size,
            created_at=datetime.now(timezone.utc).isoformat(),
        )


def export_data(job: ExportJob, output_dir: Optional[Path] = None) -> ExportResult:
    """Module-level convenience wrapper around ExportEngine.export()."""
    return ExportEngine(output_dir=output_dir).export(job)
