"""
modules/export/formatters.py

Pure, stateless formatting helpers shared by every renderer.

  apply_column        — raw cell value → display string for one column
  format_status       — "out_of_stock" → "Out Of Stock"
  status_tone         — status value → semantic tone (warning/danger/positive)
  format_report_date  — "October 19, 2026 at 02:30 PM"
  capitalize_label    — "medical" → "Medical" (rest of the word untouched)
  table_label         — "Medical - Medicines"
  classification_icon — emoji shown next to a classification in titles
  make_export_filename — "{prefix}_{2026-10-19T14-30-00}"
  clean_text          — drop control characters XML documents cannot hold

Nothing here holds state; renderers translate tones into their own
colour types via TONE_HEX.
"""

import re
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from models.schemas import ColumnConfig, DataTable


# ── Status ─────────────────────────────────────────────────────────────────
class StatusTone(str, Enum):
    WARNING  = "warning"
    DANGER   = "danger"
    POSITIVE = "positive"


TONE_HEX = {
    StatusTone.WARNING:  "D97706",   # amber
    StatusTone.DANGER:   "DC2626",   # red
    StatusTone.POSITIVE: "059669",   # green
}

STATUS_TONES = {
    "low_stock":    StatusTone.WARNING,
    "out_of_stock": StatusTone.DANGER,
    "expired":      StatusTone.DANGER,
    "maintenance":  StatusTone.WARNING,
}

_WORD_START = re.compile(r"\b\w")
_ILLEGAL_XML_CHARS = re.compile(r"[\000-\010]|[\013-\014]|[\016-\037]")


def format_status(status: Any) -> str:
    """Replace underscores with spaces and upper-case the first letter of each word."""
    if status is None or status == "":
        status = "Unknown"
    text = str(status).replace("_", " ")
    return _WORD_START.sub(lambda m: m.group(0).upper(), text)


def status_tone(value: Any) -> StatusTone:
    """
    Map a status to its semantic tone.
    Accepts the raw enum value ("low_stock") or its humanized form ("Low Stock").
    """
    if value is None:
        return StatusTone.POSITIVE
    key = str(value).strip().lower().replace(" ", "_")
    return STATUS_TONES.get(key, StatusTone.POSITIVE)


def count_tone(count: int, nonzero: StatusTone) -> StatusTone:
    """Tone for a statistics counter: `nonzero` when count > 0, else positive."""
    return nonzero if count and count > 0 else StatusTone.POSITIVE


# ── Cells ──────────────────────────────────────────────────────────────────
def apply_column(column: ColumnConfig, raw_value: Any) -> str:
    """
    Format one raw cell value for display.

    1. column.formatter → used verbatim
    2. key == "status"  → humanized status
    3. otherwise        → str(value), None becomes ""
    """
    if column.formatter is not None:
        return column.formatter(raw_value)
    if column.key == "status":
        return format_status(raw_value)
    if raw_value is None:
        return ""
    return str(raw_value)


def format_row(row: dict, columns) -> list:
    return [apply_column(col, row.get(col.key)) for col in columns]


# ── Labels ─────────────────────────────────────────────────────────────────
def capitalize_label(text: Optional[str]) -> str:
    if not text:
        return ""
    return text[0].upper() + text[1:]


def table_label(table: DataTable, separator: str = " - ") -> str:
    return f"{capitalize_label(table.department)}{separator}{capitalize_label(table.classification)}"


def classification_icon(classification: Optional[str]) -> str:
    return {
        "medicines": "💊",
        "supplies":  "🧰",
        "equipment": "🔬",
    }.get((classification or "").lower(), "📦")


# ── Dates & Filenames ──────────────────────────────────────────────────────
def format_report_date(moment: Optional[datetime] = None) -> str:
    """Long US-style timestamp used in every report header."""
    moment = moment or datetime.now()
    return f"{moment:%B} {moment.day}, {moment.year} at {moment:%I:%M %p}"


def make_export_filename(prefix: str, moment: Optional[datetime] = None) -> str:
    """
    Base filename with an ISO timestamp suffix, colons and dots replaced.
    Example: make_export_filename("medical_Medicines_inventory")
             → "medical_Medicines_inventory_2026-10-19T14-30-00"
    """
    moment = moment or datetime.now(timezone.utc)
    stamp  = moment.isoformat(timespec="seconds")[:19]
    return f"{prefix}_{re.sub(r'[:.]', '-', stamp)}"


# ── Text Hygiene ───────────────────────────────────────────────────────────
def clean_text(text: Any) -> Any:
    """
    Strip control characters that XLSX/DOCX/PDF markup cannot carry
    (e.g. a vertical tab pasted from a spreadsheet). Tab, newline and
    carriage return are kept. Non-strings pass through untouched.
    """
    if isinstance(text, str):
        return _ILLEGAL_XML_CHARS.sub("", text)
    return text
