"""
Global configuration for the MediTrack export service.
All constants, paths, and layout tunables live here.
Import this in every module instead of hardcoding values.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

# ── Paths ──────────────────────────────────────────────────────────────────
PROJECT_ROOT = Path(os.getenv("PROJECT_ROOT", ".")).resolve()
LOG_DIR      = Path(os.getenv("LOG_DIR",    "./logs"))
OUTPUT_DIR   = Path(os.getenv("OUTPUT_DIR", "./data/exports"))

# Ensure all directories exist at import time
for _dir in [LOG_DIR, OUTPUT_DIR]:
    _dir.mkdir(parents=True, exist_ok=True)

# ── Branding ───────────────────────────────────────────────────────────────
APP_NAME    = os.getenv("APP_NAME", "MediTrack")
APP_TAGLINE = f"{APP_NAME} - Healthcare Management System"

# ── Spreadsheet ────────────────────────────────────────────────────────────
DEFAULT_COLUMN_WIDTH = 15    # characters, used when a column has no width
SHEET_NAME_MAX_LEN   = 31    # Excel hard limit

# ── PDF ────────────────────────────────────────────────────────────────────
PDF_MAX_ROWS_PER_TABLE      = int(os.getenv("PDF_MAX_ROWS_PER_TABLE", "50"))
PDF_PAGE_BREAK_THRESHOLD_MM = float(os.getenv("PDF_PAGE_BREAK_THRESHOLD_MM", "100"))

# ── Chart Export ───────────────────────────────────────────────────────────
CHART_CAPTURE_SETTLE_SEC = float(os.getenv("CHART_CAPTURE_SETTLE_SEC", "0.5"))

# ── Logging ────────────────────────────────────────────────────────────────
LOG_LEVEL = "DEBUG" if os.getenv("DEBUG", "False") == "True" else "INFO"

# ── API ────────────────────────────────────────────────────────────────────
API_HOST     = os.getenv("API_HOST",    "0.0.0.0")
API_PORT     = int(os.getenv("API_PORT", "8000"))
API_RELOAD   = os.getenv("API_RELOAD",  "true").lower() == "true"
PROJECT_NAME = f"{APP_NAME} Export Service"
VERSION      = "1.0.0"
