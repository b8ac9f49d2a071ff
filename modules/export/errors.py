"""
modules/export/errors.py

Exceptions raised by the export pipeline.
Library and formatter failures are not wrapped; they propagate as-is.
"""


class ExportError(Exception):
    """Base class for export pipeline errors."""


class UnsupportedExportFormatError(ExportError, ValueError):
    """Raised when a job names a format no renderer handles."""
    def __init__(self, export_format):
        self.export_format = export_format
        super().__init__(f"Unsupported export format: {export_format!r}")
