"""
frontend/api_client.py

HTTP client for the MediTrack export service.
Wraps the /health and /export endpoints with requests.

All methods return Python dicts / Paths or raise APIError on failure.
"""

import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests
from loguru import logger


_FILENAME_RE = re.compile(r'filename\*?=(?:UTF-8\'\')?"?([^";]+)"?', re.IGNORECASE)


class APIError(Exception):
    """Raised when the export service returns an error response."""
    def __init__(self, status_code: int, detail: str):
        self.status_code = status_code
        self.detail      = detail
        super().__init__(f"HTTP {status_code}: {detail}")


class ExportClient:
    """
    HTTP client for the export service.

    Usage:
        client = ExportClient(base_url="http://localhost:8000")
        path = client.export(
            {"format": "csv", "title": "Medicines", "tables": [...]},
            dest_dir=Path("downloads"),
        )
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout:  int = 120,
        session:  Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout  = timeout
        self._session = session or requests.Session()

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _raise_for_status(self, response: requests.Response):
        """Raise APIError with parsed detail if response is an error."""
        if response.status_code >= 400:
            try:
                detail = response.json().get("detail", response.text)
            except ValueError:
                detail = response.text
            raise APIError(response.status_code, str(detail))

    def _get_json(self, path: str, timeout: int) -> Dict[str, Any]:
        try:
            resp = self._session.get(self._url(path), timeout=timeout)
        except requests.RequestException as e:
            raise APIError(0, f"Backend unreachable: {e}")
        self._raise_for_status(resp)
        return resp.json()

    # ── Health ─────────────────────────────────────────────────────────────
    def get_health(self) -> Dict[str, Any]:
        """GET /health/ — liveness check."""
        return self._get_json("/health/", timeout=5)

    # ── Metadata ───────────────────────────────────────────────────────────
    def list_formats(self) -> List[Dict[str, str]]:
        """GET /export/formats"""
        return self._get_json("/export/formats", timeout=10).get("formats", [])

    def inventory_columns(self) -> List[Dict[str, Any]]:
        """GET /export/columns/inventory"""
        return self._get_json("/export/columns/inventory", timeout=10).get("columns", [])

    # ── Export ─────────────────────────────────────────────────────────────
    def export(self, payload: Dict[str, Any], dest_dir: Path) -> Path:
        """
        POST /export/ and save the returned file into dest_dir.

        The saved name comes from the Content-Disposition header, falling
        back to payload["filename"].
        """
        try:
            resp = self._session.post(
                self._url("/export/"),
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise APIError(0, f"Export request failed: {e}")
        self._raise_for_status(resp)

        filename = self._filename_from(resp) or payload.get("filename") or "export"
        dest_dir = Path(dest_dir)
        dest_dir.mkdir(parents=True, exist_ok=True)
        out_path = dest_dir / Path(filename).name
        out_path.write_bytes(resp.content)

        logger.info(f"Downloaded export: {out_path} ({len(resp.content)} bytes)")
        return out_path

    @staticmethod
    def _filename_from(response: requests.Response) -> Optional[str]:
        disposition = response.headers.get("content-disposition", "")
        match = _FILENAME_RE.search(disposition)
        return match.group(1) if match else None
