"""
tests/conftest.py

Shared fixtures for export tests.
Provides sample inventory rows, tables, jobs, an ExportEngine writing
into a temporary directory, and a FastAPI TestClient whose export
engine dependency is overridden to use that engine.
"""

from typing import Any, Dict, List

import pytest
from fastapi.testclient import TestClient

from models.schemas import ColumnConfig, DataTable, ExportJob, TableStats
from modules.export.columns import INVENTORY_COLUMNS


# ── Sample Data ────────────────────────────────────────────────────────────
def make_item(code: str = "MED-001", name: str = "Paracetamol",
              status: str = "low_stock", **overrides) -> Dict[str, Any]:
    item = {
        "code":                code,
        "generic_name":        name,
        "brand_name":          "Biogesic",
        "category":            "Analgesic",
        "stock_quantity":      12,
        "stock_threshold":     20,
        "unit_of_measurement": "box",
        "expiration_date":     "2027-01-31",
        "status":              status,
        "notes":               None,
        "created_at":          "2026-03-05T08:00:00Z",
        "updated_at":          "2026-10-19T14:30:00Z",
    }
    item.update(overrides)
    return item


def make_items(count: int, prefix: str = "MED") -> List[Dict[str, Any]]:
    return [
        make_item(code=f"{prefix}-{i:03d}", name=f"Item {i}", status="active")
        for i in range(count)
    ]


@pytest.fixture
def item_factory():
    return make_item


@pytest.fixture
def items_factory():
    return make_items


@pytest.fixture
def name_status_columns():
    return [
        ColumnConfig("generic_name", "Generic Name", 25),
        ColumnConfig("status",       "Status",       15),
    ]


@pytest.fixture
def medicines_table():
    return DataTable(
        id="t1",
        department="medical",
        classification="Medicines",
        data=[make_item()],
        stats=TableStats(total_items=1, low_stock_items=1),
    )


@pytest.fixture
def multi_tables():
    return [
        DataTable(
            id="t1", department="medical", classification="Medicines",
            data=make_items(3, "MED"),
            stats=TableStats(total_items=3, low_stock_items=2, out_of_stock_items=1),
        ),
        DataTable(
            id="t2", department="dental", classification="Supplies",
            data=make_items(2, "DEN"),
            stats=TableStats(total_items=2, expired_items=1, maintenance_items=4),
        ),
    ]


@pytest.fixture
def single_job(medicines_table, name_status_columns):
    return ExportJob(
        format="csv",
        filename="medical_Medicines_inventory",
        title="Medicines Report",
        columns=name_status_columns,
        tables=[medicines_table],
    )


@pytest.fixture
def multi_job(multi_tables):
    return ExportJob(
        format="spreadsheet",
        filename="multi_table_inventory_export",
        title="Multi-Table Inventory Report",
        columns=list(INVENTORY_COLUMNS),
        include_stats=True,
        tables=multi_tables,
    )


# ── Engine / API ───────────────────────────────────────────────────────────
@pytest.fixture
def engine(tmp_path, monkeypatch):
    """ExportEngine whose default OUTPUT_DIR is the test's tmp_path."""
    monkeypatch.setattr("modules.export.export_engine.OUTPUT_DIR", tmp_path)
    from modules.export.export_engine import ExportEngine
    return ExportEngine()


@pytest.fixture
def test_client(tmp_path):
    """
    FastAPI TestClient with the export engine overridden.
    Uses the real app from api.main; files land in tmp_path.
    """
    from api.main import app
    from api.dependencies import get_export_engine
    from modules.export.export_engine import ExportEngine

    export_engine = ExportEngine(output_dir=tmp_path)
    app.dependency_overrides[get_export_engine] = lambda: export_engine

    client = TestClient(app)
    yield client

    app.dependency_overrides = {}
