"""
scripts/demo_export.py

Generates sample inventory exports in every format so the output can
be inspected by eye. Writes a single-table and a multi-table export
for each of spreadsheet, pdf, csv and document into OUTPUT_DIR.

Usage:
    python scripts/demo_export.py
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from config.settings import OUTPUT_DIR
from models.schemas import DataTable, ExportFormat, ExportJob, TableStats
from modules.export.columns import INVENTORY_COLUMNS
from modules.export.export_engine import ExportEngine
from modules.export.formatters import make_export_filename


def demo_items(prefix: str, count: int) -> list:
    """Sample inventory rows cycling through every status."""
    statuses = ["active", "low_stock", "out_of_stock", "expired", "maintenance"]
    return [
        {
            "code":                f"{prefix}-{i:03d}",
            "generic_name":        f"Demo Item {i}",
            "brand_name":          "Generic",
            "category":            "General",
            "stock_quantity":      (i * 7) % 40,
            "stock_threshold":     10,
            "unit_of_measurement": "pcs",
            "expiration_date":     "2027-06-30",
            "status":              statuses[i % len(statuses)],
            "notes":               "Check storage, \"cold chain\"" if i % 9 == 0 else None,
            "created_at":          "2026-01-15T09:00:00Z",
            "updated_at":          "2026-10-19T14:30:00Z",
        }
        for i in range(count)
    ]


def demo_stats(rows: list) -> TableStats:
    def count(status):
        return sum(1 for r in rows if r["status"] == status)

    return TableStats(
        total_items=len(rows),
        low_stock_items=count("low_stock"),
        out_of_stock_items=count("out_of_stock"),
        expired_items=count("expired"),
        maintenance_items=count("maintenance"),
    )


def build_tables() -> list:
    tables = []
    for table_id, department, classification, prefix, count in [
        ("t1", "medical",    "Medicines", "MED", 24),
        ("t2", "dental",     "Supplies",  "DEN", 8),
        ("t3", "laboratory", "Equipment", "LAB", 75),
    ]:
        rows = demo_items(prefix, count)
        tables.append(DataTable(
            id=table_id,
            department=department,
            classification=classification,
            data=rows,
            stats=demo_stats(rows),
        ))
    return tables


def main():
    engine = ExportEngine()
    tables = build_tables()

    print("=" * 60)
    print("  MediTrack — Export Demo")
    print("=" * 60)
    print()
    print(f"  Output: {OUTPUT_DIR}")
    print()

    for export_format in ExportFormat:
        single = ExportJob(
            format=export_format,
            filename=make_export_filename("medical_Medicines_inventory"),
            title="Medicines Inventory Report",
            columns=list(INVENTORY_COLUMNS),
            include_stats=True,
            tables=tables[:1],
        )
        multi = ExportJob(
            format=export_format,
            filename=make_export_filename("multi_table_inventory_export"),
            title="Multi-Table Inventory Report",
            columns=list(INVENTORY_COLUMNS),
            include_stats=True,
            tables=tables,
        )
        for job in (single, multi):
            result = engine.export(job)
            print(f"  ✓ {result.filename} ({result.file_size_bytes:,} bytes)")

    print()
    print("  Demo exports complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()
