"""
tests/test_assembler.py

Tests for job normalization (multi-table vs legacy shape) and
cross-table statistics aggregation.
"""

import pytest

from models.schemas import (
    ColumnConfig, DataTable, ExportFormat, ExportJob, TableStats, validate_columns,
)
from modules.export.assembler import (
    aggregate_stats, normalize, normalize_tables, stats_lines,
)


def _job(**kwargs):
    base = dict(format="csv", filename="f", title="T")
    base.update(kwargs)
    return ExportJob(**base)


class TestNormalizeTables:

    def test_tables_pass_through(self, multi_tables):
        tables = normalize_tables(_job(tables=multi_tables))
        assert tables == multi_tables
        assert tables is not multi_tables

    def test_legacy_shape_synthesizes_one_table(self):
        stats = TableStats(total_items=1, low_stock_items=1)
        tables = normalize_tables(_job(
            data=[{"code": "A"}], department="medical",
            classification="Medicines", stats=stats,
        ))
        assert len(tables) == 1
        assert tables[0].id == "medical_Medicines"
        assert tables[0].stats is stats
        assert tables[0].data == [{"code": "A"}]

    def test_legacy_without_stats_gets_zero_stats(self):
        tables = normalize_tables(_job(data=[], department="d", classification="c"))
        assert tables[0].stats == TableStats()

    def test_tables_take_precedence_over_legacy(self, multi_tables):
        tables = normalize_tables(_job(
            tables=multi_tables, data=[{}], department="x", classification="y",
        ))
        assert [t.id for t in tables] == ["t1", "t2"]

    def test_incomplete_legacy_is_empty(self):
        assert normalize_tables(_job(data=[{}], department="medical")) == []
        assert normalize_tables(_job()) == []

    def test_empty_tables_list_falls_back_to_legacy(self):
        tables = normalize_tables(_job(tables=[], data=[], department="d", classification="c"))
        assert tables[0].id == "d_c"


class TestNormalize:

    def test_carries_job_fields(self, multi_job):
        normalized = normalize(multi_job, ExportFormat.SPREADSHEET)
        assert normalized.format is ExportFormat.SPREADSHEET
        assert normalized.title == "Multi-Table Inventory Report"
        assert normalized.include_stats is True
        assert normalized.is_multi_table


class TestAggregateStats:

    def test_additive_counts(self):
        tables = [
            DataTable("a", "d", "c", stats=TableStats(total_items=2, low_stock_items=2)),
            DataTable("b", "d", "c", stats=TableStats(total_items=0)),
            DataTable("c", "d", "c", stats=TableStats(total_items=9, low_stock_items=5,
                                                       maintenance_items=3)),
        ]
        total = aggregate_stats(tables)
        assert total.low_stock_items == 7
        assert total.total_items == 11
        assert total.maintenance_items == 3

    def test_maintenance_defaults_to_zero(self):
        total = aggregate_stats([DataTable("a", "d", "c")])
        assert total.maintenance_items == 0

    def test_empty(self):
        assert aggregate_stats([]).total_items == 0


class TestStatsLines:

    def test_without_maintenance(self):
        lines = stats_lines(TableStats(total_items=4, expired_items=1))
        assert lines == [
            "Total Items: 4", "Low Stock: 0", "Out of Stock: 0", "Expired: 1",
        ]

    def test_maintenance_when_present_or_forced(self):
        assert stats_lines(TableStats(maintenance_items=2))[-1] == "Maintenance Required: 2"
        assert stats_lines(TableStats(), always_maintenance=True)[-1] == "Maintenance Required: 0"


class TestValidateColumns:

    def test_duplicate_key(self):
        with pytest.raises(ValueError, match="Duplicate"):
            validate_columns([ColumnConfig("a", "A"), ColumnConfig("a", "B")])

    def test_empty_key(self):
        with pytest.raises(ValueError):
            validate_columns([ColumnConfig("", "A")])
