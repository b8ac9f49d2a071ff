"""
tests/test_xlsx_renderer.py

Spreadsheet renderer tests. Workbooks are rendered to bytes and read
back with openpyxl.
"""

import io

import openpyxl
import pytest

from models.schemas import DataTable, ExportFormat, ExportJob
from modules.export.assembler import normalize
from modules.export.renderers import xlsx_renderer
from modules.export.renderers.xlsx_renderer import safe_sheet_name


def _workbook(job: ExportJob):
    payload = xlsx_renderer.render(normalize(job, ExportFormat.SPREADSHEET))
    return openpyxl.load_workbook(io.BytesIO(payload))


def _column_a(ws):
    return [c.value for c in ws["A"]]


def _find_row(ws, value):
    for row in ws.iter_rows():
        if row[0].value == value:
            return row[0].row
    raise AssertionError(f"{value!r} not found in column A")


# ── Single Table ───────────────────────────────────────────────────────────
class TestSingleSheet:

    def test_one_sheet_with_title(self, single_job):
        wb = _workbook(single_job)
        assert wb.sheetnames == ["Inventory Report"]
        ws = wb["Inventory Report"]
        assert ws["A1"].value == "Medicines Report"

    def test_title_merged_across_columns(self, single_job):
        ws = _workbook(single_job)["Inventory Report"]
        merged = [str(r) for r in ws.merged_cells.ranges]
        assert "A1:B1" in merged

    def test_metadata_lines(self, single_job):
        values = _column_a(_workbook(single_job)["Inventory Report"])
        assert "Department: Medical" in values
        assert "Classification: Medicines 💊" in values
        assert "Total Items: 1" in values
        assert any(str(v).startswith("Generated: ") for v in values if v)

    def test_header_and_formatted_row(self, single_job):
        ws  = _workbook(single_job)["Inventory Report"]
        row = _find_row(ws, "Generic Name")
        assert ws.cell(row, 2).value == "Status"
        assert ws.cell(row + 1, 1).value == "Paracetamol"
        assert ws.cell(row + 1, 2).value == "Low Stock"
        assert ws.freeze_panes == f"A{row + 1}"

    def test_control_characters_stripped(self, single_job, item_factory):
        single_job.tables[0].data = [item_factory(name="Paracetamol\x0b500mg")]
        ws  = _workbook(single_job)["Inventory Report"]
        row = _find_row(ws, "Generic Name")
        assert ws.cell(row + 1, 1).value == "Paracetamol500mg"

    def test_column_widths(self, single_job):
        ws = _workbook(single_job)["Inventory Report"]
        assert ws.column_dimensions["A"].width == 25
        assert ws.column_dimensions["B"].width == 15

    def test_stats_only_when_requested(self, single_job):
        values = _column_a(_workbook(single_job)["Inventory Report"])
        assert "INVENTORY STATISTICS" not in values

        single_job.include_stats = True
        values = _column_a(_workbook(single_job)["Inventory Report"])
        assert "INVENTORY STATISTICS" in values
        assert "Low Stock: 1" in values


# ── Multi Table ────────────────────────────────────────────────────────────
class TestMultiSheet:

    def test_summary_then_table_sheets(self, multi_job):
        wb = _workbook(multi_job)
        assert wb.sheetnames == ["Summary", "Medical_Medicines", "Dental_Supplies"]

    def test_summary_contents(self, multi_job):
        ws = _workbook(multi_job)["Summary"]
        values = _column_a(ws)
        assert ws["A1"].value == "Multi-Table Inventory Report"
        assert "Total Tables: 2" in values
        assert "SUMMARY STATISTICS" in values
        assert "Low Stock: 2" in values
        assert "Expired: 1" in values
        assert "Maintenance Required: 4" in values

        row = _find_row(ws, "Medical - Medicines")
        assert ws.cell(row, 2).value == "3 items"

    def test_table_sheet_title_and_rows(self, multi_job):
        ws = _workbook(multi_job)["Dental_Supplies"]
        assert ws["A1"].value == "Dental - Supplies 🧰"
        header = _find_row(ws, "Code")
        assert ws.cell(header + 1, 1).value == "DEN-000"
        assert ws.cell(header + 2, 1).value == "DEN-001"
        assert ws.cell(header + 3, 1).value is None

    def test_quantity_and_date_formatters(self, multi_job):
        ws  = _workbook(multi_job)["Medical_Medicines"]
        row = _find_row(ws, "Code") + 1
        assert ws.cell(row, 5).value == "12"
        assert ws.cell(row, 11).value == "3/5/2026"

    def test_duplicate_sheet_names_deduplicated(self, multi_job, items_factory):
        multi_job.tables.append(DataTable(
            id="t3", department="medical", classification="Medicines",
            data=items_factory(1),
        ))
        wb = _workbook(multi_job)
        assert "Medical_Medicines (2)" in wb.sheetnames

    def test_long_sheet_names_truncated(self, multi_job):
        multi_job.tables[0].department = "cardiothoracic_and_vascular"
        wb = _workbook(multi_job)
        assert all(len(name) <= 31 for name in wb.sheetnames)
        assert wb.sheetnames[1] == "Cardiothoracic_and_vascular_Med"


# ── Edge Cases ─────────────────────────────────────────────────────────────
class TestEdgeCases:

    def test_no_tables_gives_title_only(self, name_status_columns):
        job = ExportJob(format="spreadsheet", filename="f", title="Empty",
                        columns=name_status_columns)
        wb = _workbook(job)
        ws = wb["Inventory Report"]
        values = [v for v in _column_a(ws) if v]
        assert values[0] == "Empty"
        assert values[1].startswith("Generated: ")
        assert len(values) == 2

    def test_table_without_rows(self, single_job):
        single_job.tables[0].data = []
        ws  = _workbook(single_job)["Inventory Report"]
        row = _find_row(ws, "Generic Name")
        assert ws.max_row == row


class TestSafeSheetName:

    @pytest.mark.parametrize("name,expected", [
        ("Medical_Medicines", "Medical_Medicines"),
        ("a/b:c", "a_b_c"),
        ("", "Sheet"),
        ("x" * 40, "x" * 31),
    ])
    def test_names(self, name, expected):
        assert safe_sheet_name(name) == expected

    def test_unique(self):
        assert safe_sheet_name("Summary", ["Summary"]) == "Summary (2)"
        assert safe_sheet_name("Summary", ["Summary", "Summary (2)"]) == "Summary (3)"
        long_name = "y" * 31
        deduped = safe_sheet_name(long_name, [long_name])
        assert len(deduped) == 31
        assert deduped.endswith(" (2)")
