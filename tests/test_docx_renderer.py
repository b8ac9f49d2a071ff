"""
tests/test_docx_renderer.py

Word renderer tests. Documents are rendered to bytes and read back
with python-docx.
"""

import io

from docx import Document
from docx.shared import RGBColor

from config.settings import APP_TAGLINE
from models.schemas import ExportFormat, ExportJob
from modules.export.assembler import normalize
from modules.export.renderers import docx_renderer


def _document(job: ExportJob):
    payload = docx_renderer.render(normalize(job, ExportFormat.DOCUMENT))
    return Document(io.BytesIO(payload))


def _texts(doc):
    return [p.text for p in doc.paragraphs]


def _headings(doc, style_name):
    return [p.text for p in doc.paragraphs if p.style.name == style_name]


class TestPageFurniture:

    def test_header_tagline(self, single_job):
        doc = _document(single_job)
        assert doc.sections[0].header.paragraphs[0].text == APP_TAGLINE

    def test_footer_generated_and_page(self, single_job):
        footer = _document(single_job).sections[0].footer.paragraphs[0]
        assert footer.text.startswith("Generated on ")
        assert "| Page" in footer.text
        assert 'PAGE' in footer._p.xml

    def test_title(self, single_job):
        doc = _document(single_job)
        assert _headings(doc, "Title") == ["Medicines Report"]
        assert any(t.startswith("Generated on: ") for t in _texts(doc))


class TestSingleTable:

    def test_table_contents(self, single_job):
        doc = _document(single_job)
        assert len(doc.tables) == 1
        table = doc.tables[0]
        assert [c.text for c in table.rows[0].cells] == ["Generic Name", "Status"]
        assert [c.text for c in table.rows[1].cells] == ["Paracetamol", "Low Stock"]

    def test_status_cell_coloured(self, single_job, item_factory):
        single_job.tables[0].data = [item_factory(status="out_of_stock")]
        cell = _document(single_job).tables[0].rows[1].cells[1]
        run  = cell.paragraphs[0].runs[0]
        assert cell.text == "Out Of Stock"
        assert run.font.color.rgb == RGBColor.from_string("DC2626")

    def test_control_characters_stripped(self, single_job, item_factory):
        single_job.tables[0].data = [item_factory(generic_name="Paracetamol\x0b500mg")]
        single_job.title = "Medicines\x0c Report"
        doc = _document(single_job)
        assert doc.tables[0].rows[1].cells[0].text == "Paracetamol500mg"
        assert _headings(doc, "Title") == ["Medicines Report"]

    def test_header_cell_shaded(self, single_job):
        cell = _document(single_job).tables[0].rows[0].cells[0]
        assert 'w:fill="1E40AF"' in cell._tc.xml

    def test_stats_when_requested(self, single_job):
        doc = _document(single_job)
        assert "Inventory Statistics" not in _headings(doc, "Heading 2")

        single_job.include_stats = True
        doc = _document(single_job)
        assert "Inventory Statistics" in _headings(doc, "Heading 2")
        assert "Total Items: 1 | Low Stock: 1 | Out of Stock: 0 | Expired: 0" in _texts(doc)


class TestMultiTable:

    def test_executive_summary(self, multi_job):
        doc = _document(multi_job)
        assert _headings(doc, "Heading 1") == ["Executive Summary"]
        texts = _texts(doc)
        assert "Tables Included: 2" in texts
        assert "Total Items Across All Departments: 5" in texts
        assert "Items Requiring Attention: 3" in texts
        assert "Maintenance Required: 4" in texts

    def test_stats_present_without_include_stats(self, multi_job):
        multi_job.include_stats = False
        texts = _texts(_document(multi_job))
        assert "Tables Included: 2" in texts
        assert "Total Items Across All Departments: 5" in texts
        assert "Items Requiring Attention: 3" in texts
        assert "Total Items: 3 | Low Stock: 2 | Out of Stock: 1 | Expired: 0" in texts

    def test_one_section_per_table(self, multi_job):
        doc = _document(multi_job)
        assert _headings(doc, "Heading 2") == [
            "Medical Department - Medicines",
            "Dental Department - Supplies",
        ]
        assert [len(t.rows) for t in doc.tables] == [4, 3]

    def test_full_rows_not_capped(self, multi_job, items_factory):
        multi_job.tables[0].data = items_factory(120)
        doc = _document(multi_job)
        assert len(doc.tables[0].rows) == 121


class TestNoTables:

    def test_title_only(self, name_status_columns):
        job = ExportJob(format="document", filename="f", title="Empty",
                        columns=name_status_columns)
        doc = _document(job)
        assert doc.tables == []
        assert _headings(doc, "Title") == ["Empty"]
