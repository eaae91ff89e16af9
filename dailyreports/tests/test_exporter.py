import datetime
import json
from io import BytesIO

import pytest
from openpyxl import load_workbook

from dailyreports import exporter as exporter_module
from dailyreports.entry import Entry
from dailyreports.exceptions import RenderTargetUnavailable
from dailyreports.exporter import ReportExporter, parse_json_export
from dailyreports.layout import Heading, Layout
from dailyreports.scratch import RenderTarget

TODAY = datetime.date(2024, 3, 9)


@pytest.fixture
def target():
    return RenderTarget(Layout((Heading("Live form"),)))


@pytest.fixture
def report_exporter(target):
    return ReportExporter(target)


@pytest.fixture
def entries(entry):
    second = Entry(date=datetime.date(2024, 3, 6), site="Prime 11 Unit 213", area="Bathroom")
    second.materials_required = True
    second.add_material_item(name="Grout", quantity="3", needed_by=datetime.date(2024, 3, 8))
    second.add_category("Waterproofing")
    second.set_progress("Waterproofing", 60)
    return [entry, second]


def test_single_entry_pdf_filename(report_exporter, entry):
    export = report_exporter.export_pdf(entry)
    assert export.filename == "Daily-Report_2024-03-05_Prime 11 Unit 213.pdf"
    assert export.content_type == "application/pdf"
    assert export.content.startswith(b"%PDF")


def test_batch_pdf_filename_uses_current_date(report_exporter, entries):
    export = report_exporter.export_pdf(entries, today=TODAY)
    assert export.filename == "Daily-Reports_2024-03-09.pdf"
    assert export.content.startswith(b"%PDF")


def test_site_with_slash_is_kept_out_of_the_path(report_exporter, entry):
    entry.site = "Block A/Unit 3"
    assert report_exporter.export_pdf(entry).filename == "Daily-Report_2024-03-05_Block A-Unit 3.pdf"


def test_target_content_restored_after_export(report_exporter, target, entry):
    original = target.content
    report_exporter.export_pdf(entry)
    assert target.content is original


def test_target_content_restored_when_pagination_fails(report_exporter, target, entry, monkeypatch):
    original = target.content

    def boom(*args, **kwargs):
        assert target.content is not original
        raise RuntimeError("rasterizer crashed")

    monkeypatch.setattr(exporter_module, "paginate", boom)
    with pytest.raises(RuntimeError):
        report_exporter.export_pdf(entry)
    assert target.content is original


def test_unmounted_target_aborts_export(entry):
    target = RenderTarget(mounted=False)
    with pytest.raises(RenderTargetUnavailable):
        ReportExporter(target).export_pdf(entry)
    target.mount()
    assert target.content == Layout()


def test_exports_do_not_mutate_entries(report_exporter, entries):
    before = [e.copy() for e in entries]
    report_exporter.export_pdf(entries, today=TODAY)
    report_exporter.export_json(entries, today=TODAY)
    report_exporter.export_xlsx(entries, today=TODAY)
    assert entries == before


def test_json_export_round_trip(report_exporter, entries):
    export = report_exporter.export_json(entries, today=TODAY)
    assert export.filename == "daily-report-2024-03-09.json"
    assert parse_json_export(export.content) == entries


def test_json_export_is_indented_utf8(report_exporter, entries):
    content = report_exporter.export_json(entries, today=TODAY).content
    text = content.decode("utf-8")
    assert "31°C" in text
    assert text.startswith("[\n  {\n    \"id\"")
    data = json.loads(text)
    assert data[1]["categoryProgress"]["Waterproofing"] == 60
    assert data[1]["materialItems"][0]["neededBy"] == "2024-03-08"


def test_json_export_of_nothing(report_exporter):
    assert report_exporter.export_json([], today=TODAY).content == b"[]"


def test_xlsx_export_has_row_per_category(report_exporter, entries):
    export = report_exporter.export_xlsx(entries, today=TODAY)
    assert export.filename == "daily-report-2024-03-09.xlsx"

    ws = load_workbook(BytesIO(export.content)).active
    rows = list(ws.iter_rows(values_only=True))
    assert rows[0] == ("Date", "Site", "Area", "Category", "Progress %")
    assert len(rows) == 1 + sum(len(e.category_progress) for e in entries)
    assert ("2024-03-05", "Prime 11 Unit 213", "Kitchen", "Demolition", 80) in rows


def test_export_file_as_download_response(report_exporter, entry):
    response = report_exporter.export_pdf(entry).as_response()
    assert response["Content-Type"] == "application/pdf"
    assert response["Content-Disposition"] == 'attachment; filename="Daily-Report_2024-03-05_Prime 11 Unit 213.pdf"'


def test_markup_engine_renders_layout_html(report_exporter, target, entry, monkeypatch):
    calls = []

    class FakeHTML:
        def __init__(self, string, base_url=None):
            calls.append((string, base_url))

        def write_pdf(self):
            return b"%PDF-markup"

    monkeypatch.setattr(exporter_module, "HTML", FakeHTML)
    original = target.content
    export = report_exporter.export_pdf(entry, engine="markup", base_url="http://testserver/")

    assert export.content == b"%PDF-markup"
    html, base_url = calls[0]
    assert "Daily Report - 2024-03-05" in html
    assert base_url == "http://testserver/"
    assert target.content is original
