import json
import logging
from dataclasses import dataclass
from io import BytesIO

from django.http import HttpResponse
from django.utils import timezone
from django.utils.http import content_disposition_header
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font
from openpyxl.utils import get_column_letter
from reportlab.lib.pagesizes import A4
from weasyprint import HTML

from .entry import Entry
from .paginator import assemble_pdf, paginate
from .renderer import render_many
from .scratch import default_target

logger = logging.getLogger(__name__)

ENGINE_RASTER = "raster"
ENGINE_MARKUP = "markup"

PDF_TYPE = "application/pdf"
JSON_TYPE = "application/json; charset=utf-8"
XLSX_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _filename_part(value):
    return str(value).replace("/", "-").replace("\\", "-").strip()


def pdf_filename(entry):
    return f"Daily-Report_{entry.date.isoformat()}_{_filename_part(entry.site)}.pdf"


def batch_pdf_filename(today):
    return f"Daily-Reports_{today.isoformat()}.pdf"


def json_filename(today):
    return f"daily-report-{today.isoformat()}.json"


def xlsx_filename(today):
    return f"daily-report-{today.isoformat()}.xlsx"


@dataclass(frozen=True)
class ExportFile:
    filename: str
    content: bytes
    content_type: str

    def as_response(self):
        response = HttpResponse(self.content, content_type=self.content_type)
        response["Content-Disposition"] = content_disposition_header(True, self.filename)
        return response


def markup_pdf(layout, base_url=None):
    """Render the layout's HTML through WeasyPrint (vector text, no rasterizing)."""
    return HTML(string=layout.to_html(), base_url=base_url).write_pdf()


class ReportExporter:
    """
    Select entries, render them, paginate, and hand back a named file.
    Exports never touch the entries themselves.
    """

    def __init__(self, target=None, page_size=A4, mode="crop"):
        self.target = target or default_target
        self.page_size = page_size
        self.mode = mode

    def _today(self, today):
        return today or timezone.localdate()

    def export_pdf(self, selection, today=None, engine=ENGINE_RASTER, base_url=None):
        if isinstance(selection, Entry):
            entries = [selection]
            filename = pdf_filename(selection)
        else:
            entries = list(selection)
            filename = batch_pdf_filename(self._today(today))

        layout = render_many(entries)
        with self.target.swap(layout):
            if engine == ENGINE_MARKUP:
                content = markup_pdf(self.target.content, base_url=base_url)
            else:
                page_w, page_h = self.page_size
                pages = paginate(self.target, page_w, page_h, mode=self.mode)
                content = assemble_pdf(pages, self.page_size, title=filename)

        logger.info("Exported %s (%d entries, %d bytes)", filename, len(entries), len(content))
        return ExportFile(filename, content, PDF_TYPE)

    def export_json(self, entries, today=None):
        payload = [entry.to_dict() for entry in entries]
        content = json.dumps(payload, indent=2, ensure_ascii=False).encode("utf-8")
        filename = json_filename(self._today(today))
        logger.info("Exported %s (%d entries)", filename, len(payload))
        return ExportFile(filename, content, JSON_TYPE)

    def export_xlsx(self, entries, today=None):
        wb = Workbook()
        ws = wb.active
        ws.title = "Category Progress"

        headers = ["Date", "Site", "Area", "Category", "Progress %"]
        ws.append(headers)
        for cell in ws[1]:
            cell.font = Font(bold=True)
            cell.alignment = Alignment(horizontal="center")

        for entry in entries:
            for category, value in entry.category_progress.items():
                ws.append([entry.date.isoformat(), entry.site, entry.area, category, value])

        for idx, header in enumerate(headers, start=1):
            ws.column_dimensions[get_column_letter(idx)].width = max(12, len(header) + 4)
        ws.column_dimensions["D"].width = 32

        buffer = BytesIO()
        wb.save(buffer)
        filename = xlsx_filename(self._today(today))
        return ExportFile(filename, buffer.getvalue(), XLSX_TYPE)


def parse_json_export(content):
    """Inverse of `export_json`: bytes back to entries."""
    return [Entry.from_dict(item) for item in json.loads(content.decode("utf-8"))]
