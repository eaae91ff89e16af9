"""
Typed block tree for a rendered daily report.

Text held by blocks is already HTML-escaped by the renderer, so `to_html`
concatenates it as-is. The rasterizer unescapes it again before drawing.
"""
from dataclasses import dataclass, field
from typing import Tuple

from django.utils.html import escape

from .images import ImageSource

DOCUMENT_WIDTH = 794

REPORT_CSS = """
body { margin: 0; background: #ffffff; font-family: Helvetica, Arial, sans-serif; color: #111111; }
.report { width: %(width)dpx; padding: 24px; box-sizing: border-box; }
h1 { font-size: 22px; margin: 0 0 12px 0; }
h2 { font-size: 16px; margin: 16px 0 8px 0; color: #0F5391; }
table { width: 100%%; border-collapse: collapse; font-size: 12px; }
th, td { border: 1px solid #999999; padding: 4px 6px; text-align: left; vertical-align: top; }
th { background: #d3d3d3; }
.meta td.label { font-weight: bold; width: 18%%; background: #f5f6f8; }
.placeholder { font-size: 12px; padding: 4px 0; }
.photos { display: flex; flex-wrap: wrap; gap: 8px; }
.photos img { object-fit: cover; border: 1px solid #cccccc; }
.page-break { page-break-after: always; break-after: page; }
""" % {"width": DOCUMENT_WIDTH}


@dataclass(frozen=True)
class Heading:
    text: str
    level: int = 1

    kind = "heading"

    def to_html(self):
        return f"<h{self.level}>{self.text}</h{self.level}>"


@dataclass(frozen=True)
class Cell:
    label: str
    value: str
    span: int = 1


@dataclass(frozen=True)
class MetadataGrid:
    """Two key/value pairs per row; a cell with span=2 takes a whole row."""

    cells: Tuple[Cell, ...]

    kind = "metadata"

    def rows(self):
        rows, pending = [], []
        for cell in self.cells:
            if cell.span >= 2:
                if pending:
                    rows.append(tuple(pending))
                    pending = []
                rows.append((cell,))
                continue
            pending.append(cell)
            if len(pending) == 2:
                rows.append(tuple(pending))
                pending = []
        if pending:
            rows.append(tuple(pending))
        return rows

    def to_html(self):
        parts = ['<table class="meta">']
        for row in self.rows():
            parts.append("<tr>")
            for cell in row:
                colspan = ' colspan="3"' if cell.span >= 2 else ""
                parts.append(f'<td class="label">{cell.label}</td><td{colspan}>{cell.value}</td>')
            parts.append("</tr>")
        parts.append("</table>")
        return "".join(parts)


@dataclass(frozen=True)
class Table:
    headers: Tuple[str, ...]
    rows: Tuple[Tuple[str, ...], ...]
    name: str = ""

    kind = "table"

    def to_html(self):
        head = "".join(f"<th>{h}</th>" for h in self.headers)
        body = "".join(
            "<tr>" + "".join(f"<td>{value}</td>" for value in row) + "</tr>"
            for row in self.rows
        )
        return f'<table class="{self.name}"><thead><tr>{head}</tr></thead><tbody>{body}</tbody></table>'


@dataclass(frozen=True)
class Placeholder:
    text: str

    kind = "placeholder"

    def to_html(self):
        return f'<div class="placeholder">{self.text}</div>'


@dataclass(frozen=True)
class PhotoGrid:
    photos: Tuple[ImageSource, ...]
    thumb_width: int = 240
    thumb_height: int = 180

    kind = "photos"

    def to_html(self):
        images = "".join(
            f'<img src="{escape(photo.url)}" width="{self.thumb_width}" height="{self.thumb_height}">'
            for photo in self.photos
        )
        return f'<div class="photos">{images}</div>'


@dataclass(frozen=True)
class PageBreak:
    kind = "page_break"

    def to_html(self):
        return '<div class="page-break"></div>'


@dataclass(frozen=True)
class Layout:
    blocks: Tuple[object, ...] = field(default_factory=tuple)

    def __add__(self, other):
        return Layout(self.blocks + other.blocks)

    def __len__(self):
        return len(self.blocks)

    @property
    def is_empty(self):
        return not self.blocks

    def body_html(self):
        return "".join(block.to_html() for block in self.blocks)

    def to_html(self):
        return (
            '<!DOCTYPE html><html><head><meta charset="utf-8">'
            f"<style>{REPORT_CSS}</style></head>"
            f'<body><div class="report">{self.body_html()}</div></body></html>'
        )
