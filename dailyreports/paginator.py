"""
Rasterize a report layout into one tall image, then cut it into page bands
and write them out as a PDF.

The document is laid out 794 units wide (A4 portrait at 96 DPI) and drawn at
2x on an opaque white canvas.
"""
import html
import logging
import math
from dataclasses import dataclass
from io import BytesIO

import requests
from PIL import Image, ImageDraw, ImageFont, ImageOps
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from .layout import DOCUMENT_WIDTH

logger = logging.getLogger(__name__)

SCALE = 2
PADDING = 24
CELL_PADDING = 6
BLOCK_GAP = 10
LINE_SPACING = 1.35

FONT_SIZES = {"h1": 22, "h2": 16, "body": 12}

PALETTE = {
    "ink": (17, 17, 17),
    "section": (15, 83, 145),  # #0F5391
    "border": (153, 153, 153),
    "header": (211, 211, 211),
    "label": (245, 246, 248),
    "muted": (120, 120, 120),
    "white": (255, 255, 255),
}

COLUMN_SHARES = {
    "progress": (0.7, 0.3),
    "materials": (0.3, 0.12, 0.18, 0.4),
}
METADATA_SHARES = (0.18, 0.32, 0.18, 0.32)


def wrap_text(text, font, max_w):
    """Greedy word wrap against the font's advance widths. Long words are split."""
    lines = []
    for paragraph in (text or "").splitlines():
        current = ""
        for word in paragraph.split(" "):
            if word == "":
                continue
            candidate = word if not current else f"{current} {word}"
            if font.getlength(candidate) <= max_w:
                current = candidate
                continue
            if current:
                lines.append(current)
                current = ""
            if font.getlength(word) <= max_w:
                current = word
                continue
            chunk = ""
            for ch in word:
                if not chunk or font.getlength(chunk + ch) <= max_w:
                    chunk += ch
                else:
                    lines.append(chunk)
                    chunk = ch
            current = chunk
        lines.append(current)
    return lines or [""]


class Rasterizer:
    def __init__(self, width=DOCUMENT_WIDTH, scale=SCALE, page_size=A4):
        self.scale = scale
        self.width = self.px(width)
        self.padding = self.px(PADDING)
        self.inner_width = self.width - 2 * self.padding
        self.page_height = int(round(self.width * page_size[1] / page_size[0]))
        self._fonts = {}

    def px(self, units):
        return int(round(units * self.scale))

    def font(self, name):
        if name not in self._fonts:
            self._fonts[name] = ImageFont.load_default(size=self.px(FONT_SIZES[name]))
        return self._fonts[name]

    def line_height(self, name):
        return int(math.ceil(self.px(FONT_SIZES[name]) * LINE_SPACING))

    # ---------------- Entry point ----------------
    def rasterize(self, layout):
        height = self._place_blocks(layout, None)
        image = Image.new("RGB", (self.width, max(height, 1)), PALETTE["white"])
        self._place_blocks(layout, ImageDraw.Draw(image), image)
        return image

    def _place_blocks(self, layout, draw, image=None):
        """Walk the blocks once; measures only when `draw` is None."""
        y = self.padding
        for block in layout.blocks:
            y = getattr(self, f"_place_{block.kind}")(block, y, draw, image)
        return y + self.padding

    # ---------------- Blocks ----------------
    def _place_heading(self, block, y, draw, image):
        name = "h1" if block.level <= 1 else "h2"
        font = self.font(name)
        fill = PALETTE["ink"] if name == "h1" else PALETTE["section"]
        if name == "h2":
            y += self.px(BLOCK_GAP)
        for line in wrap_text(html.unescape(block.text), font, self.inner_width):
            if draw is not None:
                draw.text((self.padding, y), line, font=font, fill=fill)
            y += self.line_height(name)
        return y + self.px(4)

    def _place_metadata(self, block, y, draw, image):
        for row in block.rows():
            if len(row) == 1 and row[0].span >= 2:
                shares = (METADATA_SHARES[0], 1 - METADATA_SHARES[0])
            else:
                shares = METADATA_SHARES[: 2 * len(row)]
            texts, fills = [], []
            for cell in row:
                texts += [cell.label, cell.value]
                fills += [PALETTE["label"], PALETTE["white"]]
            y = self._place_row(texts, shares, fills, y, draw)
        return y + self.px(BLOCK_GAP)

    def _place_table(self, block, y, draw, image):
        count = len(block.headers)
        shares = COLUMN_SHARES.get(block.name) or tuple(1 / count for _ in range(count))
        y = self._place_row(block.headers, shares, [PALETTE["header"]] * count, y, draw)
        for row in block.rows:
            y = self._place_row(row, shares, [PALETTE["white"]] * count, y, draw)
        return y + self.px(BLOCK_GAP)

    def _place_placeholder(self, block, y, draw, image):
        font = self.font("body")
        if draw is not None:
            draw.text((self.padding, y + self.px(4)), html.unescape(block.text), font=font, fill=PALETTE["ink"])
        return y + self.line_height("body") + self.px(8)

    def _place_photos(self, block, y, draw, image):
        if not block.photos:
            return y
        thumb_w, thumb_h = self.px(block.thumb_width), self.px(block.thumb_height)
        gap = self.px(8)
        columns = max(1, (self.inner_width + gap) // (thumb_w + gap))
        rows = int(math.ceil(len(block.photos) / columns))
        if image is not None:
            for idx, photo in enumerate(block.photos):
                x = self.padding + (idx % columns) * (thumb_w + gap)
                top = y + (idx // columns) * (thumb_h + gap)
                self._paste_photo(photo, image, draw, (x, top, thumb_w, thumb_h))
        return y + rows * (thumb_h + gap)

    def _place_page_break(self, block, y, draw, image):
        next_page = int(math.ceil(y / self.page_height)) * self.page_height
        return next_page + self.padding

    # ---------------- Drawing helpers ----------------
    def _place_row(self, texts, shares, fills, y, draw):
        font = self.font("body")
        pad = self.px(CELL_PADDING)
        line_h = self.line_height("body")
        widths = [int(self.inner_width * share) for share in shares]
        widths[-1] = self.inner_width - sum(widths[:-1])

        wrapped = [
            wrap_text(html.unescape(text), font, max(1, w - 2 * pad))
            for text, w in zip(texts, widths)
        ]
        row_h = max(len(lines) for lines in wrapped) * line_h + 2 * pad

        if draw is not None:
            x = self.padding
            for lines, w, fill in zip(wrapped, widths, fills):
                draw.rectangle((x, y, x + w, y + row_h), fill=fill, outline=PALETTE["border"], width=self.scale)
                for i, line in enumerate(lines):
                    draw.text((x + pad, y + pad + i * line_h), line, font=font, fill=PALETTE["ink"])
                x += w
        return y + row_h

    def _paste_photo(self, photo, image, draw, box):
        x, y, w, h = box
        try:
            thumb = ImageOps.fit(photo.open_image(), (w, h))
        except (OSError, ValueError, requests.RequestException) as exc:
            logger.warning("Could not load photo %r: %s", photo, exc)
            draw.rectangle((x, y, x + w, y + h), fill=PALETTE["label"], outline=PALETTE["border"])
            draw.text((x + self.px(8), y + self.px(8)), "Photo unavailable", font=self.font("body"), fill=PALETTE["muted"])
            return
        image.paste(thumb, (x, y))
        draw.rectangle((x, y, x + w, y + h), outline=PALETTE["border"], width=self.scale)


def rasterize(layout, page_size=A4):
    return Rasterizer(page_size=page_size).rasterize(layout)


# ---------------------------
# PAGINATION
# ---------------------------
@dataclass
class Page:
    image: Image.Image
    width: float
    height: float


def slice_pages(image, page_width, page_height, mode="crop"):
    """
    Cut a tall image into pages `page_width` wide.

    The image is scaled to the page width; one page is emitted, then one
    page band is taken off the remaining height until less than half a
    pixel is left. The count is worked out in image pixels so a document
    rasterized to exactly one page height stays on one page.
    In "crop" mode each page carries its own band of the image. "repeat"
    places the whole image at the top of every page instead.
    """
    native_w, native_h = image.size
    image_height = native_h * page_width / native_w
    band = page_height * native_w / page_width

    pages = []
    remaining = native_h
    index = 0
    while True:
        if mode == "repeat":
            pages.append(Page(image, page_width, image_height))
        else:
            top = int(round(index * band))
            bottom = min(native_h, int(round((index + 1) * band)))
            if bottom <= top:
                break
            pages.append(Page(
                image.crop((0, top, native_w, bottom)),
                page_width,
                (bottom - top) * page_width / native_w,
            ))
        remaining -= band
        index += 1
        if remaining <= 0.5:
            break
    return pages


def paginate(target, page_width, page_height, mode="crop"):
    """Rasterize whatever the render target currently holds and slice it into pages."""
    layout = target.content
    image = Rasterizer(page_size=(page_width, page_height)).rasterize(layout)
    pages = slice_pages(image, page_width, page_height, mode=mode)
    logger.info("Paginated %d blocks into %d page(s)", len(layout), len(pages))
    return pages


def assemble_pdf(pages, page_size=A4, title=None):
    buffer = BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=page_size)
    if title:
        pdf.setTitle(title)
    page_w, page_h = page_size
    for page in pages:
        pdf.drawImage(ImageReader(page.image), 0, page_h - page.height, width=page.width, height=page.height)
        pdf.showPage()
    pdf.save()
    return buffer.getvalue()
