from django.utils.html import escape

from .images import ImageSource
from .layout import Cell, Heading, Layout, MetadataGrid, PageBreak, PhotoGrid, Placeholder, Table

PROGRESS_HEADERS = ("Category", "Progress")
MATERIAL_HEADERS = ("Item", "Qty", "Needed By", "Notes")
NO_MATERIALS = "No"


def safe(value):
    return value.strftime("%Y-%m-%d") if value else "-"


def _materials_block(entry):
    if not (entry.materials_required and entry.material_items):
        return Placeholder(NO_MATERIALS)
    rows = tuple(
        (
            escape(item.name),
            escape(item.quantity),
            safe(item.needed_by),
            escape(item.notes),
        )
        for item in entry.material_items
    )
    return Table(MATERIAL_HEADERS, rows, name="materials")


def render(entry):
    """Build the layout for one entry. Pure and deterministic."""
    metadata = MetadataGrid((
        Cell("Site", escape(entry.site)),
        Cell("Area", escape(entry.area)),
        Cell("Weather", escape(entry.weather)),
        Cell("Manpower", escape(entry.manpower)),
        Cell("Obstacles", escape(entry.obstacles)),
        Cell("Safety", escape(entry.safety_incidents)),
        Cell("Notes", escape(entry.notes), span=2),
    ))

    progress = Table(
        PROGRESS_HEADERS,
        tuple(
            (escape(name), f"{value}%")
            for name, value in entry.category_progress.items()
        ),
        name="progress",
    )

    return Layout((
        Heading(f"Daily Report - {safe(entry.date)}", level=1),
        metadata,
        Heading("Progress by Category", level=2),
        progress,
        Heading("Materials Required", level=2),
        _materials_block(entry),
        Heading("Photos", level=2),
        PhotoGrid(tuple(ImageSource(photo) for photo in entry.photos)),
    ))


def render_many(entries):
    layout = Layout()
    for idx, entry in enumerate(entries):
        if idx:
            layout = layout + Layout((PageBreak(),))
        layout = layout + render(entry)
    return layout
