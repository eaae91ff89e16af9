import copy
import datetime
import secrets
import string
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from django.utils.dateparse import parse_date


DEFAULT_SITE = "Prime 11 Unit 213"

DEFAULT_CATEGORIES = (
    "Demolition",
    "Electrical",
    "Plumbing",
    "Masonry / Blockwork",
    "Plaster / Skim",
    "Ceiling",
    "Painting",
    "Flooring / Tiling",
    "Doors & Windows",
    "Built-in Furniture",
    "MEP Testing / Commissioning",
    "Cleaning / Hand-over",
)


ID_ALPHABET = string.digits + string.ascii_lowercase


def make_id(prefix="id"):
    """`<prefix>_` followed by 7 random base36 characters."""
    return f"{prefix}_" + "".join(secrets.choice(ID_ALPHABET) for _ in range(7))


def clamp_progress(value):
    """Coerce a progress value to an int in [0, 100]. Garbage becomes 0."""
    try:
        number = int(float(value))
    except (TypeError, ValueError):
        return 0
    return max(0, min(100, number))


def default_progress():
    return {name: 0 for name in DEFAULT_CATEGORIES}


def to_date(value):
    if value in (None, ""):
        return None
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    parsed = parse_date(str(value)[:10])
    if parsed is None:
        raise ValueError(f"Invalid date: {value!r}")
    return parsed


# ---------------------------
# MATERIAL ITEM
# ---------------------------
@dataclass
class MaterialItem:
    id: str = field(default_factory=lambda: make_id("mat"))
    name: str = ""
    quantity: str = ""
    needed_by: Optional[datetime.date] = None
    notes: str = ""

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "quantity": self.quantity,
            "neededBy": self.needed_by.isoformat() if self.needed_by else "",
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data.get("id") or make_id("mat"),
            name=data.get("name") or "",
            quantity=str(data.get("quantity") or ""),
            needed_by=to_date(data.get("neededBy")),
            notes=data.get("notes") or "",
        )


# ---------------------------
# ENTRY
# ---------------------------
@dataclass
class Entry:
    id: str = field(default_factory=lambda: make_id("entry"))
    date: datetime.date = field(default_factory=datetime.date.today)
    site: str = DEFAULT_SITE
    area: str = ""
    category_progress: Dict[str, int] = field(default_factory=default_progress)
    weather: str = ""
    obstacles: str = ""
    notes: str = ""
    manpower: str = ""
    safety_incidents: str = "None"
    materials_required: bool = False
    material_items: List[MaterialItem] = field(default_factory=list)
    photos: List[str] = field(default_factory=list)

    def __post_init__(self):
        self.category_progress = {
            name: clamp_progress(value)
            for name, value in self.category_progress.items()
        }

    def __str__(self):
        return f"{self.date.isoformat()} - {self.site}"

    # ---------------- Category progress ----------------
    def set_progress(self, category, value):
        """Set a category's progress, clamped. Unknown categories are appended."""
        self.category_progress[category] = clamp_progress(value)
        return self.category_progress[category]

    def add_category(self, name):
        name = (name or "").strip()
        if not name:
            raise ValueError("Category name cannot be blank.")
        if name in self.category_progress:
            raise ValueError(f"Category '{name}' already exists.")
        self.category_progress[name] = 0

    def remove_category(self, name):
        return self.category_progress.pop(name, None) is not None

    # ---------------- Materials ----------------
    def add_material_item(self, **values):
        item = MaterialItem(**values)
        self.material_items.append(item)
        return item

    def update_material_item(self, item_id, **patch):
        for item in self.material_items:
            if item.id == item_id:
                for key, value in patch.items():
                    if not hasattr(item, key) or key == "id":
                        raise AttributeError(f"MaterialItem has no editable field '{key}'")
                    if key == "needed_by":
                        value = to_date(value)
                    setattr(item, key, value)
                return item
        raise KeyError(item_id)

    def remove_material_item(self, item_id):
        before = len(self.material_items)
        self.material_items = [m for m in self.material_items if m.id != item_id]
        return len(self.material_items) != before

    # ---------------- Photos ----------------
    def add_photos(self, sources):
        self.photos.extend(sources)

    def remove_photo(self, index):
        return self.photos.pop(index)

    # ---------------- Serialization ----------------
    def copy(self):
        return copy.deepcopy(self)

    def to_dict(self):
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "site": self.site,
            "area": self.area,
            "categoryProgress": dict(self.category_progress),
            "weather": self.weather,
            "obstacles": self.obstacles,
            "notes": self.notes,
            "manpower": self.manpower,
            "safetyIncidents": self.safety_incidents,
            "materialsRequired": self.materials_required,
            "materialItems": [item.to_dict() for item in self.material_items],
            "photos": list(self.photos),
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data["id"],
            date=to_date(data.get("date")) or datetime.date.today(),
            site=data.get("site") or "",
            area=data.get("area") or "",
            category_progress=dict(data.get("categoryProgress") or {}),
            weather=data.get("weather") or "",
            obstacles=data.get("obstacles") or "",
            notes=data.get("notes") or "",
            manpower=data.get("manpower") or "",
            safety_incidents=data.get("safetyIncidents") or "None",
            materials_required=bool(data.get("materialsRequired")),
            material_items=[MaterialItem.from_dict(m) for m in data.get("materialItems") or []],
            photos=list(data.get("photos") or []),
        )


def new_entry(site=None, previous=None, today=None):
    """
    Blank entry for a site. When `previous` is given its category progress
    is carried forward; `previous` itself is left untouched.
    """
    progress = default_progress()
    if previous is not None:
        progress = dict(previous.category_progress)
    return Entry(
        date=today or datetime.date.today(),
        site=site or DEFAULT_SITE,
        category_progress=progress,
    )
