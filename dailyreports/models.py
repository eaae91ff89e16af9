from django.db import models

from .entry import Entry, MaterialItem, clamp_progress


# ---------------------------
# ENTRY ROW
# ---------------------------
class EntryRow(models.Model):
    """One saved daily report, stored with the row-store column layout."""

    id = models.CharField(max_length=64, primary_key=True)
    entry_date = models.DateField()
    site = models.CharField(max_length=255)
    area = models.CharField(max_length=255, blank=True)

    category_progress = models.JSONField(default=dict)

    weather = models.TextField(blank=True)
    obstacles = models.TextField(blank=True)
    notes = models.TextField(blank=True)
    manpower = models.TextField(blank=True)
    safety_incidents = models.TextField(blank=True, default="None")

    materials_required = models.BooleanField(default=False)
    material_items = models.JSONField(default=list, blank=True)
    photo_urls = models.JSONField(default=list, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["site", "entry_date"], name="dailyreport_site_date_idx"),
        ]
        verbose_name = "Daily Report Entry"
        verbose_name_plural = "Daily Report Entries"

    def __str__(self):
        return f"{self.site} - {self.entry_date}"

    @property
    def overall_progress(self):
        values = list((self.category_progress or {}).values())
        if not values:
            return 0
        return round(sum(values) / len(values), 1)

    def to_entry(self):
        return Entry(
            id=self.id,
            date=self.entry_date,
            site=self.site,
            area=self.area or "",
            category_progress={k: clamp_progress(v) for k, v in (self.category_progress or {}).items()},
            weather=self.weather or "",
            obstacles=self.obstacles or "",
            notes=self.notes or "",
            manpower=self.manpower or "",
            safety_incidents=self.safety_incidents or "None",
            materials_required=bool(self.materials_required),
            material_items=[MaterialItem.from_dict(m) for m in self.material_items or []],
            photos=list(self.photo_urls or []),
        )

    @classmethod
    def from_entry(cls, entry):
        return cls(
            id=entry.id,
            entry_date=entry.date,
            site=entry.site,
            area=entry.area,
            category_progress=dict(entry.category_progress),
            weather=entry.weather,
            obstacles=entry.obstacles,
            notes=entry.notes,
            manpower=entry.manpower,
            safety_incidents=entry.safety_incidents,
            materials_required=entry.materials_required,
            material_items=[item.to_dict() for item in entry.material_items],
            photo_urls=list(entry.photos),
        )
