from django import forms
from django.utils.safestring import mark_safe

from .entry import to_date
from .images import ALLOWED_UPLOAD_TYPES, MAX_UPLOAD_SIZE

INPUT_CLASSES = "border rounded px-3 py-2 w-full focus:ring-2 focus:ring-blue-500"


class RequiredFieldMixin:
    """
    Append red * to required field labels and apply the shared input styling
    """
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for field in self.fields.values():
            if field.required and field.label:
                field.label = mark_safe(
                    f"{field.label} <span class='text-red-500'>*</span>"
                )
            if not isinstance(field.widget, (forms.CheckboxInput, forms.HiddenInput, forms.CheckboxSelectMultiple)):
                existing_class = field.widget.attrs.get("class", "")
                field.widget.attrs["class"] = f"{existing_class} {INPUT_CLASSES}".strip()


# ---------------------------
# ENTRY FORM
# ---------------------------
class EntryForm(RequiredFieldMixin, forms.Form):
    date = forms.DateField(label="Date", widget=forms.DateInput(attrs={"type": "date"}))
    site = forms.CharField(label="Site", max_length=255)
    area = forms.CharField(max_length=255, required=False, widget=forms.TextInput(attrs={
        "placeholder": "Kitchen / Master bedroom",
    }))
    weather = forms.CharField(required=False)
    manpower = forms.CharField(required=False, widget=forms.TextInput(attrs={
        "placeholder": "2 electricians, 3 masons",
    }))
    obstacles = forms.CharField(required=False, widget=forms.Textarea(attrs={"rows": 2}))
    safety_incidents = forms.CharField(required=False, initial="None", label="Safety incidents")
    notes = forms.CharField(required=False, widget=forms.Textarea(attrs={"rows": 3}))
    materials_required = forms.BooleanField(required=False, label="Materials required?")

    categories = forms.CharField(required=False, widget=forms.HiddenInput())
    new_category = forms.CharField(required=False, max_length=100, label="Add category")
    remove_categories = forms.MultipleChoiceField(
        required=False,
        label="Remove categories",
        widget=forms.CheckboxSelectMultiple(),
    )

    def __init__(self, *args, categories=(), **kwargs):
        super().__init__(*args, **kwargs)
        if self.is_bound:
            categories = self.categories_from(self.data)
        self.category_names = list(categories)
        self.fields["categories"].initial = "\n".join(self.category_names)
        self.fields["remove_categories"].choices = [(name, name) for name in self.category_names]

        for idx, name in enumerate(self.category_names):
            # Out-of-range values are clamped on apply, not rejected here.
            self.fields[f"progress_{idx}"] = forms.IntegerField(
                label=name,
                required=False,
                widget=forms.NumberInput(attrs={"min": 0, "max": 100, "class": INPUT_CLASSES}),
            )

    @staticmethod
    def categories_from(data):
        raw = data.get("categories") or ""
        return [name.strip() for name in raw.splitlines() if name.strip()]

    @classmethod
    def for_entry(cls, entry):
        initial = {
            "date": entry.date,
            "site": entry.site,
            "area": entry.area,
            "weather": entry.weather,
            "manpower": entry.manpower,
            "obstacles": entry.obstacles,
            "safety_incidents": entry.safety_incidents,
            "notes": entry.notes,
            "materials_required": entry.materials_required,
        }
        for idx, value in enumerate(entry.category_progress.values()):
            initial[f"progress_{idx}"] = value
        return cls(initial=initial, categories=entry.category_progress.keys())

    def progress_fields(self):
        return [self[f"progress_{idx}"] for idx in range(len(self.category_names))]

    def clean_new_category(self):
        name = (self.cleaned_data.get("new_category") or "").strip()
        if name and name in self.category_names:
            raise forms.ValidationError(f"Category '{name}' already exists.")
        return name

    def apply_to(self, entry):
        """Copy cleaned values onto a draft entry."""
        data = self.cleaned_data
        entry.date = data["date"]
        entry.site = data["site"].strip()
        for name in ("area", "weather", "manpower", "obstacles", "notes"):
            setattr(entry, name, data.get(name) or "")
        entry.safety_incidents = data.get("safety_incidents") or "None"
        entry.materials_required = bool(data.get("materials_required"))

        entry.category_progress = {}
        for idx, name in enumerate(self.category_names):
            entry.set_progress(name, data.get(f"progress_{idx}") or 0)
        for name in data.get("remove_categories") or []:
            entry.remove_category(name)
        if data.get("new_category"):
            entry.add_category(data["new_category"])
        return entry


# ---------------------------
# MATERIAL ITEMS
# ---------------------------
class MaterialItemForm(forms.Form):
    name = forms.CharField(max_length=255, required=False, widget=forms.TextInput(attrs={
        "class": "w-full border rounded px-3 py-2",
        "placeholder": "Cement 50kg",
    }))
    quantity = forms.CharField(max_length=50, required=False, widget=forms.TextInput(attrs={
        "class": "w-full border rounded px-3 py-2",
    }))
    needed_by = forms.DateField(required=False, widget=forms.DateInput(attrs={
        "type": "date",
        "class": "w-full border rounded px-3 py-2",
    }))
    notes = forms.CharField(required=False, widget=forms.TextInput(attrs={
        "class": "w-full border rounded px-3 py-2",
    }))


MaterialItemFormSet = forms.formset_factory(MaterialItemForm, extra=1, can_delete=True)


def apply_material_items(formset, entry):
    for form in formset:
        if not form.has_changed() or form.cleaned_data.get("DELETE"):
            continue
        data = form.cleaned_data
        if not (data.get("name") or data.get("quantity")):
            continue
        entry.add_material_item(
            name=data.get("name") or "",
            quantity=data.get("quantity") or "",
            needed_by=to_date(data.get("needed_by")),
            notes=data.get("notes") or "",
        )
    return entry


def validate_photo(upload):
    """Return an error message for an unusable upload, or None."""
    if upload.content_type not in ALLOWED_UPLOAD_TYPES:
        return f"{upload.name} has invalid file type."
    if upload.size > MAX_UPLOAD_SIZE:
        return f"{upload.name} exceeds 5 MB."
    return None
