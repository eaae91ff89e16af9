from django.contrib import admin
from django.utils.html import format_html
from .models import EntryRow


# ---------------------------
# ENTRY ADMIN
# ---------------------------
@admin.register(EntryRow)
class EntryRowAdmin(admin.ModelAdmin):
    list_display = (
        'entry_date',
        'site',
        'area',
        'progress_badge',
        'materials_required',
        'photo_count',
        'created_at',
    )

    list_filter = (
        'site',
        'entry_date',
        'materials_required',
    )

    search_fields = (
        'site',
        'area',
        'notes',
        'obstacles',
    )

    readonly_fields = (
        'id',
        'created_at',
    )

    fieldsets = (
        ('Report', {
            'fields': ('id', 'entry_date', 'site', 'area')
        }),
        ('Progress', {
            'fields': ('category_progress',)
        }),
        ('Site Conditions', {
            'fields': ('weather', 'manpower', 'obstacles', 'safety_incidents', 'notes')
        }),
        ('Materials & Photos', {
            'fields': ('materials_required', 'material_items', 'photo_urls')
        }),
        ('Audit', {
            'fields': ('created_at',)
        }),
    )

    def progress_badge(self, obj):
        value = obj.overall_progress
        color = 'green' if value >= 100 else 'blue' if value > 0 else 'gray'
        return format_html(
            '<span style="padding:4px 8px;border-radius:8px;background:{};color:white;">{}%</span>',
            color,
            value
        )
    progress_badge.short_description = "Avg. Progress"

    def photo_count(self, obj):
        return len(obj.photo_urls or [])
    photo_count.short_description = "Photos"
