from django.urls import path
from . import views

app_name = "dailyreports"

urlpatterns = [
    path("", views.entry_list, name="entry_list"),

    # Entries
    path("entries/", views.entry_create, name="entry_create"),
    path("entries/<str:entry_id>/delete/", views.entry_delete, name="entry_delete"),
    path("entries/<str:entry_id>/preview/", views.entry_preview, name="entry_preview"),
    path("entries/<str:entry_id>/pdf/", views.entry_pdf, name="entry_pdf"),

    # Exports
    path("export/pdf/", views.export_all_pdf, name="export_pdf"),
    path("export/json/", views.export_json, name="export_json"),
    path("export/xlsx/", views.export_xlsx, name="export_xlsx"),

    # AJAX
    path("weather/", views.weather_lookup, name="weather_lookup"),
]
