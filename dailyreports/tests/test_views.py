import json
from unittest import mock

import pytest
import requests
from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse
from django.utils import timezone

from dailyreports.entry import Entry
from dailyreports.models import EntryRow
from dailyreports.store import DatabaseStore


pytestmark = pytest.mark.django_db

SITE = "Prime 11 Unit 213"


def form_data(**overrides):
    data = {
        "date": timezone.localdate().isoformat(),
        "site": SITE,
        "area": "Kitchen",
        "weather": "Sunny",
        "manpower": "4 tilers",
        "safety_incidents": "None",
        "categories": "Demolition\nElectrical",
        "progress_0": "150",
        "progress_1": "40",
        "materials-TOTAL_FORMS": "1",
        "materials-INITIAL_FORMS": "0",
        "materials-MIN_NUM_FORMS": "0",
        "materials-MAX_NUM_FORMS": "1000",
        "materials-0-name": "",
        "materials-0-quantity": "",
    }
    data.update(overrides)
    return data


@pytest.fixture
def saved_entry():
    entry = Entry(date=timezone.localdate(), site=SITE, area="Lobby")
    entry.set_progress("Demolition", 80)
    DatabaseStore().insert(entry)
    return entry


def test_entry_list_renders_form(client):
    response = client.get(reverse("dailyreports:entry_list"))
    assert response.status_code == 200
    assert "Doors &amp; Windows" in response.content.decode()
    assert response.context["form"].initial["site"] == SITE


def test_entry_list_prefills_carried_forward_progress(client, saved_entry):
    response = client.get(reverse("dailyreports:entry_list"))
    form = response.context["form"]
    assert form.initial["progress_0"] == 80
    assert [e.id for e in response.context["entries"]] == [saved_entry.id]


def test_create_entry_clamps_progress(client):
    response = client.post(reverse("dailyreports:entry_create"), form_data())
    assert response.status_code == 302

    row = EntryRow.objects.get()
    assert row.category_progress == {"Demolition": 100, "Electrical": 40}
    assert row.area == "Kitchen"


def test_create_entry_with_browser_line_endings(client):
    data = form_data(categories="Demolition\r\nElectrical", notes="Lift broken\r\nTiles late")
    client.post(reverse("dailyreports:entry_create"), data)

    entry = EntryRow.objects.get().to_entry()
    assert list(entry.category_progress) == ["Demolition", "Electrical"]
    assert entry.category_progress["Demolition"] == 100


def test_create_entry_with_new_category_and_material(client):
    data = form_data(**{
        "new_category": "Waterproofing",
        "remove_categories": ["Electrical"],
        "materials_required": "on",
        "materials-0-name": "Cement",
        "materials-0-quantity": "10 bags",
    })
    client.post(reverse("dailyreports:entry_create"), data)

    entry = EntryRow.objects.get().to_entry()
    assert list(entry.category_progress) == ["Demolition", "Waterproofing"]
    assert entry.materials_required is True
    assert [m.name for m in entry.material_items] == ["Cement"]


def test_create_entry_with_photo(client, settings, make_png):
    photo = SimpleUploadedFile("site.png", make_png(), content_type="image/png")
    client.post(reverse("dailyreports:entry_create"), dict(form_data(), photos=[photo]))

    row = EntryRow.objects.get()
    assert len(row.photo_urls) == 1
    assert row.photo_urls[0].startswith(settings.MEDIA_URL + "entry_photos/")


def test_create_entry_rejects_bad_photo_type(client):
    upload = SimpleUploadedFile("notes.txt", b"hello", content_type="text/plain")
    response = client.post(reverse("dailyreports:entry_create"), dict(form_data(), photos=[upload]), follow=True)

    assert EntryRow.objects.get().photo_urls == []
    assert "notes.txt has invalid file type." in [str(m) for m in response.context["messages"]]


def test_invalid_form_is_redisplayed(client):
    response = client.post(reverse("dailyreports:entry_create"), form_data(date=""))
    assert response.status_code == 400
    assert not EntryRow.objects.exists()


def test_duplicate_category_is_rejected(client):
    response = client.post(reverse("dailyreports:entry_create"), form_data(new_category="Electrical"))
    assert response.status_code == 400
    assert "new_category" in response.context["form"].errors


def test_delete_entry(client, saved_entry):
    response = client.post(reverse("dailyreports:entry_delete", args=[saved_entry.id]))
    assert response.status_code == 302
    assert not EntryRow.objects.exists()


def test_preview_returns_report_html(client, saved_entry):
    response = client.get(reverse("dailyreports:entry_preview", args=[saved_entry.id]))
    body = response.content.decode()
    assert f"Daily Report - {saved_entry.date.isoformat()}" in body
    assert "Lobby" in body


def test_unknown_entry_is_404(client):
    assert client.get(reverse("dailyreports:entry_pdf", args=["nope"])).status_code == 404


def test_entry_pdf_download(client, saved_entry):
    response = client.get(reverse("dailyreports:entry_pdf", args=[saved_entry.id]))
    assert response.status_code == 200
    assert response["Content-Type"] == "application/pdf"
    assert f"Daily-Report_{saved_entry.date.isoformat()}_{SITE}.pdf" in response["Content-Disposition"]
    assert response.content.startswith(b"%PDF")


def test_export_all_pdf_without_entries_redirects(client):
    response = client.get(reverse("dailyreports:export_pdf"))
    assert response.status_code == 302


def test_export_all_pdf(client, saved_entry):
    response = client.get(reverse("dailyreports:export_pdf"))
    assert response.status_code == 200
    assert f"Daily-Reports_{timezone.localdate().isoformat()}.pdf" in response["Content-Disposition"]


def test_export_json(client, saved_entry):
    response = client.get(reverse("dailyreports:export_json"))
    data = json.loads(response.content)
    assert [item["id"] for item in data] == [saved_entry.id]
    assert data[0]["categoryProgress"]["Demolition"] == 80


def test_export_xlsx(client, saved_entry):
    response = client.get(reverse("dailyreports:export_xlsx"))
    assert response.status_code == 200
    assert response.content[:2] == b"PK"


def test_weather_lookup_success(client):
    with mock.patch("dailyreports.views.weather_text", return_value=("Clear, 28°C", "")):
        response = client.get(reverse("dailyreports:weather_lookup"), {"lat": "1.5", "lon": "103.8"})
    assert response.json() == {"weather": "Clear, 28°C", "error": ""}


def test_weather_lookup_keeps_typed_text_when_offline(client):
    with mock.patch("dailyreports.weather.requests.get", side_effect=requests.ConnectionError):
        response = client.get(
            reverse("dailyreports:weather_lookup"),
            {"lat": "1.5", "lon": "103.8", "current": "Humid"},
        )
    assert response.json() == {"weather": "Humid", "error": "Weather service unavailable."}


def test_weather_lookup_without_location(client):
    response = client.get(reverse("dailyreports:weather_lookup"), {"current": "Humid"})
    assert response.json() == {"weather": "Humid", "error": "Location unavailable."}
